import logging
from typing import Any, Optional

LOG_EXTRA_FIELDS = (
    "method",
    "url",
    "status",
    "duration_ms",
    "rel",
    "count",
    "content_type",
    "error",
)


class LogfmtFormatter(logging.Formatter):
    """
    logfmt lines for halsync events: ``level=warning logger=halsync.resource
    event=hal.content_type_mismatch url=... content_type=text/plain``.
    Only the extras named in LOG_EXTRA_FIELDS are rendered.
    """

    def __init__(self, *, with_time: bool = False):
        super().__init__()
        self.with_time = with_time

    def format(self, record: logging.LogRecord) -> str:
        kv: list[str] = []
        if self.with_time:
            kv.append(f"ts={self.formatTime(record, '%Y-%m-%dT%H:%M:%S')}")
        kv.append(f"level={record.levelname.lower()}")
        kv.append(f"logger={record.name}")

        msg = record.getMessage()
        if msg:
            kv.append(f"event={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info and record.exc_info[0] is not None:
            kv.append(f"exc_type={record.exc_info[0].__name__}")

        return " ".join(kv)

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, (int, float, bool)):
            return str(val)
        s = str(val)
        if not s or any(c in s for c in ' ="'):
            s = '"' + s.replace('"', '\\"') + '"'
        return s


def setup_logging(
    level: str = "INFO", *, logger_name: Optional[str] = None, with_time: bool = False
) -> logging.Logger:
    """
    Install a single logfmt handler on ``logger_name`` (root by default) and
    return that logger. Calling it again replaces the handler.
    """
    target = logging.getLogger(logger_name)
    for h in list(target.handlers):
        target.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter(with_time=with_time))
    target.addHandler(handler)
    target.setLevel(getattr(logging, level.upper(), logging.INFO))
    return target


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS"]
