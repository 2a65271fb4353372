from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import httpx
from dotenv import load_dotenv

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class SessionConfig:
    base_url: str = ""
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    username: Optional[str] = None
    password: Optional[str] = None

    def auth(self) -> Optional[httpx.BasicAuth]:
        if not self.username:
            return None
        return httpx.BasicAuth(self.username, self.password or "")


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_env_config(*, use_dotenv: bool = True) -> SessionConfig:
    """Load session defaults from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    return SessionConfig(
        base_url=os.getenv("HALSYNC_BASE_URL", "").strip().rstrip("/"),
        timeout_seconds=_get_float_env(
            "HALSYNC_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
        ),
        username=os.getenv("HALSYNC_USERNAME", "").strip() or None,
        password=os.getenv("HALSYNC_PASSWORD") or None,
    )


__all__ = ["SessionConfig", "load_env_config", "DEFAULT_TIMEOUT_SECONDS"]
