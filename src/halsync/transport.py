import logging
import time
from typing import Optional

import httpx

from .errors import TransportError
from .protocol import Request


class HttpxTransport:
    """
    Default transport: sends a Request through an httpx.AsyncClient.
    - No retries; the client's timeout is the only timeout
    - httpx failures surface as TransportError
    - Non-2xx responses are returned, not raised; resources decide
    """

    def __init__(
        self, http: httpx.AsyncClient, *, logger: Optional[logging.Logger] = None
    ):
        self.http = http
        self.log = logger or logging.getLogger("halsync.transport")

    async def __call__(self, request: Request) -> httpx.Response:
        start = time.perf_counter()
        try:
            resp = await self.http.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Timeout calling {request.method} {request.url}: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"HTTPX error calling {request.method} {request.url}: {exc}"
            ) from exc

        duration_ms = int((time.perf_counter() - start) * 1000)
        self.log.debug(
            "hal.request",
            extra={
                "method": request.method,
                "url": str(resp.request.url),
                "status": resp.status_code,
                "duration_ms": duration_ms,
            },
        )
        return resp


__all__ = ["HttpxTransport"]
