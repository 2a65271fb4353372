import logging
from typing import Any, Mapping, Optional

import httpx

from .config import DEFAULT_TIMEOUT_SECONDS, load_env_config
from .expand import Params
from .links import LinkSpec
from .protocol import Result
from .resource import Fetch, Resource
from .transport import HttpxTransport


class HalSession:
    """
    Owns the defaults every resource shares: transport and logger.
    Resources built here, and every resource they spawn through POST
    ``Location`` or traversal, reuse them.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        auth: Optional[httpx.Auth] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
        fetch: Optional[Fetch] = None,
    ):
        self.log = logger or logging.getLogger("halsync.resource")

        self._owns_http = http is None and fetch is None
        if fetch is None:
            http = http or httpx.AsyncClient(
                base_url=(base_url or "").rstrip("/"),
                auth=auth,
                headers=dict(headers or {}),
                timeout=timeout_seconds,
            )
            fetch = HttpxTransport(http)
        self.http = http
        self.fetch: Fetch = fetch

    @classmethod
    def from_env(cls, **kwargs: Any) -> "HalSession":
        config = load_env_config()
        return cls(
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            auth=config.auth(),
            **kwargs,
        )

    def resource(
        self,
        self_uri: Optional[LinkSpec] = None,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Resource:
        return Resource(self_uri, body, fetch=self.fetch, logger=self.log)

    async def get(self, self_uri: LinkSpec, params: Optional[Params] = None) -> Result:
        return await self.resource(self_uri).get(params)

    async def aclose(self) -> None:
        if self._owns_http and self.http is not None:
            await self.http.aclose()

    async def __aenter__(self) -> "HalSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["HalSession"]
