from __future__ import annotations

from typing import Optional


class HalError(Exception):
    """Base error for halsync failures."""


class ValidationError(HalError, ValueError):
    """A link was described without an ``href``."""


class ContentTypeMismatch(HalError):
    """
    A body-bearing response did not declare ``application/hal+json``.
    Logged, never raised: the resource is left untouched.
    """

    def __init__(self, *, url: str, content_type: Optional[str]):
        super().__init__(f"illegal content type at {url} : {content_type}")
        self.url = url
        self.content_type = content_type


class ParseFailure(HalError):
    """Malformed JSON body. Logged, never raised: prior state is retained."""


class NotRelatedError(HalError, LookupError):
    def __init__(self, *, self_uri: Optional[str], rel: str):
        super().__init__(f"{self_uri} not related with '{rel}'")
        self.self_uri = self_uri
        self.rel = rel


class TransportError(HalError):
    """Network or protocol failure raised by the transport."""


class MissingTransportError(HalError):
    pass


class ModelValidationError(HalError):
    pass


__all__ = [
    "HalError",
    "ValidationError",
    "ContentTypeMismatch",
    "ParseFailure",
    "NotRelatedError",
    "TransportError",
    "MissingTransportError",
    "ModelValidationError",
]
