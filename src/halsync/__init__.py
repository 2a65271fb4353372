"""halsync package exports."""

from .config import SessionConfig, load_env_config
from .errors import (
    ContentTypeMismatch,
    HalError,
    MissingTransportError,
    ModelValidationError,
    NotRelatedError,
    ParseFailure,
    TransportError,
    ValidationError,
)
from .expand import expand
from .hal import MIME, is_hal_media_type
from .links import Link
from .logging import setup_logging
from .protocol import Request, Result
from .resource import Resource
from .session import HalSession
from .transport import HttpxTransport

__all__ = [
    # Resources
    "Resource",
    "HalSession",
    "Link",
    "Request",
    "Result",
    "HttpxTransport",
    "expand",
    # Exceptions
    "HalError",
    "ValidationError",
    "ContentTypeMismatch",
    "ParseFailure",
    "NotRelatedError",
    "TransportError",
    "MissingTransportError",
    "ModelValidationError",
    # HAL utilities
    "MIME",
    "is_hal_media_type",
    # Config / logging
    "SessionConfig",
    "load_env_config",
    "setup_logging",
]
