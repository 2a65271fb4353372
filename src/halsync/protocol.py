"""
Request/response pipeline shared by the verb handlers on Resource.

Each step is a small named function so the order a verb applies them in is
explicit: build request -> send -> read body -> capture Allow -> correct self
-> envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Mapping, Optional

import httpx

from . import hal
from .errors import ContentTypeMismatch, ParseFailure

if TYPE_CHECKING:  # pragma: no cover
    from .resource import Resource

HAL_HEADERS = {"accept": hal.MIME, "content-type": hal.MIME}

# statuses that never carry an entity body
NO_BODY_STATUSES = frozenset({204, 304})


@dataclass(frozen=True)
class Request:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None


@dataclass(frozen=True)
class Result:
    """What every verb resolves to; unpacks as ``resource, response``."""

    resource: "Resource"
    response: httpx.Response

    def __iter__(self) -> Iterator[Any]:
        return iter((self.resource, self.response))


def build_request(
    method: str,
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    body: Optional[str] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> Request:
    merged = httpx.Headers(dict(headers or {}))
    if overrides:
        merged.update(dict(overrides))
    return Request(
        method=method.upper(), url=url, headers=dict(merged.items()), body=body
    )


def parse_allow(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [method.strip() for method in value.split(",") if method.strip()]


def capture_allow(resource: "Resource", response: httpx.Response) -> httpx.Response:
    methods = parse_allow(response.headers.get("allow"))
    if methods:
        resource.allow(methods)
    return response


def is_body_candidate(response: httpx.Response) -> bool:
    status = response.status_code
    if status < 200 or status in NO_BODY_STATUSES:
        return False
    # a missing header means unknown length, not an empty body
    content_length = response.headers.get("content-length")
    if content_length is not None:
        try:
            return int(content_length) > 0
        except ValueError:
            return True
    return True


def read_body(
    resource: "Resource", request: Request, response: httpx.Response
) -> bool:
    """
    Parses a HAL response body into the resource.
    Returns False, leaving the resource untouched, when the response has no
    body, declares another content type, or carries malformed JSON.
    """
    if not is_body_candidate(response):
        return False

    content_type = response.headers.get("content-type")
    if not hal.is_hal_media_type(content_type):
        mismatch = ContentTypeMismatch(url=request.url, content_type=content_type)
        resource.log.warning(
            "hal.content_type_mismatch",
            extra={
                "method": request.method,
                "url": request.url,
                "status": response.status_code,
                "content_type": content_type,
                "error": str(mismatch),
            },
        )
        return False

    try:
        payload = response.json()
    except ValueError as exc:
        failure = ParseFailure(
            f"Expected JSON from {request.method} {request.url}: {exc}"
        )
        resource.log.warning(
            "hal.parse_failure",
            extra={
                "method": request.method,
                "url": request.url,
                "status": response.status_code,
                "error": str(failure),
            },
        )
        return False

    return resource.parse(payload) is not None


def resolve_location(request: Request, response: httpx.Response) -> Optional[str]:
    location = response.headers.get("location")
    if not location:
        return None
    return str(httpx.URL(request.url).join(location))


def envelope(resource: "Resource", response: httpx.Response) -> Result:
    return Result(resource=resource, response=response)


__all__ = [
    "HAL_HEADERS",
    "Request",
    "Result",
    "build_request",
    "parse_allow",
    "capture_allow",
    "is_body_candidate",
    "read_body",
    "resolve_location",
    "envelope",
]
