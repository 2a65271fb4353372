from __future__ import annotations

import copy
import json
import logging
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
    Union,
)

import httpx
import jsonpatch
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from . import hal, protocol, traversal
from .errors import (
    HalError,
    MissingTransportError,
    ModelValidationError,
    ParseFailure,
)
from .expand import Params, expand
from .links import Link, LinkSpec
from .protocol import HAL_HEADERS, Request, Result

T = TypeVar("T", bound=BaseModel)

Fetch = Callable[[Request], Awaitable[httpx.Response]]

RESERVED_KEYS = frozenset({hal.LINKS_KEY, hal.EMBEDDED_KEY})


class Resource:
    """
    A HAL resource: one server representation, kept in sync through HTTP.

    - Body properties live in an explicit map, readable as attributes
      (``order.total``) or items (``order["_type"]``).
    - ``_links`` and ``_embedded`` are split off at parse time.
    - Verbs resolve to ``Result(resource, response)``; the resource is
      mutated in place, except POST answered with a ``Location``.
    - Calls on one instance must not overlap; there is no internal locking.
    """

    def __init__(
        self,
        self_uri: Optional[LinkSpec] = None,
        body: Optional[Union[Mapping[str, Any], str]] = None,
        *,
        fetch: Optional[Fetch] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._fetch = fetch
        self._log = logger or logging.getLogger("halsync.resource")
        self._self_uri: Optional[str] = None
        self._properties: Dict[str, Any] = {}
        self._links: Optional[Dict[str, Any]] = None
        self._embedded: Optional[Dict[str, Any]] = None
        self._allowed: List[str] = []
        self._original_body: Optional[Dict[str, Any]] = None

        self_link = Link.from_spec(self_uri) if self_uri is not None else None
        if self_link is not None:
            self._self_uri = self_link.href

        if body is not None:
            self.parse(body)
            self.correct_self()
        elif self_link is not None:
            # lazy: identity only, nothing fetched yet
            self._links = {"self": self_link.to_dict()}

    # --- Property sugar ---------------------------------------------------- #

    def __getattr__(self, name: str) -> Any:
        # only reached when normal lookup fails
        if name.startswith("_"):
            raise AttributeError(name)
        properties = self.__dict__.get("_properties", {})
        try:
            return properties[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} has no property {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        elif hasattr(type(self), name):
            raise AttributeError(
                f"{name!r} is a {type(self).__name__} member; "
                f"use item access (resource[{name!r}]) for that property"
            )
        else:
            self._properties[name] = value

    def __delattr__(self, name: str) -> None:
        if not name.startswith("_") and name in self._properties:
            del self._properties[name]
        else:
            object.__delattr__(self, name)

    def __getitem__(self, key: str) -> Any:
        return self._properties[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key in RESERVED_KEYS:
            raise KeyError(f"{key!r} is reserved for HAL metadata")
        self._properties[key] = value

    def __delitem__(self, key: str) -> None:
        del self._properties[key]

    def __contains__(self, key: object) -> bool:
        return key in self._properties

    def __repr__(self) -> str:
        return f"<Resource {self._self_uri or '(no identity)'}>"

    # --- State ------------------------------------------------------------- #

    @property
    def self_uri(self) -> Optional[str]:
        return self._self_uri

    @property
    def log(self) -> logging.Logger:
        return self._log

    @property
    def fetch(self) -> Optional[Fetch]:
        return self._fetch

    @property
    def properties(self) -> Dict[str, Any]:
        return self._properties

    @property
    def link_map(self) -> Dict[str, Any]:
        return copy.deepcopy(self._links or {})

    @property
    def embedded_map(self) -> Dict[str, Any]:
        return copy.deepcopy(self._embedded or {})

    @property
    def allowed_methods(self) -> List[str]:
        return list(self._allowed)

    @property
    def original_body(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._original_body)

    def parse(
        self, document: Union[Mapping[str, Any], str, bytes]
    ) -> Optional[Dict[str, Any]]:
        """
        Hydrates this resource from a HAL document (object or JSON string).
        Returns the document as a dict, or None when it could not be parsed
        (malformed JSON, or anything but an object, JSON null included);
        in that case the failure is logged and the prior state is kept.
        """
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except ValueError as exc:
                self._log_parse_failure(
                    ParseFailure(f"Malformed JSON for {self._self_uri}: {exc}")
                )
                return None
        if not isinstance(document, Mapping):
            self._log_parse_failure(
                ParseFailure(
                    f"Expected a JSON object for {self._self_uri}, "
                    f"got {type(document).__name__}"
                )
            )
            return None

        payload = dict(document)
        properties, links, embedded = hal.split_document(payload)
        self._properties = properties
        self._links = links
        self._embedded = embedded
        self._original_body = copy.deepcopy(properties)
        return payload

    def _log_parse_failure(self, failure: ParseFailure) -> None:
        self._log.warning(
            "hal.parse_failure", extra={"url": self._self_uri, "error": str(failure)}
        )

    def serialize(
        self, *, include_links: bool = True, include_embedded: bool = True
    ) -> Dict[str, Any]:
        result = copy.deepcopy(self._properties)
        if include_links and self._links is not None:
            result[hal.LINKS_KEY] = copy.deepcopy(self._links)
        if include_embedded and self._embedded is not None:
            result[hal.EMBEDDED_KEY] = copy.deepcopy(self._embedded)
        return result

    def to_json(self, **options: bool) -> str:
        return json.dumps(self.serialize(**options))

    def to_model(self, model: Type[T]) -> T:
        try:
            return model.model_validate(self.serialize())
        except PydanticValidationError as exc:
            raise ModelValidationError(
                f"Resource {self._self_uri} did not match model "
                f"{model.__name__}: {exc}"
            ) from exc

    def links(self, rel: str) -> List[Link]:
        """
        Links for a relation; [] when the relation is absent.
        Example: order.links('ea:admin') -> [Link(href='/admins/2'), ...]
        """
        matches = hal.as_list((self._links or {}).get(rel))
        if not matches and rel == "self" and self._self_uri:
            return [Link(href=self._self_uri)]
        return [Link.from_spec(match) for match in matches]

    def embedded(self, rel: str) -> List["Resource"]:
        """Snapshot resources from ``_embedded``; they have no transport."""
        items = hal.as_list((self._embedded or {}).get(rel))
        return [Resource(body=item, logger=self._log) for item in items]

    def allow(self, methods: Optional[List[str]] = None) -> List[str]:
        if methods is not None:
            self._allowed = list(methods)
        return list(self._allowed)

    def expand(
        self, link_or_url: LinkSpec, params: Optional[Params] = None
    ) -> List[str]:
        return expand(link_or_url, params)

    def correct_self(self) -> None:
        matches = hal.as_list((self._links or {}).get("self"))
        if matches and isinstance(matches[0], Mapping) and matches[0].get("href"):
            self._self_uri = matches[0]["href"]

    def clone(self) -> "Resource":
        twin = Resource(fetch=self._fetch, logger=self._log)
        twin._self_uri = self._self_uri
        twin._properties = copy.deepcopy(self._properties)
        twin._links = copy.deepcopy(self._links)
        twin._embedded = copy.deepcopy(self._embedded)
        twin._allowed = list(self._allowed)
        twin._original_body = copy.deepcopy(self._original_body)
        return twin

    def spawn(
        self, self_uri: LinkSpec, body: Optional[Mapping[str, Any]] = None
    ) -> "Resource":
        """A new, independent resource sharing this one's transport and logger."""
        return Resource(self_uri, body, fetch=self._fetch, logger=self._log)

    # --- HTTP ---------------------------------------------------------------- #

    def _require_self(self) -> str:
        if not self._self_uri:
            raise HalError("Resource has no self uri to issue requests against.")
        return self._self_uri

    async def _send(self, request: Request) -> httpx.Response:
        if self._fetch is None:
            raise MissingTransportError(
                f"No transport configured for {request.method} {request.url}"
            )
        return await self._fetch(request)

    async def get(
        self,
        params: Optional[Params] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Result:
        """
        Fetches and merges the representation at ``self_uri``.
        ``params`` expand a templated self uri. A response that is not
        ``application/hal+json`` leaves the resource untouched and is still
        returned.
        """
        url = self._require_self()
        if params:
            url = self.expand(url, params)[0]
        request = protocol.build_request(
            "GET", url, headers=HAL_HEADERS, overrides=headers
        )
        response = await self._send(request)
        protocol.read_body(self, request, response)
        protocol.capture_allow(self, response)
        self.correct_self()
        return protocol.envelope(self, response)

    async def head(self, *, headers: Optional[Mapping[str, str]] = None) -> Result:
        return await self._inspect("HEAD", headers)

    async def options(self, *, headers: Optional[Mapping[str, str]] = None) -> Result:
        return await self._inspect("OPTIONS", headers)

    async def _inspect(
        self, method: str, headers: Optional[Mapping[str, str]]
    ) -> Result:
        request = protocol.build_request(
            method, self._require_self(), overrides=headers
        )
        response = await self._send(request)
        protocol.capture_allow(self, response)
        return protocol.envelope(self, response)

    async def post(
        self,
        data: Optional[Any] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Result:
        """
        POSTs ``data`` to this resource.
        When the response carries a ``Location`` (e.g. 201 Created) the
        created resource is fetched and its Result is returned instead.
        """
        request = protocol.build_request(
            "POST",
            self._require_self(),
            headers=HAL_HEADERS,
            body=json.dumps(data if data is not None else {}),
            overrides=headers,
        )
        response = await self._send(request)

        location = protocol.resolve_location(request, response)
        if location:
            self._log.debug(
                "hal.follow_location",
                extra={
                    "method": "POST",
                    "url": location,
                    "status": response.status_code,
                },
            )
            return await self.spawn(location).get()

        protocol.read_body(self, request, response)
        protocol.capture_allow(self, response)
        return protocol.envelope(self, response)

    async def put(self, *, headers: Optional[Mapping[str, str]] = None) -> Result:
        """Sends the full serialization (without ``_links``), then resyncs."""
        request = protocol.build_request(
            "PUT",
            self._require_self(),
            headers={"accept": hal.MIME, "content-type": hal.JSON_MIME},
            body=json.dumps(self.serialize(include_links=False)),
            overrides=headers,
        )
        response = await self._send(request)
        return await self._resync(request, response)

    def diff(self, to: Optional[Mapping[str, Any]] = None) -> jsonpatch.JsonPatch:
        """
        RFC 6902 patch for this resource.
        With ``to``: current state -> ``to``.
        Without: state at the last parse -> current state.
        """
        current = self.serialize(include_links=False, include_embedded=False)
        if to is not None:
            return jsonpatch.make_patch(current, dict(to))
        return jsonpatch.make_patch(self._original_body or {}, current)

    async def patch(
        self,
        to: Optional[Mapping[str, Any]] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Result:
        request = protocol.build_request(
            "PATCH",
            self._require_self(),
            headers={"accept": hal.MIME, "content-type": hal.JSON_PATCH_MIME},
            body=self.diff(to).to_string(),
            overrides=headers,
        )
        response = await self._send(request)
        return await self._resync(request, response)

    async def _resync(self, request: Request, response: httpx.Response) -> Result:
        protocol.capture_allow(self, response)
        if not response.is_success:
            self._log.warning(
                "hal.resync_skipped",
                extra={
                    "method": request.method,
                    "url": request.url,
                    "status": response.status_code,
                },
            )
            return protocol.envelope(self, response)
        # resync always targets self, even if the mutation moved the resource
        return await self.get()

    async def delete(self, *, headers: Optional[Mapping[str, str]] = None) -> Result:
        """
        DELETEs this resource. The body is never parsed and the local object
        is left as is; dropping the reference is up to the caller.
        """
        request = protocol.build_request(
            "DELETE", self._require_self(), headers=HAL_HEADERS, overrides=headers
        )
        response = await self._send(request)
        protocol.capture_allow(self, response)
        return protocol.envelope(self, response)

    # --- Traversal ----------------------------------------------------------- #

    async def follow(
        self, rel: str, params: Optional[Params] = None
    ) -> List["Resource"]:
        return await traversal.follow(self, rel, params)

    async def follow_and_get(
        self, rel: str, params: Optional[Params] = None
    ) -> List[Result]:
        return await traversal.follow_and_get(self, rel, params)


__all__ = ["Resource", "Fetch", "RESERVED_KEYS"]
