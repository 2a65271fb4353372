"""RFC 6570 expansion of link hrefs, with a query-merge fallback for plain URLs."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Union

import httpx
from uritemplate import URITemplate

from .links import Link, LinkSpec

Params = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]


def normalize_params(params: Optional[Params]) -> List[Mapping[str, Any]]:
    if params is None:
        return []
    if isinstance(params, Mapping):
        return [params]
    return [p or {} for p in params]


def _href_and_templated(link_or_url: LinkSpec) -> tuple[str, bool]:
    if isinstance(link_or_url, str):
        return link_or_url, "{" in link_or_url
    link = Link.from_spec(link_or_url)
    return link.href, link.templated


def expand(link_or_url: LinkSpec, params: Optional[Params] = None) -> List[str]:
    """
    Expands a link (or url) once per params object, preserving order.
    - No params (None or []) -> [href], unexpanded.
    - Non-templated href that already carries a query string -> params are
      merged into that query; same-named keys are overridden.
    - Otherwise the href is an RFC 6570 template.
    Example: expand('/a{?foo}', [{'foo': 1}, {'foo': 2}]) -> ['/a?foo=1', '/a?foo=2']
    """
    href, templated = _href_and_templated(link_or_url)
    param_list = normalize_params(params)
    if not param_list:
        return [href]

    if not templated:
        url = httpx.URL(href)
        if url.query:
            return [str(url.copy_merge_params(dict(p))) for p in param_list]

    template = URITemplate(href)
    return [template.expand(dict(p)) for p in param_list]


__all__ = ["expand", "normalize_params", "Params"]
