"""
Relation traversal: turns the links of a relation into new resources.

``follow`` defers fetching: children come back unsynchronized. ``follow_and_get``
fetches every child concurrently and fails on the first error, cancelling
the GETs still in flight. ``params`` expand templated links and are merged
into the query of plain ones.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, List, Optional

from .errors import NotRelatedError
from .expand import Params, expand

if TYPE_CHECKING:  # pragma: no cover
    from .protocol import Result
    from .resource import Resource


def related_urls(
    resource: "Resource", rel: str, params: Optional[Params] = None
) -> List[str]:
    links = resource.links(rel)
    if not links:
        raise NotRelatedError(self_uri=resource.self_uri, rel=rel)

    urls: List[str] = []
    for link in links:
        if params:
            urls.extend(expand(link, params))
        else:
            urls.append(link.href)
    return urls


async def follow(
    resource: "Resource", rel: str, params: Optional[Params] = None
) -> List["Resource"]:
    urls = related_urls(resource, rel, params)
    resource.log.debug(
        "hal.follow",
        extra={"url": resource.self_uri, "rel": rel, "count": len(urls)},
    )
    return [resource.spawn(url) for url in urls]


async def follow_and_get(
    resource: "Resource", rel: str, params: Optional[Params] = None
) -> List["Result"]:
    children = await follow(resource, rel, params)
    tasks = [asyncio.ensure_future(child.get()) for child in children]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        # first failure wins: stop the siblings before propagating
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return list(results)


__all__ = ["related_urls", "follow", "follow_and_get"]
