import copy
from typing import Any, Dict, List, Optional, Tuple

MIME = "application/hal+json"
JSON_MIME = "application/json"
JSON_PATCH_MIME = "application/json-patch+json"

LINKS_KEY = "_links"
EMBEDDED_KEY = "_embedded"


def is_hal_media_type(content_type: Optional[str]) -> bool:
    """
    True for 'application/hal+json', with or without parameters.
    Example: is_hal_media_type('application/hal+json; charset=utf-8') -> True
    """
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() == MIME


def split_document(
    payload: Dict[str, Any],
) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    """
    Splits a HAL document into (properties, _links, _embedded).
    Everything is deep-copied; the reserved keys never end up in properties.
    """
    properties = copy.deepcopy(payload)
    links = properties.pop(LINKS_KEY, None)
    embedded = properties.pop(EMBEDDED_KEY, None)
    return properties, links, embedded


def as_list(value: Any) -> List[Any]:
    # HAL relations are either a single object or an array of them
    if not value:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


__all__ = [
    "MIME",
    "JSON_MIME",
    "JSON_PATCH_MIME",
    "LINKS_KEY",
    "EMBEDDED_KEY",
    "is_hal_media_type",
    "split_document",
    "as_list",
]
