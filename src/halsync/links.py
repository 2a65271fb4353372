from __future__ import annotations

from typing import Any, Dict, Mapping, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError


class Link(BaseModel):
    """
    A HAL link object.
    Only ``href`` is required; unknown link attributes are kept as extras so
    nothing a server sends is lost.
    """

    href: str
    templated: bool = False
    type: str = ""
    title: str = ""
    name: str = ""
    profile: str = ""
    hreflang: str = ""
    deprecation: str = ""

    model_config = ConfigDict(frozen=True, extra="allow")

    @field_validator("href")
    @classmethod
    def _href_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("href must not be empty")
        return value

    @field_validator(
        "type", "title", "name", "profile", "hreflang", "deprecation", mode="before"
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("templated", mode="before")
    @classmethod
    def _none_as_false(cls, value: Any) -> Any:
        return False if value is None else value

    @classmethod
    def from_spec(cls, spec: "LinkSpec") -> "Link":
        if isinstance(spec, Link):
            return spec
        if isinstance(spec, str):
            spec = {"href": spec}
        try:
            return cls.model_validate(spec)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Link requires a non-empty href, got {spec!r}"
            ) from exc

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


LinkSpec = Union[str, Mapping[str, Any], Link]

__all__ = ["Link", "LinkSpec"]
