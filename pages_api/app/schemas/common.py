"""
Shared pieces for the API schemas.

``ApiModel`` is the base for every request and response body: field
names are snake_case in Python and camelCase on the wire, and string
input is trimmed.  The list envelope (``ListResponse``) and the
minimal delete confirmation (``DeletedItem``) are shared by pages,
tracks and playlists.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..services.store import is_valid_id, normalize_id


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        from_attributes=True,
    )


_HTTP_URL = TypeAdapter(HttpUrl)


def validate_url(value: Optional[str]) -> Optional[str]:
    """Accept absolute http(s) URLs only; the original string is kept.

    ``HttpUrl`` parsing silently drops tabs and newlines, so any
    whitespace or control character is rejected first.
    """
    if value is None:
        return value
    if any(ch.isspace() or ord(ch) < 32 for ch in value):
        raise ValueError("Must be a valid URL")
    try:
        _HTTP_URL.validate_python(value)
    except PydanticValidationError as exc:
        raise ValueError("Must be a valid URL") from exc
    return value


def validate_object_ids(values: Optional[List[str]], label: str) -> Optional[List[str]]:
    """Check identifier shape, lower-case and de-duplicate (order kept)."""
    if values is None:
        return None
    seen: List[str] = []
    for value in values:
        if not is_valid_id(value):
            raise ValueError(f"Invalid {label} ID format")
        value = normalize_id(value)
        if value not in seen:
            seen.append(value)
    return seen


def reject_null(value):
    """``field_validator`` body for partial updates of required fields."""
    if value is None:
        raise ValueError("Cannot be null")
    return value


class Pagination(ApiModel):
    current_page: int = Field(..., examples=[1])
    total_pages: int = Field(..., examples=[3])
    total_items: int = Field(..., examples=[25])
    items_per_page: int = Field(..., examples=[10])


ItemT = TypeVar("ItemT")


class ListResponse(ApiModel, Generic[ItemT]):
    """Page envelope returned by every list endpoint."""

    items: List[ItemT]
    pagination: Pagination


class DeletedItem(ApiModel):
    """Identity of a record that was just deleted."""

    id: str
    title: Optional[str] = None
