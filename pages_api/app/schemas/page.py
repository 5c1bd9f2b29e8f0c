"""
Pydantic models for dynamic pages.

A page is a piece of editable content (markdown or rich text)
addressed by a unique ``slug``.  ``PageCreate`` may omit the slug, in
which case the service derives one from the title.  ``PageUpdate``
carries only the fields the client wants to change.
"""

import re
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .common import ApiModel, reject_null, validate_url

MAX_GROUPS = 10
SLUG_MAX_LENGTH = 100
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class EditorType(str, Enum):
    markdown = "markdown"
    wysiwyg = "wysiwyg"


def _clean_groups(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    groups: List[str] = []
    for label in value:
        label = label.strip()
        if not label:
            raise ValueError("Group labels cannot be empty")
        if label not in groups:
            groups.append(label)
    if len(groups) > MAX_GROUPS:
        raise ValueError(f"Groups cannot contain more than {MAX_GROUPS} items")
    return groups


def _check_slug(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.lower()
    if not _SLUG_RE.match(value):
        raise ValueError("Slug may only contain lowercase letters, numbers and single hyphens")
    return value


class PageCreate(ApiModel):
    """Schema for creating a page."""

    title: str = Field(..., min_length=1, max_length=200, examples=["About us"])
    description: str = Field(..., min_length=1, max_length=500, examples=["Who we are"])
    image_url: str = Field(..., examples=["https://example.com/about.png"])
    thumbnail_url: str = Field(..., examples=["https://example.com/about-thumb.png"])
    groups: List[str] = Field(default_factory=list, examples=[["company"]])
    editor_type: EditorType = EditorType.markdown
    slug: Optional[str] = Field(None, max_length=SLUG_MAX_LENGTH, examples=["about-us"])
    content: str = Field(..., min_length=1, examples=["# About us"])

    @field_validator("image_url", "thumbnail_url")
    @classmethod
    def check_urls(cls, v):
        return validate_url(v)

    @field_validator("groups")
    @classmethod
    def check_groups(cls, v):
        return _clean_groups(v)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return _check_slug(v)


class PageUpdate(ApiModel):
    """Schema for updating a page.

    All fields are optional; only provided values are validated and
    written.  Required page fields may be omitted but not set to null.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    groups: Optional[List[str]] = None
    editor_type: Optional[EditorType] = None
    slug: Optional[str] = Field(None, max_length=SLUG_MAX_LENGTH)
    content: Optional[str] = Field(None, min_length=1)

    @field_validator(
        "title", "description", "image_url", "thumbnail_url", "groups", "editor_type", "slug", "content"
    )
    @classmethod
    def check_not_null(cls, v):
        return reject_null(v)

    @field_validator("image_url", "thumbnail_url")
    @classmethod
    def check_urls(cls, v):
        return validate_url(v)

    @field_validator("groups")
    @classmethod
    def check_groups(cls, v):
        return _clean_groups(v)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return _check_slug(v)


class PageRead(ApiModel):
    """Schema for reading a page from the API."""

    id: str
    title: str
    description: str
    image_url: str
    thumbnail_url: str
    groups: List[str]
    editor_type: EditorType
    slug: str
    content: str
    created_at: str
    updated_at: str
