"""
Pydantic models for playlists.

``tracks`` is derived from the tracks' own ``playlists`` field and is
therefore read-only here: clients change membership through the track
endpoints.
"""

from typing import List, Optional

from pydantic import Field, field_validator

from .common import ApiModel, reject_null, validate_url


class PlaylistCreate(ApiModel):
    """Schema for creating a playlist."""

    title: str = Field(..., min_length=1, max_length=200, examples=["Morning shows"])
    description: Optional[str] = Field(None, max_length=500)
    thumbnail: Optional[str] = None

    @field_validator("thumbnail")
    @classmethod
    def check_thumbnail(cls, v):
        return validate_url(v)


class PlaylistUpdate(ApiModel):
    """Schema for updating a playlist; all fields optional."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    thumbnail: Optional[str] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        return reject_null(v)

    @field_validator("thumbnail")
    @classmethod
    def check_thumbnail(cls, v):
        return validate_url(v)


class PlaylistRead(ApiModel):
    """Schema for reading a playlist from the API."""

    id: str
    title: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    tracks: List[str]
    created_at: str
    updated_at: str
