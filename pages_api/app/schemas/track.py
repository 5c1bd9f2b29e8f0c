"""
Pydantic models for audio tracks.

Every track field is optional.  ``playlists`` lists the identifiers of
the playlists the track belongs to; the track is the owning side of
that relationship and the service mirrors it into each playlist's
``tracks`` set.
"""

from typing import List, Optional

from pydantic import Field, field_validator

from .common import ApiModel, validate_object_ids, validate_url


class TrackBase(ApiModel):
    title: Optional[str] = Field(None, max_length=200, examples=["Episode 12"])
    author: Optional[str] = Field(None, max_length=100, examples=["Jane Doe"])
    description: Optional[str] = Field(None, max_length=500)
    duration: Optional[str] = Field(None, examples=["42:10"])
    date: Optional[str] = Field(None, examples=["2024-05-01"])
    thumbnail: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50, examples=["podcast"])
    audio_url: Optional[str] = None

    @field_validator("thumbnail", "audio_url")
    @classmethod
    def check_urls(cls, v):
        return validate_url(v)


class TrackCreate(TrackBase):
    """Schema for creating a track."""

    listeners: str = Field("0", examples=["1200"])
    playlists: List[str] = Field(default_factory=list)

    @field_validator("listeners", mode="before")
    @classmethod
    def default_listeners(cls, v):
        return "0" if v is None else v

    @field_validator("playlists")
    @classmethod
    def check_playlists(cls, v):
        return validate_object_ids(v, "playlist")


class TrackUpdate(TrackBase):
    """Schema for updating a track.

    Only fields present in the request body are written.  Sending
    ``playlists`` replaces the membership set (``null`` clears it);
    leaving it out keeps memberships unchanged.
    """

    listeners: Optional[str] = None
    playlists: Optional[List[str]] = None

    @field_validator("listeners")
    @classmethod
    def default_listeners(cls, v):
        return "0" if v is None else v

    @field_validator("playlists")
    @classmethod
    def check_playlists(cls, v):
        return validate_object_ids(v, "playlist")


class TrackRead(TrackBase):
    """Schema for reading a track from the API."""

    id: str
    listeners: str
    playlists: List[str]
    created_at: str
    updated_at: str
