"""
Pydantic models for the Cloudinary image proxy.

Image resources are passed through as Cloudinary returns them, so
``images`` is a list of plain dictionaries.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from .common import ApiModel


class ImageList(ApiModel):
    images: List[Dict[str, Any]]
    next_cursor: Optional[str] = None
    has_more: bool = False


class ImageRename(ApiModel):
    """Body of a rename request."""

    new_public_id: str = Field(..., min_length=1, max_length=255, examples=["banners/home"])
    overwrite: bool = False


class ImageResult(ApiModel):
    message: str
    public_id: str
    resource: Optional[Dict[str, Any]] = None
