"""
Image proxy endpoints for API v1.

These routes forward to Cloudinary so the admin UI never holds the
Cloudinary credentials.  The handlers are synchronous because the
client uses ``requests``; FastAPI runs them in its thread pool.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from pages_api.app.api.deps import get_media_client
from pages_api.app.core.security import authenticate
from pages_api.app.schemas.media import ImageList, ImageRename, ImageResult
from pages_api.app.services.media_service import MediaClient

router = APIRouter(dependencies=[Depends(authenticate)])


@router.get("/", response_model=ImageList)
def list_images(
    limit: int = Query(10, ge=1, le=500),
    next_cursor: Optional[str] = Query(None),
    media: MediaClient = Depends(get_media_client),
) -> ImageList:
    """List uploaded images, one Cloudinary page at a time."""
    return ImageList(**media.list_images(limit=limit, next_cursor=next_cursor))


@router.delete("/{public_id:path}", response_model=ImageResult)
def delete_image(public_id: str, media: MediaClient = Depends(get_media_client)) -> ImageResult:
    """Delete an image by its Cloudinary public id (may contain folders)."""
    media.delete_image(public_id)
    return ImageResult(message="Image deleted successfully", public_id=public_id)


@router.patch("/{public_id:path}", response_model=ImageResult)
def rename_image(
    public_id: str,
    body: ImageRename,
    media: MediaClient = Depends(get_media_client),
) -> ImageResult:
    """Rename an image, optionally overwriting an existing target."""
    resource = media.rename_image(public_id, body.new_public_id, overwrite=body.overwrite)
    return ImageResult(message="Image renamed successfully", public_id=body.new_public_id, resource=resource)
