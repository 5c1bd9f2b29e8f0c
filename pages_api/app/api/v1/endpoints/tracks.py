"""
Track endpoints for API v1.

CRUD routes for audio tracks.  Creating or updating a track with a
``playlists`` list also updates the named playlists; playlists that do
not exist are skipped without failing the request.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from pages_api.app.api.deps import get_track_service, list_params
from pages_api.app.core.security import authenticate
from pages_api.app.schemas.common import DeletedItem, ListResponse
from pages_api.app.schemas.track import TrackCreate, TrackRead, TrackUpdate
from pages_api.app.services.listing import ListParams
from pages_api.app.services.track_service import TrackService

router = APIRouter()


@router.get("/", response_model=ListResponse[TrackRead])
async def list_tracks(
    params: ListParams = Depends(list_params),
    category: Optional[str] = Query(None, max_length=50),
    author: Optional[str] = Query(None, max_length=100),
    service: TrackService = Depends(get_track_service),
) -> ListResponse[TrackRead]:
    """Return a paginated list of tracks.

    - **page**, **limit**: pagination parameters.
    - **category**: exact category match.
    - **author**: case-insensitive substring of the author.
    - **search**: case-insensitive substring of title, description, author or category.
    """
    return await service.list_tracks(params, category=category, author=author)


@router.get("/{track_id}", response_model=TrackRead)
async def get_track(track_id: str, service: TrackService = Depends(get_track_service)) -> TrackRead:
    return await service.get_track(track_id)


@router.post(
    "/",
    response_model=TrackRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(authenticate)],
)
async def create_track(track: TrackCreate, service: TrackService = Depends(get_track_service)) -> TrackRead:
    """Create a new track and add it to the listed playlists."""
    return await service.create_track(track)


@router.put("/{track_id}", response_model=TrackRead, dependencies=[Depends(authenticate)])
async def update_track(
    track_id: str,
    updates: TrackUpdate,
    service: TrackService = Depends(get_track_service),
) -> TrackRead:
    """Update a track.

    Sending ``playlists`` replaces the track's memberships: it is
    removed from playlists no longer listed and added to new ones.
    """
    return await service.update_track(track_id, updates)


@router.delete("/{track_id}", response_model=DeletedItem, dependencies=[Depends(authenticate)])
async def delete_track(track_id: str, service: TrackService = Depends(get_track_service)) -> DeletedItem:
    """Delete a track.

    Playlists that listed the track keep its identifier.
    """
    return await service.delete_track(track_id)
