"""
Playlist endpoints for API v1.

CRUD routes for playlists.  A playlist's ``tracks`` are managed from
the track side and are read-only here.
"""

from fastapi import APIRouter, Depends, status

from pages_api.app.api.deps import get_playlist_service, list_params
from pages_api.app.core.security import authenticate
from pages_api.app.schemas.common import DeletedItem, ListResponse
from pages_api.app.schemas.playlist import PlaylistCreate, PlaylistRead, PlaylistUpdate
from pages_api.app.services.listing import ListParams
from pages_api.app.services.playlist_service import PlaylistService

router = APIRouter()


@router.get("/", response_model=ListResponse[PlaylistRead])
async def list_playlists(
    params: ListParams = Depends(list_params),
    service: PlaylistService = Depends(get_playlist_service),
) -> ListResponse[PlaylistRead]:
    """Return a paginated list of playlists, searchable by title and description."""
    return await service.list_playlists(params)


@router.get("/{playlist_id}", response_model=PlaylistRead)
async def get_playlist(playlist_id: str, service: PlaylistService = Depends(get_playlist_service)) -> PlaylistRead:
    return await service.get_playlist(playlist_id)


@router.post(
    "/",
    response_model=PlaylistRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(authenticate)],
)
async def create_playlist(
    playlist: PlaylistCreate,
    service: PlaylistService = Depends(get_playlist_service),
) -> PlaylistRead:
    return await service.create_playlist(playlist)


@router.put("/{playlist_id}", response_model=PlaylistRead, dependencies=[Depends(authenticate)])
async def update_playlist(
    playlist_id: str,
    updates: PlaylistUpdate,
    service: PlaylistService = Depends(get_playlist_service),
) -> PlaylistRead:
    return await service.update_playlist(playlist_id, updates)


@router.delete("/{playlist_id}", response_model=DeletedItem, dependencies=[Depends(authenticate)])
async def delete_playlist(
    playlist_id: str,
    service: PlaylistService = Depends(get_playlist_service),
) -> DeletedItem:
    """Delete a playlist and remove it from its tracks' memberships."""
    return await service.delete_playlist(playlist_id)
