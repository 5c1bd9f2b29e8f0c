"""
FastAPI dependencies that hand request handlers their services.

Each service is built per request from the application context, so
handlers never touch module-level connections.
"""

from typing import Optional

from fastapi import Depends, Query, Request

from pages_api.app.core.context import AppContext
from pages_api.app.services.listing import ListParams
from pages_api.app.services.media_service import MediaClient
from pages_api.app.services.page_service import PageService
from pages_api.app.services.playlist_service import PlaylistService
from pages_api.app.services.track_service import TrackService


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_page_service(context: AppContext = Depends(get_context)) -> PageService:
    return PageService(context.db)


def get_track_service(context: AppContext = Depends(get_context)) -> TrackService:
    return TrackService(context.db)


def get_playlist_service(context: AppContext = Depends(get_context)) -> PlaylistService:
    return PlaylistService(context.db)


def get_media_client(context: AppContext = Depends(get_context)) -> MediaClient:
    return context.media


def list_params(
    context: AppContext = Depends(get_context),
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(None, ge=1, description="Items per page"),
    search: Optional[str] = Query(None, max_length=200, description="Case-insensitive text search"),
) -> ListParams:
    """Common ``page``/``limit``/``search`` query parameters.

    ``limit`` defaults to ``DEFAULT_PAGE_SIZE`` and is capped at
    ``MAX_PAGE_SIZE``.
    """
    settings = context.settings
    if limit is None:
        limit = settings.default_page_size
    return ListParams(page=page, limit=min(limit, settings.max_page_size), search=search)
