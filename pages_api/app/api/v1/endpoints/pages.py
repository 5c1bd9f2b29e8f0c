"""
Page endpoints for API v1.

These routes provide CRUD operations for dynamic pages.  Pages can be
looked up by identifier or by slug; listing supports filtering by
group label and editor type plus a free-text search over title,
description and slug.  Mutations go through the authentication gate.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from pages_api.app.api.deps import get_page_service, list_params
from pages_api.app.core.security import authenticate
from pages_api.app.schemas.common import DeletedItem, ListResponse
from pages_api.app.schemas.page import EditorType, PageCreate, PageRead, PageUpdate
from pages_api.app.services.listing import ListParams
from pages_api.app.services.page_service import PageService

router = APIRouter()


@router.get("/", response_model=ListResponse[PageRead])
async def list_pages(
    params: ListParams = Depends(list_params),
    group: Optional[str] = Query(None, description="Only pages carrying this group label"),
    editor_type: Optional[EditorType] = Query(None, alias="editorType"),
    service: PageService = Depends(get_page_service),
) -> ListResponse[PageRead]:
    """Return a paginated list of pages, newest first."""
    return await service.list_pages(
        params,
        group=group,
        editor_type=editor_type.value if editor_type else None,
    )


@router.get("/slug/{slug}", response_model=PageRead)
async def get_page_by_slug(slug: str, service: PageService = Depends(get_page_service)) -> PageRead:
    """Retrieve a page by its slug.  Raises 404 if there is none."""
    return await service.get_page_by_slug(slug)


@router.get("/{page_id}", response_model=PageRead)
async def get_page(page_id: str, service: PageService = Depends(get_page_service)) -> PageRead:
    """Retrieve a single page by its ID.  Raises 404 if the page is not found."""
    return await service.get_page(page_id)


@router.post(
    "/",
    response_model=PageRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(authenticate)],
)
async def create_page(page: PageCreate, service: PageService = Depends(get_page_service)) -> PageRead:
    """Create a new page.

    If ``slug`` is omitted it is derived from the title.  A slug that
    is already used by another page is rejected with HTTP 400.
    """
    return await service.create_page(page)


@router.put("/{page_id}", response_model=PageRead, dependencies=[Depends(authenticate)])
async def update_page(
    page_id: str,
    updates: PageUpdate,
    service: PageService = Depends(get_page_service),
) -> PageRead:
    """Update an existing page.

    Partial updates are supported; any unspecified fields remain
    unchanged.
    """
    return await service.update_page(page_id, updates)


@router.delete("/{page_id}", response_model=DeletedItem, dependencies=[Depends(authenticate)])
async def delete_page(page_id: str, service: PageService = Depends(get_page_service)) -> DeletedItem:
    """Delete a page and return its id and title."""
    return await service.delete_page(page_id)
