"""
Service layer for dynamic pages.

Pages are addressed either by identifier or by their unique ``slug``.
When a page is created without a slug one is derived from the title;
the slug is never recomputed afterwards, even if the title changes.

Slug uniqueness is checked before writing and enforced again by the
``UNIQUE`` constraint on the column, so two concurrent creations of
the same slug still end with exactly one page and one validation
error.
"""

from __future__ import annotations

import logging
import re
import sqlite3
import unicodedata
from typing import Optional

from ..core.db import Database
from ..core.errors import NotFoundError, ValidationError
from ..schemas.common import DeletedItem, ListResponse
from ..schemas.page import SLUG_MAX_LENGTH, PageCreate, PageRead, PageUpdate
from .listing import ListParams, build_query, paginate
from .store import Query, is_valid_id, normalize_id, pages_collection

SEARCH_FIELDS = ("title", "description", "slug")


def slugify(text: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """Turn ``text`` into a URL slug.

    Accents are folded to ASCII, every run of other characters becomes
    a single hyphen, and the result is cut to ``max_length``.
    """
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", folded.lower()).strip("-")
    return slug[:max_length].rstrip("-")


def _slug_taken(slug: str) -> ValidationError:
    return ValidationError.single("slug", f"Slug '{slug}' is already in use")


class PageService:
    """Service class for managing pages."""

    def __init__(self, db: Database) -> None:
        self.pages = pages_collection(db)

    def _ensure_slug_free(self, slug: str, exclude_id: Optional[str] = None) -> None:
        existing = self.pages.find_one(slug=slug)
        if existing is not None and existing["id"] != exclude_id:
            raise _slug_taken(slug)

    async def list_pages(
        self,
        params: ListParams,
        group: Optional[str] = None,
        editor_type: Optional[str] = None,
    ) -> ListResponse[PageRead]:
        """Return a page of pages, newest first, optionally filtered by group label and editor type."""
        query = Query()
        if group:
            query.has_member("groups", group)
        if editor_type:
            query.equals("editor_type", editor_type)
        build_query(params, SEARCH_FIELDS, query)
        docs, pagination = paginate(self.pages, query, params)
        return ListResponse[PageRead](
            items=[PageRead.model_validate(doc) for doc in docs],
            pagination=pagination,
        )

    async def get_page(self, page_id: str) -> PageRead:
        doc = self.pages.get(normalize_id(page_id)) if is_valid_id(page_id) else None
        if doc is None:
            raise NotFoundError("Page", page_id)
        return PageRead.model_validate(doc)

    async def get_page_by_slug(self, slug: str) -> PageRead:
        doc = self.pages.find_one(slug=slug.strip().lower())
        if doc is None:
            raise NotFoundError("Page", slug)
        return PageRead.model_validate(doc)

    async def create_page(self, data: PageCreate) -> PageRead:
        """Insert a new page and return it.

        Raises ``ValidationError`` on ``slug`` when no slug can be
        derived from the title or when the slug is already used.
        """
        logger = logging.getLogger(__name__)
        values = data.model_dump(mode="json")
        slug = values.get("slug") or slugify(data.title)
        if not slug:
            raise ValidationError.single("slug", "Slug could not be derived from the title; provide one explicitly")
        self._ensure_slug_free(slug)
        values["slug"] = slug
        try:
            doc = self.pages.insert(values)
        except sqlite3.IntegrityError as exc:
            raise _slug_taken(slug) from exc
        logger.info("Created page %s (%s)", doc["id"], slug)
        return PageRead.model_validate(doc)

    async def update_page(self, page_id: str, data: PageUpdate) -> PageRead:
        """Update the supplied fields of a page.

        Only fields present in the request are validated and written.
        Changing the slug is allowed as long as the new one is free.
        """
        logger = logging.getLogger(__name__)
        current = await self.get_page(page_id)
        changes = data.model_dump(mode="json", exclude_unset=True)
        if "slug" in changes:
            self._ensure_slug_free(changes["slug"], exclude_id=current.id)
        try:
            doc = self.pages.update(current.id, changes)
        except sqlite3.IntegrityError as exc:
            raise _slug_taken(changes.get("slug", current.slug)) from exc
        if doc is None:
            raise NotFoundError("Page", page_id)
        logger.info("Updated page %s", doc["id"])
        return PageRead.model_validate(doc)

    async def delete_page(self, page_id: str) -> DeletedItem:
        logger = logging.getLogger(__name__)
        doc = self.pages.delete(normalize_id(page_id)) if is_valid_id(page_id) else None
        if doc is None:
            raise NotFoundError("Page", page_id)
        logger.info("Deleted page %s", doc["id"])
        return DeletedItem(id=doc["id"], title=doc["title"])
