"""
Business logic for audio tracks.

Besides CRUD on the ``tracks`` collection, the service keeps playlist
``tracks`` sets in step with each track's ``playlists`` field on
create and update.  Playlist steps run after the track write has been
committed and never undo it; see ``playlist_links``.

Deleting a track does not touch the playlists that reference it.
"""

import logging
from typing import List, Optional

from ..core.db import Database
from ..core.errors import NotFoundError
from ..schemas.common import DeletedItem, ListResponse
from ..schemas.track import TrackCreate, TrackRead, TrackUpdate
from .listing import ListParams, build_query, paginate
from .playlist_links import LinkResult, PlaylistLinker
from .store import Query, is_valid_id, normalize_id, playlists_collection, tracks_collection

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "description", "author", "category")


class TrackService:
    """Service for managing tracks and their playlist memberships."""

    def __init__(self, db: Database) -> None:
        self.tracks = tracks_collection(db)
        self.linker = PlaylistLinker(playlists_collection(db))

    def _load(self, track_id: str) -> dict:
        doc = self.tracks.get(normalize_id(track_id)) if is_valid_id(track_id) else None
        if doc is None:
            raise NotFoundError("Track", track_id)
        return doc

    @staticmethod
    def _report(track_id: str, results: List[LinkResult]) -> None:
        skipped = [r for r in results if not r.applied]
        if skipped:
            logger.warning(
                "Track %s: %d of %d playlist step(s) skipped (%s)",
                track_id,
                len(skipped),
                len(results),
                ", ".join(r.playlist_id for r in skipped),
            )

    async def list_tracks(
        self,
        params: ListParams,
        category: Optional[str] = None,
        author: Optional[str] = None,
    ) -> ListResponse[TrackRead]:
        """Return a page of tracks, newest first.

        ``category`` must match exactly, ``author`` is a
        case-insensitive substring match, ``search`` looks at title,
        description, author and category.
        """
        query = Query()
        if category:
            query.equals("category", category)
        if author:
            query.icontains("author", author)
        build_query(params, SEARCH_FIELDS, query)
        docs, pagination = paginate(self.tracks, query, params)
        return ListResponse[TrackRead](
            items=[TrackRead.model_validate(doc) for doc in docs],
            pagination=pagination,
        )

    async def get_track(self, track_id: str) -> TrackRead:
        return TrackRead.model_validate(self._load(track_id))

    async def create_track(self, data: TrackCreate) -> TrackRead:
        """Store a new track and add it to the requested playlists.

        A playlist that does not exist is skipped with a warning; the
        track is still created.
        """
        doc = self.tracks.insert(data.model_dump())
        logger.info("Created track %s '%s'", doc["id"], doc.get("title"))
        if doc["playlists"]:
            self._report(doc["id"], self.linker.link(doc["id"], doc["playlists"]))
        return TrackRead.model_validate(doc)

    async def update_track(self, track_id: str, data: TrackUpdate) -> TrackRead:
        """Apply a partial update.

        When ``playlists`` is part of the update, the track is removed
        from playlists it left and added to playlists it joined.
        """
        current = self._load(track_id)
        changes = data.model_dump(exclude_unset=True)
        if "playlists" in changes and changes["playlists"] is None:
            changes["playlists"] = []
        doc = self.tracks.update(current["id"], changes)
        if doc is None:
            raise NotFoundError("Track", track_id)
        logger.info("Updated track %s", doc["id"])
        if "playlists" in changes:
            self._report(doc["id"], self.linker.reconcile(doc["id"], current["playlists"], changes["playlists"]))
        return TrackRead.model_validate(doc)

    async def delete_track(self, track_id: str) -> DeletedItem:
        doc = self.tracks.delete(normalize_id(track_id)) if is_valid_id(track_id) else None
        if doc is None:
            raise NotFoundError("Track", track_id)
        logger.info("Deleted track %s", doc["id"])
        return DeletedItem(id=doc["id"], title=doc.get("title"))
