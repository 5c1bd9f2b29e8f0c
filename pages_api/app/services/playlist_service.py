"""
Business logic for playlists.

Playlists are plain CRUD records; their ``tracks`` set is maintained
by ``TrackService`` and cannot be written here.  When a playlist is
deleted, its identifier is pulled from the tracks that listed it so
those tracks do not point at a missing playlist.
"""

import logging
from typing import List

from ..core.db import Database
from ..core.errors import NotFoundError, UpstreamError
from ..schemas.common import DeletedItem, ListResponse
from ..schemas.playlist import PlaylistCreate, PlaylistRead, PlaylistUpdate
from .listing import ListParams, build_query, paginate
from .store import is_valid_id, normalize_id, playlists_collection, tracks_collection

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "description")


class PlaylistService:
    """Сервис для управления плейлистами."""

    def __init__(self, db: Database) -> None:
        self.playlists = playlists_collection(db)
        self.tracks = tracks_collection(db)

    def _load(self, playlist_id: str) -> dict:
        doc = self.playlists.get(normalize_id(playlist_id)) if is_valid_id(playlist_id) else None
        if doc is None:
            raise NotFoundError("Playlist", playlist_id)
        return doc

    async def list_playlists(self, params: ListParams) -> ListResponse[PlaylistRead]:
        docs, pagination = paginate(self.playlists, build_query(params, SEARCH_FIELDS), params)
        return ListResponse[PlaylistRead](
            items=[PlaylistRead.model_validate(doc) for doc in docs],
            pagination=pagination,
        )

    async def get_playlist(self, playlist_id: str) -> PlaylistRead:
        return PlaylistRead.model_validate(self._load(playlist_id))

    async def create_playlist(self, data: PlaylistCreate) -> PlaylistRead:
        doc = self.playlists.insert(data.model_dump())
        logger.info("Created playlist %s '%s'", doc["id"], doc["title"])
        return PlaylistRead.model_validate(doc)

    async def update_playlist(self, playlist_id: str, data: PlaylistUpdate) -> PlaylistRead:
        current = self._load(playlist_id)
        doc = self.playlists.update(current["id"], data.model_dump(exclude_unset=True))
        if doc is None:
            raise NotFoundError("Playlist", playlist_id)
        logger.info("Updated playlist %s", doc["id"])
        return PlaylistRead.model_validate(doc)

    async def delete_playlist(self, playlist_id: str) -> DeletedItem:
        """Delete a playlist and detach it from its tracks.

        Detaching is best effort: the playlist is already gone when it
        runs, and a failure there is only logged.
        """
        doc = self.playlists.delete(normalize_id(playlist_id)) if is_valid_id(playlist_id) else None
        if doc is None:
            raise NotFoundError("Playlist", playlist_id)
        logger.info("Deleted playlist %s", doc["id"])
        detached: List[str] = []
        try:
            detached = self.tracks.pull_from_all("playlists", doc["id"])
        except UpstreamError as exc:
            logger.warning("Could not detach playlist %s from its tracks: %s", doc["id"], exc.detail or exc.message)
        if detached:
            logger.info("Detached playlist %s from %d track(s)", doc["id"], len(detached))
        return DeletedItem(id=doc["id"], title=doc["title"])
