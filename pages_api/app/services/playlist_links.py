"""
Track to playlist reconciliation.

A track owns its playlist memberships; each playlist keeps a derived
``tracks`` set that must mirror them.  Track writes and playlist
writes are separate store operations, so every playlist step here is
independent and best effort: a step that cannot be applied (missing
playlist, store failure) is recorded as a :class:`LinkResult` carrying
a :class:`ReconciliationWarning`, logged, and never raised.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..core.errors import ReconciliationWarning, UpstreamError
from .store import Collection

logger = logging.getLogger(__name__)

ADD = "add"
REMOVE = "remove"


@dataclass
class LinkResult:
    playlist_id: str
    action: str
    applied: bool
    warning: Optional[ReconciliationWarning] = None


class PlaylistLinker:
    """Apply membership changes of one track to the playlist side."""

    def __init__(self, playlists: Collection) -> None:
        self.playlists = playlists

    def _step(self, track_id: str, playlist_id: str, action: str) -> LinkResult:
        operation = self.playlists.add_to_set if action == ADD else self.playlists.pull
        try:
            applied = operation(playlist_id, "tracks", track_id)
            reason = None if applied else "playlist not found"
        except UpstreamError as exc:
            applied = False
            reason = exc.detail or exc.message
        if applied:
            return LinkResult(playlist_id, action, True)
        warning = ReconciliationWarning(playlist_id, track_id, action, reason)
        logger.warning("Playlist reconciliation skipped: %s", warning)
        return LinkResult(playlist_id, action, False, warning)

    def link(self, track_id: str, playlist_ids: Iterable[str]) -> List[LinkResult]:
        """Add ``track_id`` to every playlist in ``playlist_ids``."""
        return [self._step(track_id, playlist_id, ADD) for playlist_id in playlist_ids]

    def unlink(self, track_id: str, playlist_ids: Iterable[str]) -> List[LinkResult]:
        """Remove ``track_id`` from every playlist in ``playlist_ids``."""
        return [self._step(track_id, playlist_id, REMOVE) for playlist_id in playlist_ids]

    def reconcile(self, track_id: str, old_ids: Iterable[str], new_ids: Iterable[str]) -> List[LinkResult]:
        """Move the track from the ``old_ids`` membership to ``new_ids``.

        Playlists only in ``old_ids`` lose the track, playlists only in
        ``new_ids`` gain it, playlists in both are not touched.
        """
        old_ids = list(dict.fromkeys(old_ids))
        new_ids = list(dict.fromkeys(new_ids))
        removed = [p for p in old_ids if p not in new_ids]
        added = [p for p in new_ids if p not in old_ids]
        return self.unlink(track_id, removed) + self.link(track_id, added)
