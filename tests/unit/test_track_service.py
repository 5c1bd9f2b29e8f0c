import logging

import pytest
from pydantic import ValidationError as PydanticValidationError

from pages_api.app.core.errors import NotFoundError, UpstreamError
from pages_api.app.schemas.playlist import PlaylistCreate
from pages_api.app.schemas.track import TrackCreate, TrackUpdate
from pages_api.app.services.playlist_links import ADD, PlaylistLinker
from pages_api.app.services.playlist_service import PlaylistService
from pages_api.app.services.store import new_id
from pages_api.app.services.track_service import TrackService


@pytest.fixture
def tracks(db):
    return TrackService(db)


@pytest.fixture
def make_playlists(db, run, factories):
    service = PlaylistService(db)

    def _make(count):
        return [
            run(service.create_playlist(PlaylistCreate.model_validate(factories.PlaylistPayloadFactory()))).id
            for _ in range(count)
        ]

    return _make


def _playlist_tracks(db, playlist_id):
    return PlaylistService(db).playlists.get(playlist_id)["tracks"]


@pytest.mark.unit
def test_create_adds_track_to_each_playlist_exactly_once(db, run, tracks, factories, make_playlists):
    p1, p2, p3 = make_playlists(3)
    payload = factories.TrackPayloadFactory(playlists=[p1, p2, p1.upper(), p3, p2])

    track = run(tracks.create_track(TrackCreate.model_validate(payload)))

    assert track.playlists == [p1, p2, p3]
    for playlist_id in (p1, p2, p3):
        assert _playlist_tracks(db, playlist_id) == [track.id]


@pytest.mark.unit
def test_create_rejects_malformed_playlist_id_before_writing(run, tracks, factories):
    payload = factories.TrackPayloadFactory(playlists=["not-a-playlist"])

    with pytest.raises(PydanticValidationError) as excinfo:
        TrackCreate.model_validate(payload)

    assert excinfo.value.errors()[0]["loc"] == ("playlists",)
    assert tracks.tracks.count() == 0


@pytest.mark.unit
def test_missing_playlist_is_skipped_and_only_logged(db, run, tracks, factories, make_playlists, caplog):
    (existing,) = make_playlists(1)
    missing = new_id()
    payload = factories.TrackPayloadFactory(playlists=[missing, existing])

    with caplog.at_level(logging.WARNING, logger="pages_api.app.services.playlist_links"):
        track = run(tracks.create_track(TrackCreate.model_validate(payload)))

    assert run(tracks.get_track(track.id)).playlists == [missing, existing]
    assert _playlist_tracks(db, existing) == [track.id]
    warnings = [r for r in caplog.records if r.name == "pages_api.app.services.playlist_links"]
    assert len(warnings) == 1
    assert missing in warnings[0].getMessage()


@pytest.mark.unit
def test_update_moves_track_between_playlists(db, run, tracks, factories, make_playlists):
    only_old, both, only_new, bystander = make_playlists(4)
    track = run(tracks.create_track(TrackCreate.model_validate(
        factories.TrackPayloadFactory(playlists=[only_old, both])
    )))
    other = run(tracks.create_track(TrackCreate.model_validate(
        factories.TrackPayloadFactory(playlists=[both, bystander])
    )))
    before_both = PlaylistService(db).playlists.get(both)

    updated = run(tracks.update_track(track.id, TrackUpdate(playlists=[both, only_new])))

    assert updated.playlists == [both, only_new]
    assert _playlist_tracks(db, only_old) == []
    assert _playlist_tracks(db, only_new) == [track.id]
    assert PlaylistService(db).playlists.get(both) == before_both
    assert _playlist_tracks(db, bystander) == [other.id]


@pytest.mark.unit
def test_update_without_playlists_keeps_memberships(db, run, tracks, factories, make_playlists):
    (playlist,) = make_playlists(1)
    track = run(tracks.create_track(TrackCreate.model_validate(factories.TrackPayloadFactory(playlists=[playlist]))))

    updated = run(tracks.update_track(track.id, TrackUpdate(title="New title")))

    assert updated.title == "New title"
    assert updated.playlists == [playlist]
    assert _playlist_tracks(db, playlist) == [track.id]


@pytest.mark.unit
def test_update_with_null_playlists_clears_memberships(db, run, tracks, factories, make_playlists):
    p1, p2 = make_playlists(2)
    track = run(tracks.create_track(TrackCreate.model_validate(factories.TrackPayloadFactory(playlists=[p1, p2]))))

    updated = run(tracks.update_track(track.id, TrackUpdate.model_validate({"playlists": None})))

    assert updated.playlists == []
    assert _playlist_tracks(db, p1) == []
    assert _playlist_tracks(db, p2) == []


@pytest.mark.unit
def test_update_unknown_track_raises_not_found(run, tracks):
    with pytest.raises(NotFoundError):
        run(tracks.update_track(new_id(), TrackUpdate(title="x")))


@pytest.mark.unit
def test_delete_unknown_track_is_not_found_and_writes_nothing(run, tracks, factories):
    run(tracks.create_track(TrackCreate.model_validate(factories.TrackPayloadFactory())))
    before = tracks.tracks.find()

    with pytest.raises(NotFoundError):
        run(tracks.delete_track(new_id()))
    with pytest.raises(NotFoundError):
        run(tracks.delete_track("garbage"))

    assert tracks.tracks.find() == before


@pytest.mark.unit
def test_delete_returns_identity_and_leaves_playlists_untouched(db, run, tracks, factories, make_playlists):
    (playlist,) = make_playlists(1)
    track = run(tracks.create_track(TrackCreate.model_validate(
        factories.TrackPayloadFactory(title="Bye", playlists=[playlist])
    )))

    deleted = run(tracks.delete_track(track.id))

    assert deleted.id == track.id
    assert deleted.title == "Bye"
    with pytest.raises(NotFoundError):
        run(tracks.get_track(track.id))
    # Known gap: deleting a track does not remove it from its playlists.
    assert _playlist_tracks(db, playlist) == [track.id]


@pytest.mark.unit
def test_listeners_default_to_zero(run, tracks):
    track = run(tracks.create_track(TrackCreate(title="Quiet")))
    assert track.listeners == "0"
    assert track.playlists == []


@pytest.mark.unit
def test_update_with_missing_playlist_still_reconciles_the_rest(db, run, tracks, factories, make_playlists, caplog):
    left, kept, joined = make_playlists(3)
    track = run(tracks.create_track(TrackCreate.model_validate(factories.TrackPayloadFactory(playlists=[left, kept]))))
    missing = new_id()

    with caplog.at_level(logging.WARNING):
        updated = run(tracks.update_track(track.id, TrackUpdate(playlists=[kept, missing, joined])))

    assert updated.playlists == [kept, missing, joined]
    assert _playlist_tracks(db, left) == []
    assert _playlist_tracks(db, kept) == [track.id]
    assert _playlist_tracks(db, joined) == [track.id]
    step_warnings = [r for r in caplog.records if r.name == "pages_api.app.services.playlist_links"]
    assert len(step_warnings) == 1
    assert missing in step_warnings[0].getMessage()
    summaries = [r for r in caplog.records if r.name == "pages_api.app.services.track_service"]
    assert len(summaries) == 1
    assert "1 of 3" in summaries[0].getMessage()


class _FailingPlaylists:
    """Collection double: pulls succeed, adds fail like a broken store."""

    def __init__(self):
        self.calls = []

    def add_to_set(self, doc_id, column, value):
        self.calls.append(("add", doc_id))
        raise UpstreamError("Database operation failed", detail="disk I/O error")

    def pull(self, doc_id, column, value):
        self.calls.append(("pull", doc_id))
        return True


@pytest.mark.unit
def test_store_failure_in_a_step_is_recorded_not_raised(caplog):
    playlists = _FailingPlaylists()
    linker = PlaylistLinker(playlists)
    track_id, old_id, new_playlist = new_id(), new_id(), new_id()

    with caplog.at_level(logging.WARNING, logger="pages_api.app.services.playlist_links"):
        results = linker.reconcile(track_id, [old_id], [new_playlist])

    assert playlists.calls == [("pull", old_id), ("add", new_playlist)]
    removed, added = results
    assert removed.applied is True
    assert added.action == ADD
    assert added.applied is False
    assert added.warning.reason == "disk I/O error"
    assert added.warning.playlist_id == new_playlist
    assert "disk I/O error" in caplog.text
