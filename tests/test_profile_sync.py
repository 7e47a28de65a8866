import asyncio

import pytest

from socialplan.shared.errors import OfflineError, SyncError
from socialplan.sync import LocalStore, ProfileSync, Session
from socialplan.sync.local_store import profile_key
from socialplan.sync.profile_sync import (
    OFFLINE_NO_CACHE,
    OFFLINE_UPDATE,
    PROFILE_NOT_FOUND,
    USING_CACHE,
)

PROFILE = {"uid": "alice", "display_name": "Alice", "bio": ""}


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path)


def test_offline_without_cache(remote, store):
    sync = ProfileSync("alice", remote, store, Session(is_online=False))

    assert asyncio.run(sync.initialize()) is None
    assert sync.error == OFFLINE_NO_CACHE
    assert sync.loading is False


def test_offline_uses_cache(remote, store):
    store.set(profile_key("alice"), PROFILE)
    sync = ProfileSync("alice", remote, store, Session(is_online=False))

    assert asyncio.run(sync.initialize()) == PROFILE
    assert sync.error is None


def test_online_fetch_is_cached(remote, store):
    remote.profile = dict(PROFILE)
    sync = ProfileSync("alice", remote, store, Session())

    asyncio.run(sync.initialize())
    assert store.get(profile_key("alice")) == PROFILE


def test_missing_profile_is_created(remote, store):
    sync = ProfileSync("alice", remote, store, Session())

    profile = asyncio.run(sync.initialize(display_name="Alice"))
    assert profile["display_name"] == "Alice"


def test_remote_failure_falls_back_to_cache(remote, store):
    store.set(profile_key("alice"), PROFILE)
    remote.online = False
    sync = ProfileSync("alice", remote, store, Session())

    assert asyncio.run(sync.initialize()) == PROFILE
    assert sync.error == USING_CACHE


def test_updates_are_refused_offline(remote, store):
    sync = ProfileSync("alice", remote, store, Session(is_online=False))

    with pytest.raises(OfflineError):
        asyncio.run(sync.update_bio("hello"))
    assert sync.error == OFFLINE_UPDATE
    assert remote.profile_calls == []


def test_update_refetches_and_caches(remote, store):
    remote.profile = dict(PROFILE)
    sync = ProfileSync("alice", remote, store, Session())

    profile = asyncio.run(sync.update_bio("Runner"))
    assert profile["bio"] == "Runner"
    assert store.get(profile_key("alice"))["bio"] == "Runner"


def test_failed_update_surfaces_the_error(remote, store):
    async def refuse(data):
        raise SyncError("Display name too long", 422)

    remote.update_profile = refuse
    sync = ProfileSync("alice", remote, store, Session())

    with pytest.raises(SyncError):
        asyncio.run(sync.update_profile({"display_name": "x" * 200}))
    assert sync.error == "Display name too long"


def test_remote_changes_apply_only_online(remote, store):
    session = Session(is_online=False)
    sync = ProfileSync("alice", remote, store, session)

    assert sync.apply_remote(PROFILE) is False
    session.is_online = True
    assert sync.apply_remote(PROFILE) is True
    assert sync.profile == PROFILE


def test_refresh_offline_serves_the_cache(remote, store):
    store.set(profile_key("alice"), PROFILE)
    sync = ProfileSync("alice", remote, store, Session(is_online=False))

    assert asyncio.run(sync.refresh()) == PROFILE
    assert sync.error == USING_CACHE
    assert sync.loading is False


def test_refresh_offline_without_cache(remote, store):
    sync = ProfileSync("alice", remote, store, Session(is_online=False))

    assert asyncio.run(sync.refresh()) is None
    assert sync.error == OFFLINE_NO_CACHE


def test_refresh_failure_falls_back_to_cache(remote, store):
    store.set(profile_key("alice"), PROFILE)
    remote.online = False
    sync = ProfileSync("alice", remote, store, Session())

    assert asyncio.run(sync.refresh()) == PROFILE
    assert sync.error == USING_CACHE


def test_refresh_failure_without_cache_reports_the_error(remote, store):
    async def broken():
        raise SyncError("Internal server error", 500)

    remote.get_profile = broken
    sync = ProfileSync("alice", remote, store, Session())

    assert asyncio.run(sync.refresh()) is None
    assert sync.error == "Internal server error"


def test_refresh_of_a_missing_profile(remote, store):
    sync = ProfileSync("alice", remote, store, Session())

    assert asyncio.run(sync.refresh()) is None
    assert sync.error == PROFILE_NOT_FOUND


def test_update_survives_a_failed_refetch(remote, store):
    remote.profile = dict(PROFILE)
    store.set(profile_key("alice"), PROFILE)
    sync = ProfileSync("alice", remote, store, Session())

    async def broken():
        raise SyncError("Internal server error", 500)

    remote.get_profile = broken
    assert asyncio.run(sync.update_bio("Runner")) == PROFILE
    assert remote.profile["bio"] == "Runner"
    assert sync.error == USING_CACHE
