import asyncio

import pytest

from socialplan.sync import LocalStore, Session, TaskSync
from socialplan.sync.local_store import tasks_dirty_key, tasks_key
from socialplan.sync.task_sync import SAVE_FAILED_MESSAGE


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "cache")


def make_sync(remote, store, session, **options):
    options = {"delay": 0, "base_delay": 0, "jitter": 0, **options}
    return TaskSync("alice", remote, store, session, **options)


def test_offline_edits_stay_local_and_sync_on_reconnect(remote, store):
    async def scenario():
        session = Session(is_online=False)
        remote.online = False
        sync = make_sync(remote, store, session)

        task = sync.add_task("monday", "09:00", "10:00", "Gym")
        sync.update_task(task["id"], description="Swim")
        assert sync.dirty
        assert remote.saved == []
        assert store.get(tasks_key("alice"))[0]["description"] == "Swim"

        remote.online = True
        await session.set_online(True)
        return sync

    sync = asyncio.run(scenario())
    assert len(remote.saved) == 1
    assert remote.saved[0][0]["description"] == "Swim"
    assert not sync.dirty


def test_online_edits_are_debounced(remote, store):
    async def scenario():
        sync = make_sync(remote, store, Session(), delay=0.01)
        sync.add_task("monday", "09:00", "10:00", "Gym")
        sync.add_task("tuesday", "09:00", "10:00", "Read")
        await sync.saver.wait()
        return sync

    sync = asyncio.run(scenario())
    assert len(remote.saved) == 1
    assert [t["description"] for t in remote.saved[0]] == ["Gym", "Read"]
    assert sync.error is None


def test_delete_task(remote, store):
    sync = make_sync(remote, store, Session(is_online=False))
    task = sync.add_task("monday", "09:00", "10:00", "Gym")

    assert sync.delete_task(task["id"]) is True
    assert sync.delete_task(task["id"]) is False
    assert store.get(tasks_key("alice")) == []


def test_invalid_task_is_rejected_before_any_change(remote, store):
    sync = make_sync(remote, store, Session(is_online=False))

    with pytest.raises(ValueError):
        sync.add_task("monday", "10:00", "09:00", "Backwards")
    assert sync.tasks == []
    assert not sync.dirty


def test_update_unknown_task(remote, store):
    sync = make_sync(remote, store, Session(is_online=False))
    with pytest.raises(KeyError):
        sync.update_task("missing", description="x")


def test_exhausted_retries_keep_local_copy(remote, store):
    remote.fail_saves = 10

    async def scenario():
        sync = make_sync(remote, store, Session(), max_retries=1)
        sync.add_task("monday", "09:00", "10:00", "Gym")
        await sync.saver.wait()
        return sync

    sync = asyncio.run(scenario())
    assert sync.error == SAVE_FAILED_MESSAGE
    assert [t["description"] for t in sync.tasks] == ["Gym"]
    assert store.get(tasks_key("alice"))[0]["description"] == "Gym"


def test_load_prefers_remote_when_online(remote, store):
    remote.tasks_doc = {"uid": "alice", "tasks": [{"id": "r1"}], "updated_at": "t"}
    sync = make_sync(remote, store, Session())

    assert asyncio.run(sync.load()) == [{"id": "r1"}]
    assert store.get(tasks_key("alice")) == [{"id": "r1"}]


def test_load_falls_back_to_cache(remote, store):
    store.set(tasks_key("alice"), [{"id": "cached"}])
    remote.online = False

    # The session still believes it is online; the failing fetch decides
    sync = make_sync(remote, store, Session())
    assert asyncio.run(sync.load()) == [{"id": "cached"}]


def test_remote_snapshot_wins_while_online(remote, store):
    session = Session(is_online=False)
    sync = make_sync(remote, store, session)

    assert sync.apply_remote({"tasks": [{"id": "r0"}]}) is False
    assert sync.tasks == []

    session.is_online = True
    assert sync.apply_remote({"tasks": [{"id": "r1"}]}) is True
    assert sync.tasks == [{"id": "r1"}]
    assert store.get(tasks_key("alice")) == [{"id": "r1"}]


def test_remote_snapshot_does_not_clobber_unsaved_edits(remote, store):
    session = Session(is_online=False)
    sync = make_sync(remote, store, session)
    sync.add_task("monday", "09:00", "10:00", "Local")

    session.is_online = True
    assert sync.apply_remote({"tasks": []}) is False
    assert [t["description"] for t in sync.tasks] == ["Local"]


def test_unsaved_edits_survive_a_restart(remote, store):
    remote.online = False
    offline = make_sync(remote, store, Session(is_online=False))
    offline.add_task("monday", "09:00", "10:00", "Unsaved")
    offline.close()

    remote.online = True
    restarted = make_sync(remote, store, Session())
    loaded = asyncio.run(restarted.load())

    assert [t["description"] for t in loaded] == ["Unsaved"]
    assert [t["description"] for t in remote.saved[-1]] == ["Unsaved"]
    assert not restarted.dirty
    assert store.get(tasks_dirty_key("alice")) is None


def test_unsaved_edits_load_offline_after_restart(remote, store):
    offline = make_sync(remote, store, Session(is_online=False))
    offline.add_task("monday", "09:00", "10:00", "Unsaved")

    restarted = make_sync(remote, store, Session(is_online=False))
    loaded = asyncio.run(restarted.load())

    assert [t["description"] for t in loaded] == ["Unsaved"]
    assert restarted.dirty
    assert remote.saved == []


def test_stale_save_keeps_newer_offline_edits_dirty(remote, store):
    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()
        save = remote.save_tasks

        async def slow_save(tasks):
            started.set()
            await release.wait()
            return await save(tasks)

        remote.save_tasks = slow_save
        session = Session()
        sync = make_sync(remote, store, session)

        sync.add_task("monday", "09:00", "10:00", "A")
        await started.wait()
        await session.set_online(False)
        sync.add_task("tuesday", "09:00", "10:00", "B")

        release.set()
        await sync.saver.wait()
        assert sync.dirty

        await session.set_online(True)
        return sync

    sync = asyncio.run(scenario())
    assert [[t["description"] for t in saved] for saved in remote.saved] == [["A"], ["A", "B"]]
    assert not sync.dirty


def test_subscribe_and_close(remote, store):
    sync = make_sync(remote, store, Session())
    sync.subscribe()
    assert remote.watchers == [sync.apply_remote]

    sync.close()
    assert remote.watchers == []
