"""
Task sync - optimistic local edits with a debounced remote save.

The in-memory list and the on-device cache are updated first, and the list is
marked dirty (persisted alongside the cache) until a save of that exact list
succeeds. Online edits schedule a save of the whole list; offline edits wait
for the session to report it is back online. A dirty cache found by `load()`
after a restart is pushed instead of being replaced by the remote copy.
"""
import logging
import uuid
from typing import Optional

from ..domain.tasks.schemas import Task
from ..shared.errors import SyncError, is_offline_error
from .debounce import ERROR, DebouncedSaver
from .local_store import LocalStore, tasks_dirty_key, tasks_key
from .session import Session

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save tasks. Your changes are kept on this device."


class TaskSync:
    def __init__(
        self,
        uid: str,
        remote,
        store: LocalStore,
        session: Session,
        delay: float = 1.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: float = 1.0,
    ):
        self.uid = uid
        self.remote = remote
        self.store = store
        self.session = session

        self.tasks: list[dict] = []
        self.loading = False
        self.error: Optional[str] = None
        self.dirty = False

        self.saver = DebouncedSaver(
            self._push,
            delay=delay,
            max_retries=max_retries,
            base_delay=base_delay,
            max_delay=max_delay,
            jitter=jitter,
            on_status=self._on_save_status,
        )
        self._unsubscribe_online = session.on_online(self._on_reconnect)
        self._unwatch = None

    @property
    def cache_key(self) -> str:
        return tasks_key(self.uid)

    @property
    def dirty_key(self) -> str:
        return tasks_dirty_key(self.uid)

    def _set_dirty(self, dirty: bool) -> None:
        self.dirty = dirty
        if dirty:
            self.store.set(self.dirty_key, True)
        else:
            self.store.delete(self.dirty_key)

    async def load(self) -> list[dict]:
        """
        Remote list when online, cached list otherwise or when the fetch fails.
        Unsaved local edits win over the remote copy and are pushed when online.
        """
        self.loading = True
        try:
            cached = self.store.get(self.cache_key)
            if self.store.get(self.dirty_key) and cached is not None:
                self.tasks = list(cached)
                self.dirty = True
                if self.session.is_online:
                    logger.info(f"🔄 Pushing {len(self.tasks)} unsaved tasks for {self.uid}")
                    await self.saver.save_now(list(self.tasks))
                return self.tasks

            if self.session.is_online:
                try:
                    document = await self.remote.get_tasks()
                    self.tasks = list(document.get("tasks") or [])
                    self.store.set(self.cache_key, self.tasks)
                    return self.tasks
                except SyncError as e:
                    logger.warning(f"⚠️ Falling back to cached tasks for {self.uid}: {e.message}")

            self.tasks = list(cached or [])
            return self.tasks
        finally:
            self.loading = False

    def add_task(self, day: str, start_time: str, end_time: str, description: str) -> dict:
        task = Task(
            id=uuid.uuid4().hex,
            day=day,
            start_time=start_time,
            end_time=end_time,
            description=description,
        ).model_dump()
        self.tasks = [*self.tasks, task]
        self._changed()
        return task

    def update_task(self, task_id: str, **changes) -> dict:
        for index, existing in enumerate(self.tasks):
            if existing["id"] == task_id:
                break
        else:
            raise KeyError(f"Unknown task {task_id}")

        updated = Task(**{**existing, **changes, "id": task_id}).model_dump()
        self.tasks = [*self.tasks[:index], updated, *self.tasks[index + 1 :]]
        self._changed()
        return updated

    def delete_task(self, task_id: str) -> bool:
        remaining = [t for t in self.tasks if t["id"] != task_id]
        if len(remaining) == len(self.tasks):
            return False
        self.tasks = remaining
        self._changed()
        return True

    def _changed(self) -> None:
        self.store.set(self.cache_key, self.tasks)
        self._set_dirty(True)
        if self.session.is_online:
            self.saver.schedule(list(self.tasks))
        else:
            logger.info(f"📴 Offline, {len(self.tasks)} tasks kept locally for {self.uid}")

    async def _push(self, tasks: list[dict]) -> None:
        try:
            await self.remote.save_tasks(tasks)
        except Exception as e:
            if is_offline_error(e):
                logger.info(f"📴 Save for {self.uid} deferred until reconnect")
            raise
        # An older list may land after newer edits; those stay dirty
        if tasks == self.tasks:
            self._set_dirty(False)
            self.error = None

    def _on_save_status(self, status: str) -> None:
        if status == ERROR:
            self.error = SAVE_FAILED_MESSAGE

    async def _on_reconnect(self) -> None:
        if self.dirty:
            logger.info(f"🔄 Reconnected, pushing local tasks for {self.uid}")
            await self.saver.save_now(list(self.tasks))

    def apply_remote(self, snapshot: dict) -> bool:
        """
        Overwrite local state with a remote snapshot (last write wins).
        Skipped while local edits are unsaved, since they are newer.
        """
        if not self.session.is_online or self.dirty:
            return False
        self.tasks = list(snapshot.get("tasks") or [])
        self.store.set(self.cache_key, self.tasks)
        return True

    def subscribe(self, interval: float = 5.0) -> None:
        if self._unwatch is None:
            self._unwatch = self.remote.watch(self.remote.get_tasks, self.apply_remote, interval)

    def unsubscribe(self) -> None:
        if self._unwatch is not None:
            self._unwatch()
            self._unwatch = None

    def close(self) -> None:
        self.unsubscribe()
        self._unsubscribe_online()
        self.saver.cancel()
