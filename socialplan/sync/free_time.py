"""Shared free time with another user, cached for offline viewing"""
import logging

from ..shared.errors import SyncError
from .local_store import LocalStore, free_time_key
from .session import Session

logger = logging.getLogger(__name__)


class FreeTimeCache:
    def __init__(self, uid: str, remote, store: LocalStore, session: Session):
        self.uid = uid
        self.remote = remote
        self.store = store
        self.session = session

    async def get(self, other_uid: str) -> list[dict]:
        key = free_time_key(self.uid, other_uid)
        if self.session.is_online:
            try:
                response = await self.remote.free_time(other_uid)
                slots = list(response.get("slots") or [])
                self.store.set(key, slots)
                return slots
            except SyncError as e:
                logger.warning(f"⚠️ Free time with {other_uid} unavailable: {e.message}")
        return list(self.store.get(key) or [])
