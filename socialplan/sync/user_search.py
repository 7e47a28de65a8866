"""Search/follow state for the client"""
import logging
from typing import Optional

from ..shared.errors import SyncError
from .session import Session

logger = logging.getLogger(__name__)

NOT_SIGNED_IN = "You must be logged in to search users"


class UserSearch:
    def __init__(self, session: Session, remote):
        self.session = session
        self.remote = remote

        self.term = ""
        self.results: list[dict] = []
        self.loading = False
        self.error: Optional[str] = None

    async def search(self, term: str) -> list[dict]:
        self.term = term
        if self.session.user is None:
            self.error = NOT_SIGNED_IN
            self.results = []
            return self.results

        if not term or not term.strip():
            self.error = None
            self.results = []
            return self.results

        self.loading = True
        try:
            self.results = await self.remote.search(term.strip())
            self.error = None
        except SyncError as e:
            logger.warning(f"⚠️ Search for '{term}' failed: {e.message}")
            self.error = e.message or "Failed to search users"
            self.results = []
        finally:
            self.loading = False
        return self.results

    def _mark(self, uid: str, following: bool) -> None:
        self.results = [
            {**result, "is_following": following} if result["uid"] == uid else result
            for result in self.results
        ]

    async def follow(self, uid: str) -> bool:
        if self.session.user is None:
            self.error = NOT_SIGNED_IN
            return False
        try:
            await self.remote.follow(uid)
        except SyncError as e:
            self.error = e.message or "Failed to follow user"
            return False
        self.error = None
        self._mark(uid, True)
        return True

    async def unfollow(self, uid: str) -> bool:
        if self.session.user is None:
            self.error = NOT_SIGNED_IN
            return False
        try:
            await self.remote.unfollow(uid)
        except SyncError as e:
            self.error = e.message or "Failed to unfollow user"
            return False
        self.error = None
        self._mark(uid, False)
        return True
