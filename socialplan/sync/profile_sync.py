"""Profile cache & sync"""
import logging
from typing import Optional

from ..shared.errors import OfflineError, SyncError
from .local_store import PROFILE_MAX_AGE, LocalStore, profile_key
from .session import Session

logger = logging.getLogger(__name__)

OFFLINE_NO_CACHE = "You are offline and no cached profile is available."
USING_CACHE = "Using cached profile data while offline."
OFFLINE_UPDATE = "You are offline. Please reconnect and try again."
UPDATE_FAILED = "Failed to update profile. Please try again."
PROFILE_NOT_FOUND = "Profile not found. Please try initializing your profile."
FETCH_FAILED = "Failed to fetch user profile"


class ProfileSync:
    def __init__(self, uid: str, remote, store: LocalStore, session: Session):
        self.uid = uid
        self.remote = remote
        self.store = store
        self.session = session

        self.profile: Optional[dict] = None
        self.loading = False
        self.error: Optional[str] = None
        self._unwatch = None

    @property
    def cache_key(self) -> str:
        return profile_key(self.uid)

    def _cached(self) -> Optional[dict]:
        return self.store.get(self.cache_key, max_age=PROFILE_MAX_AGE)

    def _remember(self, profile: dict) -> dict:
        self.profile = profile
        self.store.set(self.cache_key, profile)
        return profile

    async def initialize(self, display_name: Optional[str] = None) -> Optional[dict]:
        """
        Load the profile: from the cache while offline, otherwise from the
        backend (creating it on first sign-in), falling back to the cache
        when the backend call fails.
        """
        self.loading = True
        try:
            if not self.session.is_online:
                self.profile = self._cached()
                self.error = None if self.profile else OFFLINE_NO_CACHE
                return self.profile

            try:
                profile = await self.remote.get_profile()
                if profile is None:
                    logger.info(f"🆕 Creating profile for {self.uid}")
                    profile = await self.remote.create_profile(display_name)
                self.error = None
                return self._remember(profile)
            except SyncError as e:
                logger.warning(f"⚠️ Profile fetch failed for {self.uid}: {e.message}")
                self.profile = self._cached()
                self.error = USING_CACHE if self.profile else e.message
                return self.profile
        finally:
            self.loading = False

    def _fall_back(self, message: str) -> Optional[dict]:
        """Serve the cached profile, or report `message` when there is none"""
        cached = self._cached()
        if cached is not None:
            self.profile = cached
            self.error = USING_CACHE
        else:
            self.error = message
        return self.profile

    async def refresh(self) -> Optional[dict]:
        """Refetch the profile; never raises, failures fall back to the cache"""
        self.loading = True
        try:
            if not self.session.is_online:
                return self._fall_back(OFFLINE_NO_CACHE)

            try:
                profile = await self.remote.get_profile()
            except SyncError as e:
                logger.warning(f"⚠️ Profile refresh failed for {self.uid}: {e.message}")
                return self._fall_back(e.message or FETCH_FAILED)

            if profile is None:
                return self._fall_back(PROFILE_NOT_FOUND)
            self.error = None
            return self._remember(profile)
        finally:
            self.loading = False

    async def _write(self, call, *args) -> Optional[dict]:
        if not self.session.is_online:
            self.error = OFFLINE_UPDATE
            raise OfflineError(OFFLINE_UPDATE)
        try:
            await call(*args)
        except SyncError as e:
            self.error = e.message if e.status_code and e.status_code < 500 else UPDATE_FAILED
            raise
        self.error = None
        return await self.refresh()

    async def update_profile(self, data: dict) -> Optional[dict]:
        return await self._write(self.remote.update_profile, data)

    async def update_bio(self, bio: str) -> Optional[dict]:
        return await self._write(self.remote.update_bio, bio)

    async def update_availability(self, availability: list[dict]) -> Optional[dict]:
        return await self._write(self.remote.update_availability, availability)

    def apply_remote(self, profile: dict) -> bool:
        if not self.session.is_online:
            return False
        self._remember(profile)
        return True

    def subscribe(self, interval: float = 5.0) -> None:
        if self._unwatch is None:
            self._unwatch = self.remote.watch(self.remote.get_profile, self.apply_remote, interval)

    def unsubscribe(self) -> None:
        if self._unwatch is not None:
            self._unwatch()
            self._unwatch = None
