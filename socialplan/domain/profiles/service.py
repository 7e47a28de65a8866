"""Profile service - Business logic for profile documents"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...cache import get_profile_cached, invalidate_profile_cache, set_profile_cached
from ...models import WEEKDAYS, UserProfile
from ...shared.sanitization import sanitize_string
from .repository import ProfileRepository
from .schemas import (
    AvailabilitySlot,
    FreeTimeSlot,
    ProfileUpdate,
    PublicProfileResponse,
)

logger = logging.getLogger(__name__)


def shared_free_time(mine: list[dict], theirs: list[dict]) -> list[FreeTimeSlot]:
    """Per weekday, the overlap of two users' available windows"""
    mine_by_day = {slot["day"]: slot for slot in mine}
    theirs_by_day = {slot["day"]: slot for slot in theirs}

    slots = []
    for day in WEEKDAYS:
        a = mine_by_day.get(day)
        b = theirs_by_day.get(day)
        if not a or not b or not a.get("is_available") or not b.get("is_available"):
            continue
        start = max(a["start_time"], b["start_time"])
        end = min(a["end_time"], b["end_time"])
        if start < end:
            slots.append(FreeTimeSlot(day=day, start_time=start, end_time=end))
    return slots


class ProfileService:
    """Service layer for profile business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProfileRepository()

    def create_profile(
        self, uid: str, display_name: str, email: str, email_verified: bool = False
    ) -> UserProfile:
        """Create the profile document with default weekly availability"""
        email = (email or "").strip().lower()
        # Use part of email as fallback
        name = (display_name or "").strip() or email.split("@")[0]

        try:
            profile = self.repo.create_profile(
                self.db, uid, sanitize_string(name), email, email_verified
            )
        except IntegrityError:
            # Another request created it first
            self.db.rollback()
            existing = self.repo.get_profile(self.db, uid)
            if existing is None:
                raise
            return existing

        logger.info(f"✅ Profile created for {uid}")
        return profile

    def get_profile(self, uid: str) -> UserProfile:
        profile = self.repo.get_profile(self.db, uid)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile

    def get_public_profile(self, uid: str) -> dict:
        """Public view, read through the Redis cache"""
        cached = get_profile_cached(uid)
        if cached is not None:
            return cached

        profile = self.get_profile(uid)
        data = PublicProfileResponse.model_validate(profile).model_dump()
        set_profile_cached(uid, data)
        return data

    def update_profile(self, uid: str, data: ProfileUpdate) -> UserProfile:
        """Partial update of the owner-writable fields"""
        profile = self.get_profile(uid)

        updates = {}
        if data.display_name is not None:
            updates["display_name"] = sanitize_string(data.display_name)
        if data.bio is not None:
            updates["bio"] = sanitize_string(data.bio)
        if data.photo_url is not None:
            updates["photo_url"] = data.photo_url
        if data.availability is not None:
            updates["availability"] = [slot.model_dump() for slot in data.availability]

        profile = self.repo.update_profile(self.db, profile, **updates)
        invalidate_profile_cache(uid)
        logger.info(f"📝 Profile {uid} updated: {sorted(updates)}")
        return profile

    def update_bio(self, uid: str, bio: str) -> UserProfile:
        return self.update_profile(uid, ProfileUpdate(bio=bio))

    def update_availability(self, uid: str, availability: list[AvailabilitySlot]) -> UserProfile:
        return self.update_profile(uid, ProfileUpdate(availability=availability))

    def free_time_with(self, uid: str, other_uid: str) -> list[FreeTimeSlot]:
        mine = self.get_profile(uid)
        theirs: Optional[UserProfile] = self.repo.get_profile(self.db, other_uid)
        if not theirs:
            raise HTTPException(status_code=404, detail="User not found")
        return shared_free_time(mine.availability or [], theirs.availability or [])
