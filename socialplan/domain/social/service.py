"""Search and follow - Business logic for the directed follow graph"""

import html
import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import invalidate_profile_cache
from ...config import SEARCH_MAX_RESULTS, SEARCH_PAGE_SIZE
from ...models import UserProfile, utc_now
from ..profiles.repository import ProfileRepository
from .schemas import UserSearchResult

logger = logging.getLogger(__name__)


def with_member(values: list[str], member: str) -> list[str]:
    """Array-union: append once"""
    values = list(values or [])
    if member not in values:
        values.append(member)
    return values


def without_member(values: list[str], member: str) -> list[str]:
    """Array-remove: drop every occurrence"""
    return [v for v in (values or []) if v != member]


def rank_matches(candidates: list[UserProfile], term: str) -> list[UserProfile]:
    """
    Case-insensitive substring match on display name or email.
    Stored names are HTML-escaped, so they are compared unescaped.
    Exact matches sort before partial ones; order is otherwise preserved.
    """
    needle = term.strip().lower()

    def name_of(p: UserProfile) -> str:
        return html.unescape(p.display_name or "").lower()

    matches = [p for p in candidates if needle in name_of(p) or needle in (p.email or "").lower()]

    def is_exact(p: UserProfile) -> bool:
        return name_of(p) == needle or (p.email or "").lower() == needle

    return sorted(matches, key=lambda p: 0 if is_exact(p) else 1)


class SocialService:
    """Service layer for search, follow and unfollow"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProfileRepository()

    def search_users(
        self, term: str, current_uid: str, max_results: int = SEARCH_MAX_RESULTS
    ) -> list[UserSearchResult]:
        if not term or not term.strip():
            return []

        current = self.repo.get_profile(self.db, current_uid)
        following = set(current.following or []) if current else set()

        # Bounded scan: no full-text index behind the document store
        candidates = [
            p for p in self.repo.list_page(self.db, SEARCH_PAGE_SIZE) if p.uid != current_uid
        ]
        ranked = rank_matches(candidates, term)[:max_results]
        logger.debug(f"🔍 Search '{term}' by {current_uid}: {len(ranked)} results")

        return [
            UserSearchResult(
                uid=p.uid,
                display_name=p.display_name,
                email=p.email,
                bio=p.bio,
                photo_url=p.photo_url,
                is_following=p.uid in following,
            )
            for p in ranked
        ]

    def _pair(self, current_uid: str, target_uid: str) -> tuple[UserProfile, UserProfile]:
        current = self.repo.get_profile(self.db, current_uid)
        if not current:
            raise HTTPException(status_code=404, detail="Profile not found")
        target = self.repo.get_profile(self.db, target_uid)
        if not target:
            raise HTTPException(status_code=404, detail="User not found")
        return current, target

    def follow_user(self, current_uid: str, target_uid: str) -> UserProfile:
        """Add both edges of a follow in one transaction"""
        if current_uid == target_uid:
            raise HTTPException(status_code=400, detail="You cannot follow yourself")

        current, target = self._pair(current_uid, target_uid)
        now = utc_now()
        try:
            current.following = with_member(current.following, target_uid)
            current.updated_at = now
            target.followers = with_member(target.followers, current_uid)
            target.updated_at = now
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"❌ Follow {current_uid} -> {target_uid} failed")
            raise

        invalidate_profile_cache(current_uid, target_uid)
        logger.info(f"➕ {current_uid} now follows {target_uid}")
        self.db.refresh(current)
        return current

    def unfollow_user(self, current_uid: str, target_uid: str) -> UserProfile:
        """Remove both edges in one transaction; unknown edges are a no-op"""
        current, target = self._pair(current_uid, target_uid)
        now = utc_now()
        try:
            current.following = without_member(current.following, target_uid)
            current.updated_at = now
            target.followers = without_member(target.followers, current_uid)
            target.updated_at = now
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"❌ Unfollow {current_uid} -> {target_uid} failed")
            raise

        invalidate_profile_cache(current_uid, target_uid)
        logger.info(f"➖ {current_uid} unfollowed {target_uid}")
        self.db.refresh(current)
        return current

    def is_following(self, current_uid: str, target_uid: str) -> bool:
        current = self.repo.get_profile(self.db, current_uid)
        if not current:
            return False
        return target_uid in (current.following or [])

    def list_connections(self, uid: str, direction: str) -> list[UserProfile]:
        """Profiles on one side of the graph ('following' or 'followers'), in stored order"""
        profile = self.repo.get_profile(self.db, uid)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")
        uids = list(getattr(profile, direction) or [])
        found = {p.uid: p for p in self.repo.get_profiles(self.db, uids)}
        return [found[u] for u in uids if u in found]
