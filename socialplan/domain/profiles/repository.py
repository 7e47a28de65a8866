"""Profile repository - Database operations for user profile documents"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import UserProfile, default_availability, utc_now


class ProfileRepository:
    """Repository for profile database operations"""

    @staticmethod
    def get_profile(db: Session, uid: str) -> Optional[UserProfile]:
        return db.query(UserProfile).filter(UserProfile.uid == uid).first()

    @staticmethod
    def get_profiles(db: Session, uids: list[str]) -> list[UserProfile]:
        if not uids:
            return []
        return db.query(UserProfile).filter(UserProfile.uid.in_(uids)).all()

    @staticmethod
    def list_page(db: Session, limit: int) -> list[UserProfile]:
        """A bounded page of profiles, in a stable order"""
        return db.query(UserProfile).order_by(UserProfile.created_at, UserProfile.uid).limit(limit).all()

    @staticmethod
    def create_profile(
        db: Session, uid: str, display_name: str, email: str, email_verified: bool = False
    ) -> UserProfile:
        now = utc_now()
        profile = UserProfile(
            uid=uid,
            display_name=display_name,
            email=email,
            bio="",
            availability=default_availability(),
            following=[],
            followers=[],
            email_verified=email_verified,
            created_at=now,
            updated_at=now,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def update_profile(db: Session, profile: UserProfile, **updates) -> UserProfile:
        """Update a profile with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(profile, key):
                setattr(profile, key, value)
        profile.updated_at = utc_now()

        db.commit()
        db.refresh(profile)
        return profile
