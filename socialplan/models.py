from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text

from .database import Base

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def utc_now() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns store"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def default_availability() -> list[dict]:
    """09:00-17:00 every day, weekdays available, weekends off"""
    return [
        {
            "day": day,
            "start_time": "09:00",
            "end_time": "17:00",
            "is_available": day not in ("saturday", "sunday"),
        }
        for day in WEEKDAYS
    ]


class UserProfile(Base):
    __tablename__ = "users"

    uid = Column(String(128), primary_key=True, index=True)  # Firebase UID
    display_name = Column(String(255), nullable=False, default="")
    email = Column(String(255), index=True, nullable=False)
    bio = Column(Text, nullable=False, default="")
    photo_url = Column(String(500), nullable=True)
    availability = Column(JSON, nullable=False, default=default_availability)
    # Lists of uids; JSON columns are reassigned, never mutated in place
    following = Column(JSON, nullable=False, default=list)
    followers = Column(JSON, nullable=False, default=list)
    email_verified = Column(Boolean, default=False, nullable=False)
    verification_code = Column(String(10), nullable=True)
    verification_code_expires = Column(DateTime, nullable=True)
    last_code_sent = Column(DateTime, nullable=True)
    verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)


class UserTasks(Base):
    """Per-user task document: the whole list is stored and replaced as one array"""

    __tablename__ = "user_tasks"

    uid = Column(String(128), primary_key=True, index=True)
    tasks = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)
