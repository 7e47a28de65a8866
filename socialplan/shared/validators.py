"""Shared validation utilities"""

import re
from typing import Optional

from ..models import WEEKDAYS

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# At least 8 characters, 1 uppercase, 1 lowercase, 1 number, letters and digits only
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d]{8,}$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email address")

    return email


def validate_time(value: str) -> str:
    """Validate an HH:MM 24-hour time string"""
    value = (value or "").strip()
    if not TIME_PATTERN.match(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return value


def validate_weekday(value: str) -> str:
    """Normalize and validate a weekday label"""
    day = (value or "").strip().lower()
    if day not in WEEKDAYS:
        raise ValueError(f"Invalid day '{value}'")
    return day


def validate_time_range(start_time: str, end_time: str) -> None:
    # Zero-padded HH:MM strings compare in chronological order
    if start_time >= end_time:
        raise ValueError("Start time must be before end time")


def validate_password(password: str) -> str:
    if not PASSWORD_PATTERN.match(password or ""):
        raise ValueError(
            "Password must be at least 8 characters long and contain at least one "
            "uppercase letter, one lowercase letter, and one number"
        )
    return password
