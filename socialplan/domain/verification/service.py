"""
Email verification codes: generation, expiry, resend cooldown and checking.
Clock values are passed in so expiry and cooldown edges are testable.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ...config import RESEND_COOLDOWN_SECONDS, VERIFICATION_CODE_TTL_MINUTES
from ...models import UserProfile

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    success: bool
    message: str


def generate_code(length: int = 6) -> str:
    """Generate a cryptographically secure random numeric code"""
    return "".join(secrets.choice(string.digits) for _ in range(length))


def issue_code(profile: UserProfile, now: datetime) -> str:
    """Store a fresh code on the profile, superseding any earlier one"""
    code = generate_code()
    profile.verification_code = code
    profile.verification_code_expires = now + timedelta(minutes=VERIFICATION_CODE_TTL_MINUTES)
    profile.last_code_sent = now
    return code


def clear_code(profile: UserProfile) -> None:
    profile.verification_code = None
    profile.verification_code_expires = None


def resend_wait_seconds(last_code_sent: Optional[datetime], now: datetime) -> int:
    """Seconds left before another code may be sent; 0 means allowed"""
    if last_code_sent is None:
        return 0
    elapsed = (now - last_code_sent).total_seconds()
    remaining = RESEND_COOLDOWN_SECONDS - elapsed
    if remaining <= 0:
        return 0
    return int(remaining) if remaining == int(remaining) else int(remaining) + 1


def check_code(profile: UserProfile, submitted: str, now: datetime) -> CheckResult:
    """
    Compare a submitted code with the stored one.

    Expiry is checked before equality, so a late code fails even when it matches.
    Success marks the email verified and consumes the code.
    """
    if not profile.verification_code:
        return CheckResult(False, "No verification code found. Please request a new code.")

    expires = profile.verification_code_expires
    if expires is None or expires < now:
        logger.warning(f"⏰ Verification code expired for {profile.uid} (expired at {expires})")
        return CheckResult(False, "Verification code has expired. Please request a new code.")

    if (submitted or "").strip() != profile.verification_code.strip():
        logger.warning(f"❌ Invalid verification code for {profile.uid}")
        return CheckResult(False, "Invalid verification code")

    profile.email_verified = True
    profile.verified_at = now
    clear_code(profile)
    return CheckResult(True, "Email verified successfully!")


def resend_allowed(last_code_sent: Optional[datetime], now: datetime) -> bool:
    return resend_wait_seconds(last_code_sent, now) == 0
