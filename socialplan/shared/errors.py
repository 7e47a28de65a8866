"""
Provider error codes mapped to user-facing messages.

The auth provider reports failures as string codes ("auth/invalid-credential",
"auth/too-many-requests", ...); firebase_admin raises exceptions whose class
names carry the same meaning. Both are folded into one message table.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_AUTH_MESSAGE = "Authentication error. Please try again."

AUTH_ERROR_MESSAGES = {
    "auth/user-not-found": "Incorrect email or password. Please try again.",
    "auth/invalid-credential": "Incorrect email or password. Please try again.",
    "auth/invalid-login-credentials": "Incorrect email or password. Please try again.",
    "auth/wrong-password": "Incorrect password. Please try again.",
    "auth/invalid-email": "Invalid email address.",
    "auth/email-already-in-use": "This email is already registered. Please sign in instead.",
    "auth/weak-password": "Password is too weak. Please use a stronger password.",
    "auth/too-many-requests": "Too many failed attempts. Please try again later.",
    "auth/network-request-failed": "Network error. Please check your internet connection.",
    "auth/invalid-verification-code": "Invalid verification code. Please check and try again.",
    "auth/code-expired": "Verification code has expired. Please request a new code.",
    "auth/quota-exceeded": "Too many requests. Please try again later.",
    "auth/id-token-expired": "Your session has expired. Please log in again.",
}

# firebase_admin exception class name -> provider code
FIREBASE_EXCEPTION_CODES = {
    "EmailAlreadyExistsError": "auth/email-already-in-use",
    "UserNotFoundError": "auth/user-not-found",
    "InvalidIdTokenError": "auth/invalid-credential",
    "ExpiredIdTokenError": "auth/id-token-expired",
    "RevokedIdTokenError": "auth/id-token-expired",
    "ResourceExhaustedError": "auth/quota-exceeded",
    "UnavailableError": "auth/network-request-failed",
}

OFFLINE_MARKERS = ("offline", "network", "connection", "unavailable", "failed-precondition")


class SyncError(Exception):
    """A backend call failed with a response"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class OfflineError(SyncError):
    """The backend could not be reached"""


def provider_code(error: Exception) -> Optional[str]:
    code = getattr(error, "code", None)
    if isinstance(code, str) and code.startswith("auth/"):
        return code
    return FIREBASE_EXCEPTION_CODES.get(type(error).__name__)


def friendly_auth_error(error_or_code, default: str = DEFAULT_AUTH_MESSAGE) -> str:
    """Map a provider error (or its code) to the message shown to the user"""
    code = error_or_code if isinstance(error_or_code, str) else provider_code(error_or_code)
    if code is None:
        return default
    message = AUTH_ERROR_MESSAGES.get(code)
    if message is None:
        logger.debug(f"Unmapped auth error code: {code}")
        return default
    return message


def is_offline_error(error: Exception) -> bool:
    """True when a failure means the backend is unreachable rather than refusing"""
    if isinstance(error, OfflineError):
        return True
    if isinstance(error, SyncError):
        return False
    text = f"{getattr(error, 'code', '')} {error}".lower()
    return any(marker in text for marker in OFFLINE_MARKERS)
