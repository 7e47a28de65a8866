"""Resend cooldown and the signup step tracker"""
import asyncio
import logging
from typing import Optional

from ..config import RESEND_COOLDOWN_SECONDS
from ..shared.errors import SyncError

logger = logging.getLogger(__name__)


class ResendCooldown:
    """Seconds left before another code may be requested"""

    def __init__(self, seconds: int = RESEND_COOLDOWN_SECONDS):
        self.seconds = seconds
        self.remaining = 0

    @property
    def can_resend(self) -> bool:
        return self.remaining == 0

    def start(self) -> None:
        self.remaining = self.seconds

    def tick(self) -> int:
        if self.remaining > 0:
            self.remaining -= 1
        return self.remaining

    async def run(self) -> None:
        while self.remaining > 0:
            await asyncio.sleep(1)
            self.tick()


class SignupFlow:
    """Signup steps: 0 form, 1 email code, 2 phone code"""

    FORM = 0
    EMAIL_CODE = 1
    PHONE_CODE = 2

    def __init__(self, remote, cooldown: Optional[ResendCooldown] = None):
        self.remote = remote
        self.cooldown = cooldown or ResendCooldown()
        self.step = self.FORM
        self.email: Optional[str] = None
        self.error: Optional[str] = None

    async def submit(
        self, email: str, password: str, confirm_password: str, display_name: Optional[str] = None
    ) -> bool:
        try:
            result = await self.remote.signup(email, password, confirm_password, display_name)
        except SyncError as e:
            self.error = e.message
            return False

        self.email = email
        self.step = self.EMAIL_CODE
        if result.get("verification_sent"):
            self.error = None
            self.cooldown.start()
        else:
            self.error = result.get("message")
        return True

    async def resend(self) -> bool:
        if not self.cooldown.can_resend:
            self.error = f"Please wait {self.cooldown.remaining} seconds before requesting a new code."
            return False
        try:
            await self.remote.send_verification_code()
        except SyncError as e:
            self.error = e.message
            return False
        self.error = None
        self.cooldown.start()
        logger.info(f"📨 Verification code resent to {self.email}")
        return True

    async def verify(self, code: str) -> bool:
        try:
            await self.remote.verify_code(code.strip())
        except SyncError as e:
            self.error = e.message
            return False
        self.error = None
        self.step = self.PHONE_CODE
        return True

    def back(self) -> None:
        self.step = max(self.FORM, self.step - 1)
        self.error = None
