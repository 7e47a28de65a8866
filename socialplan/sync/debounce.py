"""
Debounced save with retry.

Each `schedule()` replaces the pending payload and restarts the timer, so a
burst of edits produces one save of the latest state. Failed saves are
retried with capped exponential backoff plus random jitter.
"""
import asyncio
import contextlib
import logging
import random
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

IDLE = "idle"
PENDING = "pending"
SAVING = "saving"
SAVED = "saved"
ERROR = "error"


class DebouncedSaver:
    def __init__(
        self,
        save: Callable[[Any], Awaitable[Any]],
        delay: float = 1.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: float = 1.0,
        on_status: Optional[Callable[[str], None]] = None,
    ):
        self._save = save
        self.delay = delay
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.on_status = on_status

        self.status = IDLE
        self.last_error: Optional[Exception] = None
        self.attempts = 0
        self._payload: Any = None
        self._has_payload = False
        self._timer: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def _set_status(self, status: str) -> None:
        self.status = status
        if self.on_status:
            self.on_status(status)

    def backoff(self, attempt: int) -> float:
        """Delay before retry number `attempt` (0-based)"""
        return min(self.base_delay * 2**attempt, self.max_delay) + random.uniform(0, self.jitter)

    def schedule(self, payload: Any) -> None:
        """Arm the timer for `payload`, dropping any earlier pending payload"""
        self._payload = payload
        self._has_payload = True
        self._cancel_timer()
        self._set_status(PENDING)
        self._timer = asyncio.get_running_loop().create_task(self._delayed_save())

    async def _delayed_save(self):
        await asyncio.sleep(self.delay)
        await self._save_with_retry()

    async def _save_with_retry(self) -> bool:
        payload = self._payload
        self._has_payload = False
        self.attempts = 0

        while True:
            self._set_status(SAVING)
            self.attempts += 1
            try:
                await self._save(payload)
            except Exception as e:
                retry = self.attempts - 1
                if retry >= self.max_retries:
                    self.last_error = e
                    logger.error(f"❌ Save failed after {self.attempts} attempts: {e}")
                    self._set_status(ERROR)
                    return False
                wait = self.backoff(retry)
                logger.warning(f"⚠️ Save attempt {self.attempts} failed, retrying in {wait:.1f}s: {e}")
                await asyncio.sleep(wait)
                continue

            self.last_error = None
            self._set_status(SAVED)
            return True

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def save_now(self, payload: Any) -> bool:
        """Save `payload` immediately, superseding anything pending"""
        self._cancel_timer()
        self._payload = payload
        self._has_payload = True
        return await self._save_with_retry()

    async def flush(self) -> Optional[bool]:
        """Run a pending save now; None when nothing is pending"""
        if not self._has_payload:
            return None
        self._cancel_timer()
        return await self._save_with_retry()

    def cancel(self) -> None:
        self._cancel_timer()
        self._has_payload = False
        if self.status == PENDING:
            self._set_status(IDLE)

    async def wait(self) -> None:
        """Wait for the armed timer and its save to finish"""
        timer = self._timer
        if timer is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await timer
