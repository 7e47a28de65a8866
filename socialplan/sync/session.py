"""Client-side session state and the connectivity monitor"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

CONNECTIVITY_INTERVAL = 30.0


@dataclass
class SessionUser:
    uid: str
    email: str
    display_name: Optional[str] = None
    id_token: Optional[str] = None
    email_verified: bool = False


class Session:
    """Current user, loading flag and online flag, with listeners for connectivity changes"""

    def __init__(self, is_online: bool = True):
        self.user: Optional[SessionUser] = None
        self.loading = True
        self.is_online = is_online
        self._listeners: dict[bool, list[Callable[[], Any]]] = {True: [], False: []}

    @property
    def token(self) -> Optional[str]:
        return self.user.id_token if self.user else None

    def sign_in(self, user: SessionUser) -> None:
        self.user = user
        self.loading = False
        logger.info(f"🔑 Signed in as {user.email}")

    def sign_out(self) -> None:
        self.user = None
        self.loading = False

    def _subscribe(self, online: bool, listener: Callable[[], Any]) -> Callable[[], None]:
        self._listeners[online].append(listener)

        def unsubscribe():
            if listener in self._listeners[online]:
                self._listeners[online].remove(listener)

        return unsubscribe

    def on_online(self, listener: Callable[[], Any]) -> Callable[[], None]:
        return self._subscribe(True, listener)

    def on_offline(self, listener: Callable[[], Any]) -> Callable[[], None]:
        return self._subscribe(False, listener)

    async def set_online(self, online: bool) -> None:
        """Record connectivity; listeners run only on a transition"""
        if online == self.is_online:
            return
        self.is_online = online
        logger.info("🌐 Back online" if online else "📴 Gone offline")

        for listener in list(self._listeners[online]):
            try:
                result = listener()
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                # A failing listener must not stop the others
                logger.exception("❌ Connectivity listener failed")


class ConnectivityMonitor:
    """Probes the backend and keeps `session.is_online` current"""

    def __init__(self, session: Session, remote, interval: float = CONNECTIVITY_INTERVAL):
        self.session = session
        self.remote = remote
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    async def check(self) -> bool:
        online = await self.remote.probe()
        await self.session.set_online(online)
        return online

    async def _run(self):
        while True:
            await self.check()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
