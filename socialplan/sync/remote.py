"""
Backend client for the sync library.

Every call goes through `_request`: transport failures become OfflineError,
error responses become SyncError with the server's detail message.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from ..shared.errors import OfflineError, SyncError

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 5.0


def error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Request failed with status {response.status_code}"

    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error")
        if isinstance(detail, dict):
            detail = detail.get("message")
        if isinstance(detail, list):
            detail = "; ".join(str(item.get("msg", item)) for item in detail if item)
        if detail:
            return str(detail)
    return f"Request failed with status {response.status_code}"


class RemoteBackend:
    """Async client for the Social-Plan API"""

    def __init__(
        self,
        base_url: str,
        get_token: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.get_token = get_token
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        token = self.get_token() if self.get_token else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or self.timeout,
            transport=self.transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"📡 {method} {path} failed, backend unreachable: {e}")
            raise OfflineError("Network error. Please check your internet connection.") from e

        if response.status_code >= 400:
            message = error_message(response)
            logger.warning(f"❌ {method} {path} -> {response.status_code}: {message}")
            raise SyncError(message, response.status_code)

        if not response.content:
            return None
        return response.json()

    async def probe(self) -> bool:
        """True when /health answers within the probe timeout"""
        try:
            async with self._client(timeout=PROBE_TIMEOUT) as client:
                response = await client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"Connectivity probe failed: {e}")
            return False

    # Auth and verification

    async def create_session(self, id_token: str) -> dict:
        return await self._request("POST", "/auth/session", json={"id_token": id_token})

    async def signup(
        self, email: str, password: str, confirm_password: str, display_name: Optional[str] = None
    ) -> dict:
        return await self._request(
            "POST",
            "/auth/signup",
            json={
                "email": email,
                "password": password,
                "confirm_password": confirm_password,
                "display_name": display_name,
            },
        )

    async def send_verification_code(self) -> dict:
        return await self._request("POST", "/verification/send-code")

    async def verify_code(self, code: str) -> dict:
        return await self._request("POST", "/verification/verify", json={"code": code})

    # Profiles

    async def get_profile(self) -> Optional[dict]:
        try:
            return await self._request("GET", "/users/me")
        except SyncError as e:
            if e.status_code == 404:
                return None
            raise

    async def create_profile(self, display_name: Optional[str] = None) -> dict:
        # The API creates the profile on first authenticated request
        data = {"display_name": display_name} if display_name else {}
        return await self._request("PATCH", "/users/me", json=data)

    async def update_profile(self, data: dict) -> dict:
        return await self._request("PATCH", "/users/me", json=data)

    async def update_bio(self, bio: str) -> dict:
        return await self._request("PUT", "/users/me/bio", json={"bio": bio})

    async def update_availability(self, availability: list[dict]) -> dict:
        return await self._request(
            "PUT", "/users/me/availability", json={"availability": availability}
        )

    async def get_user(self, uid: str) -> dict:
        return await self._request("GET", f"/users/{uid}")

    async def free_time(self, other_uid: str) -> dict:
        return await self._request("GET", f"/users/{other_uid}/free-time")

    # Tasks

    async def get_tasks(self) -> dict:
        return await self._request("GET", "/tasks")

    async def save_tasks(self, tasks: list[dict]) -> dict:
        return await self._request("PUT", "/tasks", json={"tasks": tasks})

    # Search and follow

    async def search(self, term: str, limit: Optional[int] = None) -> list[dict]:
        params = {"q": term}
        if limit:
            params["limit"] = limit
        return await self._request("GET", "/users/search", params=params)

    async def follow(self, uid: str) -> dict:
        return await self._request("POST", f"/users/{uid}/follow")

    async def unfollow(self, uid: str) -> dict:
        return await self._request("DELETE", f"/users/{uid}/follow")

    def watch(
        self,
        fetch: Callable[[], Awaitable[Optional[dict]]],
        callback: Callable[[dict], Any],
        interval: float = 5.0,
    ) -> Callable[[], None]:
        """
        Poll `fetch` and call `callback` whenever the document's `updated_at`
        changes. Must be called from a running event loop; returns the
        unsubscribe callable.
        """

        async def poll():
            last_seen = object()
            while True:
                try:
                    document = await fetch()
                except SyncError as e:
                    logger.debug(f"Watch poll failed: {e.message}")
                    document = None
                if document is not None and document.get("updated_at") != last_seen:
                    last_seen = document.get("updated_at")
                    result = callback(document)
                    if asyncio.iscoroutine(result):
                        await result
                await asyncio.sleep(interval)

        task = asyncio.get_running_loop().create_task(poll())

        def unsubscribe():
            task.cancel()

        return unsubscribe
