"""
Session gate middleware

Page routes that need a signed-in user are checked at request time for the
session cookie (or its flag cookie). Without either, the browser is sent to
the login page with the original path kept in the "from" query parameter.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from .config import SESSION_COOKIE_NAME, SESSION_FLAG_COOKIE

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/dashboard", "/profile", "/settings", "/calendar", "/search")
LOGIN_PATH = "/login"


def is_protected(path: str, prefixes=PROTECTED_PREFIXES) -> bool:
    return any(path == prefix or path.startswith(f"{prefix}/") for prefix in prefixes)


def login_redirect_url(path: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'from': path})}"


class SessionGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, protected_prefixes: Optional[tuple[str, ...]] = None):
        super().__init__(app)
        self.protected_prefixes = protected_prefixes or PROTECTED_PREFIXES

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_protected(path, self.protected_prefixes):
            return await call_next(request)

        has_session = bool(request.cookies.get(SESSION_COOKIE_NAME)) or (
            SESSION_FLAG_COOKIE in request.cookies
        )
        if not has_session:
            logger.debug(f"🔒 No session for {path}, redirecting to login")
            return RedirectResponse(url=login_redirect_url(path), status_code=307)

        return await call_next(request)
