"""
Dashboard gate.

- Unauthenticated requests to /dashboard* go to /login.
- Logged-in admins outside the allow-list go to /unauthorized.
- An authorized admin opening /login goes to /dashboard.

/api/* and /graphql are not gated here; they check credentials themselves.
"""
from typing import Callable

from fastapi import Request
from fastapi.responses import RedirectResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.auth.dependencies import resolve_auth
from app.core.logging_config import get_logger, log_security_event
from app.db.postgresql import SessionLocal
from app.security.jwt import set_auth_cookies

logger = get_logger("auth.middleware")

PROTECTED_PREFIXES = ("/dashboard",)
LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"
DASHBOARD_PATH = "/dashboard"


def is_protected(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in PROTECTED_PREFIXES)


class DashboardGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not (is_protected(path) or path == LOGIN_PATH):
            return await call_next(request)

        # Tests point the gate at their own engine through app.state
        session_factory = getattr(request.app.state, "session_factory", None) or SessionLocal
        async with session_factory() as db:
            auth = await resolve_auth(db, request)

        if is_protected(path):
            if auth.account is None:
                response = RedirectResponse(LOGIN_PATH, status_code=307)
            elif not auth.is_authorized:
                log_security_event("unauthorized_dashboard_access", f"email={auth.account.email} path={path}")
                response = RedirectResponse(UNAUTHORIZED_PATH, status_code=307)
            else:
                response = await call_next(request)
        elif auth.is_authorized:
            response = RedirectResponse(DASHBOARD_PATH, status_code=307)
        else:
            response = await call_next(request)

        if auth.new_access_token:
            set_auth_cookies(response, auth.new_access_token)
        return response
