import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from arena.core import security
from arena.core.database import close_db_client
from arena.core.events import SessionEvent
from arena.core.exceptions import AuthenticationError
from arena.schemas.auth_schemas import AuthSession
from arena.services import auth_service
from arena.stores.auth_store import AuthStore

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
DEFAULT_AUTHENTICATED_PATH = "/dashboard"

# Plain prefixes: "/tournaments-archive" is protected as well as "/tournaments/1"
PROTECTED_PREFIXES = ("/dashboard", "/tournaments", "/matches", "/wallet")
AUTH_ONLY_PATHS = ("/auth/login", "/auth/register")


def resolve_redirect(path: str, has_session: bool) -> Optional[str]:
    """Where a request for ``path`` must be sent instead, or None to serve it."""
    if not has_session and path.startswith(PROTECTED_PREFIXES):
        return LOGIN_PATH
    if has_session and path.startswith(AUTH_ONLY_PATHS):
        return DEFAULT_AUTHENTICATED_PATH
    return None


class SessionGuardMiddleware(BaseHTTPMiddleware):
    """
    Confirms the cookie session with the auth service before each request,
    exposes the result as ``request.state.auth`` and applies ``resolve_redirect``.
    Any failure while checking counts as "no session".
    Must run inside SessionMiddleware.
    """

    async def dispatch(self, request: Request, call_next):
        auth_store = AuthStore()
        auth_store.bind(request.app.state.session_events)
        request.state.auth = auth_store
        try:
            auth_session = await self._check_session(request)
            auth_store.set_user(auth_session.user if auth_session else None)
            auth_store.set_loading(False)

            redirect_to = resolve_redirect(request.url.path, auth_store.is_authenticated)
            if redirect_to:
                return RedirectResponse(url=redirect_to, status_code=303)
            return await call_next(request)
        finally:
            auth_store.unbind()

    async def _check_session(self, request: Request) -> Optional[AuthSession]:
        tokens = security.read_session_tokens(request.session)
        if tokens is None:
            return None
        access_token, refresh_token = tokens

        db = None
        try:
            db = await request.app.state.client_factory(None)
            result = await auth_service.get_session(db, access_token, refresh_token)
        except Exception:
            logger.exception("Could not check session for %s", request.url.path)
            return None
        finally:
            if db is not None:
                await close_db_client(db)

        if result.error is not None:
            # Keep the cookie through outages; drop it once the service rejects it
            if isinstance(result.error, AuthenticationError):
                security.clear_session(request.session)
            return None

        if result.data.refreshed:
            security.store_session(request.session, result.data)
            request.app.state.session_events.emit(SessionEvent.TOKEN_REFRESHED, result.data.user.id)
        return result.data
