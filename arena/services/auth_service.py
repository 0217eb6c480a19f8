"""Thin wrappers around the auth service.

Rejected credentials come back as ``AuthenticationError`` with the service's
message untouched (e.g. "Email not confirmed"); only transport failures are
retried.
"""

import logging
from typing import Optional

from supabase import AsyncClient

from arena.core import security
from arena.core.exceptions import AuthenticationError
from arena.core.retry import with_retry
from arena.schemas.auth_schemas import AuthSession, AuthUser
from arena.schemas.result_schemas import Result

logger = logging.getLogger(__name__)


def _session_from_response(response, refreshed: bool = False) -> AuthSession:
    if response is None or response.session is None:
        raise AuthenticationError("No session returned by the auth service")
    return AuthSession.from_supabase(response.session, refreshed=refreshed)


async def sign_in(db: AsyncClient, email: str, password: str) -> Result[AuthSession]:
    try:
        response = await with_retry(
            lambda: db.auth.sign_in_with_password({"email": email, "password": password})
        )
        return Result.success(_session_from_response(response))
    except Exception as e:
        logger.error("Sign in error for %s: %s", email, e)
        return Result.failure(e)


async def sign_up(
    db: AsyncClient, email: str, password: str, username: str, redirect_to: Optional[str] = None
) -> Result[AuthUser]:
    """Registers the account; the profile row in `users` is created server side.

    No session is returned until the email address is confirmed.
    """
    options = {"data": {"username": username}}
    if redirect_to:
        options["email_redirect_to"] = redirect_to
    try:
        response = await with_retry(
            lambda: db.auth.sign_up({"email": email, "password": password, "options": options})
        )
        if response is None or response.user is None:
            raise AuthenticationError("Registration failed. Please try again.")
        return Result.success(AuthUser(id=str(response.user.id), email=response.user.email))
    except Exception as e:
        logger.error("Sign up error for %s: %s", email, e)
        return Result.failure(e)


async def sign_out(db: AsyncClient, access_token: str, refresh_token: Optional[str] = None) -> Result[None]:
    try:
        if refresh_token:
            await with_retry(lambda: db.auth.set_session(access_token, refresh_token))
        await with_retry(db.auth.sign_out)
        return Result.success()
    except Exception as e:
        logger.error("Sign out error: %s", e)
        return Result.failure(e)


async def get_session(db: AsyncClient, access_token: str, refresh_token: Optional[str] = None) -> Result[AuthSession]:
    """Confirms the session with the auth service, refreshing a stale access token."""
    try:
        if security.is_token_expired(access_token):
            if not refresh_token:
                raise AuthenticationError("Session expired")
            response = await with_retry(lambda: db.auth.refresh_session(refresh_token))
            return Result.success(_session_from_response(response, refreshed=True))

        response = await with_retry(lambda: db.auth.get_user(access_token))
        if response is None or response.user is None:
            raise AuthenticationError("Session not found")
        user = AuthUser(id=str(response.user.id), email=response.user.email)
        return Result.success(AuthSession(user=user, access_token=access_token, refresh_token=refresh_token))
    except Exception as e:
        logger.info("Session check failed: %s", e)
        return Result.failure(e)


async def exchange_code_for_session(db: AsyncClient, code: str) -> Result[AuthSession]:
    try:
        response = await with_retry(lambda: db.auth.exchange_code_for_session({"auth_code": code}))
        return Result.success(_session_from_response(response))
    except Exception as e:
        logger.error("Auth callback error: %s", e)
        return Result.failure(e)
