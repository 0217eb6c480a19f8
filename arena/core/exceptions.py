"""Error types surfaced by the data-access layer.

Services never let these escape; they travel inside a ``Result`` and the
page or API layer decides how to show them.
"""

import asyncio
from typing import Optional

import httpx
from supabase import AuthApiError, AuthError, PostgrestAPIError

# PostgREST code for "JSON object requested, multiple (or no) rows returned"
NO_ROWS_CODE = "PGRST116"


class ArenaError(Exception):
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


class NotFoundError(ArenaError):
    """The requested row does not exist or is hidden by row-level security."""


class RemoteServiceError(ArenaError):
    """The service could not be reached or rejected the request."""


class AuthenticationError(ArenaError):
    """Credentials or session were rejected by the auth service."""


def to_arena_error(exc: BaseException) -> ArenaError:
    if isinstance(exc, ArenaError):
        return exc
    if isinstance(exc, PostgrestAPIError):
        if exc.code == NO_ROWS_CODE:
            return NotFoundError(exc.message or "Row not found", code=exc.code)
        return RemoteServiceError(exc.message or str(exc), code=exc.code)
    if isinstance(exc, AuthApiError):
        # Surfaced verbatim so forms can show e.g. "Email not confirmed"
        return AuthenticationError(exc.message, code=getattr(exc, "code", None))
    if isinstance(exc, AuthError):
        return AuthenticationError(exc.message)
    if isinstance(exc, (httpx.HTTPError, asyncio.TimeoutError)):
        return RemoteServiceError(f"Remote service unavailable: {exc}")
    return RemoteServiceError(str(exc) or exc.__class__.__name__)
