from datetime import datetime, timezone
from typing import Any, MutableMapping, Optional, Tuple

from jose import JWTError, jwt

from arena.schemas.auth_schemas import AuthSession

# Keys used in the signed cookie session
ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_ID_KEY = "user_id"

# Treat tokens about to expire as expired so the refresh happens before the remote call
EXPIRY_LEEWAY_SECONDS = 30

def token_expires_at(token: str) -> Optional[datetime]:
    """Reads the `exp` claim without verifying the signature.

    The auth service verifies the token itself; this only avoids a round trip
    with a token that is already known to be stale.
    """
    claims = jwt.get_unverified_claims(token)
    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)

def is_token_expired(token: str, leeway: int = EXPIRY_LEEWAY_SECONDS) -> bool:
    try:
        expires_at = token_expires_at(token)
    except JWTError:
        return True
    if expires_at is None:
        return False
    return expires_at.timestamp() - leeway <= datetime.now(timezone.utc).timestamp()

def token_session_id(token: str) -> Optional[str]:
    """The auth service's `session_id` claim, shared by every token of one sign-in."""
    try:
        return jwt.get_unverified_claims(token).get("session_id")
    except JWTError:
        return None

def read_session_tokens(session: MutableMapping[str, Any]) -> Optional[Tuple[str, Optional[str]]]:
    access_token = session.get(ACCESS_TOKEN_KEY)
    if not access_token:
        return None
    return access_token, session.get(REFRESH_TOKEN_KEY)

def store_session(session: MutableMapping[str, Any], auth_session: AuthSession) -> None:
    session[ACCESS_TOKEN_KEY] = auth_session.access_token
    session[REFRESH_TOKEN_KEY] = auth_session.refresh_token
    session[USER_ID_KEY] = auth_session.user.id

def clear_session(session: MutableMapping[str, Any]) -> None:
    for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_ID_KEY):
        session.pop(key, None)
