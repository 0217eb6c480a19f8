from pydantic import BaseModel
from typing import Optional

class AuthUser(BaseModel):
    # Identity as issued by the auth service; the profile row lives in `users`
    id: str
    email: Optional[str] = None

class AuthSession(BaseModel):
    user: AuthUser
    access_token: str
    refresh_token: Optional[str] = None
    refreshed: bool = False # True when the access token was renewed during the check

    @classmethod
    def from_supabase(cls, session, refreshed: bool = False) -> "AuthSession":
        return cls(
            user=AuthUser(id=str(session.user.id), email=session.user.email),
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            refreshed=refreshed,
        )
