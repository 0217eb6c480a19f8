from fastapi import HTTPException, Request, status

from arena.core import security
from arena.core.config import Settings
from arena.core.database import close_db_client
from arena.core.events import SessionEvents
from arena.stores import AppStores, AuthStore

async def get_db(request: Request):
    # Acts as the signed-in user when the cookie carries a token
    db = await request.app.state.client_factory(request.session.get(security.ACCESS_TOKEN_KEY))
    try:
        yield db
    finally:
        await close_db_client(db)

async def get_anonymous_db(request: Request):
    db = await request.app.state.client_factory(None)
    try:
        yield db
    finally:
        await close_db_client(db)

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_stores(request: Request) -> AppStores:
    return request.app.state.stores

def get_session_events(request: Request) -> SessionEvents:
    return request.app.state.session_events

def get_auth_store(request: Request) -> AuthStore:
    # Set by SessionGuardMiddleware for every request
    return request.state.auth

def get_current_user_id(request: Request) -> str:
    auth_store: AuthStore = request.state.auth
    if not auth_store.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return auth_store.user.id
