import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import Optional

import uvicorn
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from arena.api.endpoints import matches as match_endpoints
from arena.api.endpoints import tournaments as tournament_endpoints
from arena.api.endpoints import users as user_endpoints
from arena.core.config import Settings, settings as default_settings
from arena.core.database import ClientFactory, create_db_client
from arena.core.events import SessionEvent, SessionEvents
from arena.core.guard import SessionGuardMiddleware
from arena.core.logging import configure_logging
from arena.routes import auth_routes, page_routes
from arena.stores import AppStores

logger = logging.getLogger(__name__)


def _log_session_change(event: SessionEvent, user_id: Optional[str]) -> None:
    logger.info("Session %s for user %s", event.value, user_id)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Stores live exactly as long as the application
    app.state.stores = AppStores()
    audit_token = app.state.session_events.subscribe(_log_session_change)
    logger.info("Tournament Arena started")
    yield
    app.state.session_events.unsubscribe(audit_token)
    app.state.stores.close()
    logger.info("Tournament Arena stopped")


def create_app(settings: Optional[Settings] = None, client_factory: Optional[ClientFactory] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Tournament Arena", lifespan=lifespan)
    app.state.settings = settings
    app.state.client_factory = client_factory or partial(create_db_client, settings=settings)
    app.state.session_events = SessionEvents()

    # Last added runs first: the guard needs the decoded cookie session
    app.add_middleware(SessionGuardMiddleware)
    app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)

    # JSON API
    app.include_router(tournament_endpoints.router, prefix="/api/tournaments", tags=["Tournaments"])
    app.include_router(match_endpoints.router, prefix="/api/matches", tags=["Matches"])
    app.include_router(user_endpoints.router, prefix="/api/users", tags=["Users"])

    # Pages
    app.include_router(auth_routes.router, prefix="/auth", tags=["Authentication"])
    app.include_router(page_routes.router, tags=["Pages"])
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("arena.main:app", host="0.0.0.0", port=8000, reload=True)
