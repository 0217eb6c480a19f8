import logging
from typing import Awaitable, Callable, Optional

from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from arena.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# Builds a client for one request, optionally acting as the signed-in user
ClientFactory = Callable[[Optional[str]], Awaitable[AsyncClient]]

async def create_db_client(access_token: Optional[str] = None, *, settings: Optional[Settings] = None) -> AsyncClient:
    settings = settings or default_settings
    # Sessions live in the cookie, never inside a shared client
    options = AsyncClientOptions(persist_session=False, auto_refresh_token=False)
    client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, options=options)
    if access_token:
        # Row-level security is evaluated against this token
        client.postgrest.auth(access_token)
    return client

async def close_db_client(client: AsyncClient) -> None:
    """Releases the HTTP connection pools opened by one request's client."""
    try:
        await client.postgrest.aclose()
    except Exception:
        logger.exception("Error closing database connection")
    try:
        await client.auth.close()
    except Exception:
        logger.exception("Error closing auth connection")
