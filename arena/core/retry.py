import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
from supabase import AuthRetryableError

from arena.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(exc: BaseException) -> bool:
    """Only network-level failures are worth another attempt."""
    return isinstance(exc, (httpx.TransportError, asyncio.TimeoutError, AuthRetryableError))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    retry_on: Callable[[BaseException], bool] = is_transient,
) -> T:
    """
    Awaits ``operation()`` until it succeeds or ``max_attempts`` invocations failed.
    Waits base_delay * 2**attempt between attempts (0.5s, 1s, 2s with the defaults).
    The last failure is re-raised unchanged; failures rejected by ``retry_on``
    are re-raised immediately.
    """
    if max_attempts is None:
        max_attempts = settings.RETRY_MAX_ATTEMPTS
    if base_delay is None:
        base_delay = settings.RETRY_BASE_DELAY
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(max_attempts):
        try:
            return await operation()
        except Exception as e:
            if not retry_on(e) or attempt == max_attempts - 1:
                raise
            delay = base_delay * (2 ** attempt)
            logger.warning(
                "Remote call failed (attempt %d/%d): %s; retrying in %.2fs",
                attempt + 1, max_attempts, e, delay,
            )
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable")
