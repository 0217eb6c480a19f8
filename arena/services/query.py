import logging
from typing import Any, Awaitable, Callable, List, TypeVar

from arena.core.exceptions import NotFoundError
from arena.core.retry import with_retry
from arena.schemas.result_schemas import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_query(
    description: str,
    execute: Callable[[], Awaitable[Any]],
    parse: Callable[[Any], T],
) -> Result[T]:
    """
    Runs one remote call through the retry wrapper and maps its response data.
    Nothing raised by the call or by ``parse`` escapes: it becomes ``Result.error``.
    ``execute`` must be re-invocable (e.g. a built query's bound ``execute``).
    """
    try:
        response = await with_retry(execute)
        return Result.success(parse(response.data))
    except Exception as e:
        logger.error("Error %s: %s", description, e)
        return Result.failure(e)


def first_row(rows: List[dict], what: str) -> dict:
    """Insert/update return a list of affected rows; an empty list means no match."""
    if not rows:
        raise NotFoundError(f"{what} not found")
    return rows[0]
