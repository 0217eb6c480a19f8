from typing import Awaitable, Callable, Optional, TypeVar

from arena.schemas.result_schemas import Result
from arena.stores.base import EntityStore

T = TypeVar("T")


async def sync_store(
    store: EntityStore,
    call: Awaitable[Result[T]],
    apply: Optional[Callable[[T], None]] = None,
) -> Result[T]:
    """
    Awaits one resource call with the store's loading flag raised, then records
    the error or applies the success transition (e.g. ``store.add``).
    The result is returned unchanged so the caller can still branch on it.
    """
    store.set_loading(True)
    store.set_error(None)
    try:
        result = await call
    finally:
        store.set_loading(False)

    if result.error is not None:
        store.set_error(result.error)
    elif apply is not None:
        apply(result.data)
    return result
