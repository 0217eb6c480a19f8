"""In-memory state containers for fetched entities.

Every method is a synchronous state transition: no I/O, no failure modes.
Listeners registered with ``subscribe`` are called after each transition.
"""

import logging
import uuid
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)

StoreListener = Callable[["EntityStore"], None]


def shallow_merge(existing: E, changes: BaseModel) -> E:
    """Copies the fields explicitly set on ``changes`` over ``existing``.

    Fields only ``existing`` has (e.g. joined players) are kept, except that a
    changed ``<name>_id`` also replaces the object joined as ``<name>``.
    """
    updates = {name: getattr(changes, name) for name in changes.model_fields_set}
    fields = type(existing).model_fields
    for name, value in list(updates.items()):
        joined = name[:-3] if name.endswith("_id") else None
        if joined in fields and joined not in updates and getattr(existing, name, None) != value:
            updates[joined] = _find_joined(existing, value)
    return existing.model_copy(update=updates)


def _find_joined(entity: BaseModel, entity_id) -> Optional[BaseModel]:
    # e.g. a new winner_id that names a player already joined on the match
    if entity_id is None:
        return None
    for name in type(entity).model_fields:
        value = getattr(entity, name)
        if isinstance(value, BaseModel) and getattr(value, "id", None) == entity_id:
            return value
    return None


class EntityStore(Generic[E]):
    def __init__(self):
        self.items: List[E] = []
        self.current: Optional[E] = None
        self.is_loading: bool = False
        self.error: Optional[Exception] = None
        self._listeners: Dict[str, StoreListener] = {}

    # --- Observation ---

    def subscribe(self, listener: StoreListener) -> str:
        token = uuid.uuid4().hex
        self._listeners[token] = listener
        return token

    def unsubscribe(self, token: str) -> bool:
        return self._listeners.pop(token, None) is not None

    def _notify(self) -> None:
        for listener in list(self._listeners.values()):
            try:
                listener(self)
            except Exception:
                logger.exception("Store listener failed")

    # --- Transitions ---

    def set_items(self, items: List[E]) -> None:
        self.items = list(items)
        self._notify()

    def set_current(self, entity: Optional[E]) -> None:
        self.current = entity
        self._notify()

    def set_loading(self, loading: bool) -> None:
        self.is_loading = loading
        self._notify()

    def set_error(self, error: Optional[Exception]) -> None:
        self.error = error
        self._notify()

    def add(self, entity: E) -> None:
        self.items = [*self.items, entity]
        self._notify()

    def update(self, entity: BaseModel) -> None:
        entity_id = getattr(entity, "id")
        self.items = [shallow_merge(item, entity) if item.id == entity_id else item for item in self.items]
        if self.current is not None and self.current.id == entity_id:
            self.current = shallow_merge(self.current, entity)
        self._notify()

    def remove(self, entity_id: str) -> None:
        self.items = [item for item in self.items if item.id != entity_id]
        if self.current is not None and self.current.id == entity_id:
            self.current = None
        self._notify()

    def get(self, entity_id: str) -> Optional[E]:
        return next((item for item in self.items if item.id == entity_id), None)

    def reset(self) -> None:
        self.items = []
        self.current = None
        self.is_loading = False
        self.error = None
        self._notify()

    def close(self) -> None:
        """Drops state and listeners at application shutdown."""
        self.reset()
        self._listeners.clear()
