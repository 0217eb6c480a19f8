from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from arena.core.exceptions import ArenaError, to_arena_error

T = TypeVar("T")

@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a remote call: exactly one of ``data`` / ``error`` is meaningful.

    Deletes succeed with ``data=None``, so callers branch on ``error``.
    """
    data: Optional[T] = None
    error: Optional[ArenaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: BaseException) -> "Result[T]":
        return cls(data=None, error=to_arena_error(error))
