from typing import TypeVar

from fastapi import HTTPException, status

from arena.core.exceptions import AuthenticationError, NotFoundError, RemoteServiceError
from arena.schemas.result_schemas import Result

T = TypeVar("T")

def unwrap(result: Result[T], not_found_detail: str = "Not found") -> T:
    """Returns the result's data or raises the HTTPException matching its error."""
    error = result.error
    if error is None:
        return result.data
    if isinstance(error, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_detail)
    if isinstance(error, AuthenticationError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=error.message)
    if isinstance(error, RemoteServiceError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
