from typing import NoReturn

from fastapi import HTTPException, status

from booking.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    SchedulingError,
)


def raise_scheduling_http_error(exc: SchedulingError) -> NoReturn:
    detail = {"reason": exc.reason, "message": str(exc)}
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    if isinstance(exc, PermissionDeniedError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
