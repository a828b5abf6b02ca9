"""Translate ordering domain errors into HTTP responses."""

from fastapi import HTTPException

from dailyorders.services.errors import (
    InsufficientStockError,
    InvalidStatusTransitionError,
    NotFoundError,
    OrderingClosedError,
    OrderingError,
    OrderValidationError,
)

STATUS_BY_ERROR: dict[type[OrderingError], int] = {
    OrderValidationError: 400,
    OrderingClosedError: 403,
    NotFoundError: 404,
    InsufficientStockError: 409,
    InvalidStatusTransitionError: 409,
}


def to_http_exception(exc: OrderingError) -> HTTPException:
    """Return the HTTP error carrying the domain message and machine code."""
    status_code = STATUS_BY_ERROR.get(type(exc), 400)
    detail: dict[str, object] = {"code": exc.code, "message": exc.message}
    if isinstance(exc, InsufficientStockError):
        detail["daily_menu_item_id"] = exc.daily_menu_item_id
        detail["requested"] = exc.requested
        detail["available"] = exc.available
    return HTTPException(status_code=status_code, detail=detail)
