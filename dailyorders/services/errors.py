"""Domain errors raised by the ordering core.

Each kind maps to one distinct, non-technical message so callers can offer a
different next action (fix input, wait or switch to tomorrow, pick fewer items).
"""

from __future__ import annotations


class OrderingError(Exception):
    """Base class for ordering domain errors."""

    code: str = "ordering_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OrderValidationError(OrderingError):
    """Raised for malformed input: empty cart, missing contact, stale menu date."""

    code = "validation_error"


class OrderingClosedError(OrderingError):
    """Raised when the acceptance window forbids ordering right now."""

    code = "ordering_closed"


class InsufficientStockError(OrderingError):
    """Raised when a requested quantity exceeds the remaining daily stock."""

    code = "insufficient_stock"

    def __init__(self, daily_menu_item_id: int, requested: int, available: int, name: str | None = None) -> None:
        label = name or f"item {daily_menu_item_id}"
        super().__init__(f"Only {available} left of {label}; {requested} requested.")
        self.daily_menu_item_id = daily_menu_item_id
        self.requested = requested
        self.available = available


class InvalidStatusTransitionError(OrderingError):
    """Raised for fulfillment transitions the state machine does not allow."""

    code = "invalid_transition"


class NotFoundError(OrderingError):
    code = "not_found"
