"""Order status transition helpers."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session, selectinload

from dailyorders.core.config import settings
from dailyorders.models.order import Order
from dailyorders.services.errors import InvalidStatusTransitionError, NotFoundError, OrderValidationError
from dailyorders.services.inventory_service import release

logger = logging.getLogger(__name__)

ORDER_STATUSES: list[str] = ["pending_payment", "payment_confirmed", "fulfilled", "cancelled"]

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending_payment": {"payment_confirmed", "cancelled"},
    "payment_confirmed": {"fulfilled", "cancelled"},
    "fulfilled": set(),
    "cancelled": set(),
}


def can_transition(current: str, new: str) -> bool:
    """Return whether order can move from current to new status."""
    return new in ALLOWED_TRANSITIONS.get(current, set())


def set_status(order: Order, new_status: str, now: datetime) -> None:
    """Set status and update corresponding timestamps."""
    order.status = new_status
    order.status_updated_at = now

    if new_status == "payment_confirmed":
        order.payment_confirmed_at = now
    elif new_status == "fulfilled":
        order.fulfilled_at = now
    elif new_status == "cancelled":
        order.cancelled_at = now


def restock_cancelled_order(db: Session, order: Order) -> int:
    """Return the daily stock held by a cancelled order; returns units released."""
    released = 0
    for item in order.items:
        if item.daily_menu_item_id is None:
            continue
        release(db, item.daily_menu_item_id, item.quantity)
        released += item.quantity
    return released


def update_order_status(db: Session, order_id: int, new_status: str, now: datetime) -> Order:
    """Move an order along the fulfillment flow, rejecting illegal transitions."""
    if new_status not in ORDER_STATUSES:
        raise OrderValidationError(f"Unknown order status: {new_status}.")

    order: Order | None = (
        db.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
    )
    if order is None:
        raise NotFoundError(f"Order {order_id} not found.")

    previous = order.status
    if not can_transition(previous, new_status):
        raise InvalidStatusTransitionError(f"Order cannot move from {previous} to {new_status}.")

    try:
        set_status(order, new_status, now)
        if new_status == "cancelled" and settings.restock_on_cancel:
            released = restock_cancelled_order(db, order)
            logger.info("Order %s cancelled, %s units returned to stock", order.id, released)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    logger.info("Order %s status %s -> %s", order.id, previous, new_status)
    return order
