"""Daily menu stock bookkeeping.

Every change to ``DailyMenuItem.current_quantity`` goes through one of the
single-statement conditional UPDATEs below. A separate "read quantity, then
write quantity" sequence would lose updates under concurrent orders; a single
UPDATE with the stock check in its WHERE clause is serialized by the database
at the row, on SQLite and PostgreSQL alike.

Functions here never commit on the reservation path: the caller's transaction
decides whether reservations become durable. Owner actions (restock, starting
quantity changes) commit themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from dailyorders.models.menu import DailyMenuItem
from dailyorders.services.errors import InsufficientStockError, NotFoundError, OrderValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecrementResult:
    success: bool
    remaining: int


@dataclass(frozen=True)
class Reservation:
    daily_menu_item_id: int
    quantity: int
    remaining: int


def _current_quantity(db: Session, daily_menu_item_id: int) -> int:
    value: int | None = db.scalar(
        select(DailyMenuItem.current_quantity).where(DailyMenuItem.id == daily_menu_item_id)
    )
    if value is None:
        raise NotFoundError(f"Daily menu item {daily_menu_item_id} not found.")
    return value


def _require_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise OrderValidationError("Quantity must be a positive whole number.")


def conditional_decrement(db: Session, daily_menu_item_id: int, quantity: int) -> DecrementResult:
    """Decrement stock by ``quantity`` only if at least that much remains.

    Returns whether the decrement happened and the quantity left afterwards.
    """
    _require_positive(quantity)
    remaining_expr = DailyMenuItem.current_quantity - quantity
    result = db.execute(
        update(DailyMenuItem)
        .where(DailyMenuItem.id == daily_menu_item_id, DailyMenuItem.current_quantity >= quantity)
        .values(current_quantity=remaining_expr, is_available=remaining_expr > 0)
        .execution_options(synchronize_session=False)
    )
    remaining = _current_quantity(db, daily_menu_item_id)
    return DecrementResult(success=result.rowcount == 1, remaining=remaining)


def reserve(db: Session, daily_menu_item_id: int, quantity: int) -> Reservation:
    """Reserve stock for one line or raise ``InsufficientStockError`` without mutating."""
    outcome = conditional_decrement(db, daily_menu_item_id, quantity)
    if not outcome.success:
        raise InsufficientStockError(daily_menu_item_id, requested=quantity, available=outcome.remaining)
    logger.debug("Reserved %s of daily item %s, %s left", quantity, daily_menu_item_id, outcome.remaining)
    return Reservation(daily_menu_item_id=daily_menu_item_id, quantity=quantity, remaining=outcome.remaining)


def release(db: Session, daily_menu_item_id: int, quantity: int) -> int:
    """Return reserved stock; never lifts ``current_quantity`` above ``starting_quantity``."""
    _require_positive(quantity)
    raised_expr = case(
        (DailyMenuItem.current_quantity + quantity > DailyMenuItem.starting_quantity, DailyMenuItem.starting_quantity),
        else_=DailyMenuItem.current_quantity + quantity,
    )
    db.execute(
        update(DailyMenuItem)
        .where(DailyMenuItem.id == daily_menu_item_id)
        .values(current_quantity=raised_expr, is_available=raised_expr > 0)
        .execution_options(synchronize_session=False)
    )
    remaining = _current_quantity(db, daily_menu_item_id)
    logger.info("Released %s of daily item %s, %s left", quantity, daily_menu_item_id, remaining)
    return remaining


def reserve_lines(db: Session, lines: Iterable[tuple[int, int]]) -> list[Reservation]:
    """Reserve every ``(daily_menu_item_id, quantity)`` line or none of them.

    Lines are reserved in item-id order so concurrent multi-item orders lock
    rows in the same sequence. On the first shortage every earlier reservation
    of this call is released before the error propagates.
    """
    reservations: list[Reservation] = []
    try:
        for daily_menu_item_id, quantity in sorted(lines):
            reservations.append(reserve(db, daily_menu_item_id, quantity))
    except InsufficientStockError:
        for done in reversed(reservations):
            release(db, done.daily_menu_item_id, done.quantity)
        raise
    return reservations


def restock(db: Session, daily_menu_item_id: int, quantity: int) -> DailyMenuItem:
    """Owner action: add fresh stock, raising both starting and remaining quantity."""
    _require_positive(quantity)
    result = db.execute(
        update(DailyMenuItem)
        .where(DailyMenuItem.id == daily_menu_item_id)
        .values(
            starting_quantity=DailyMenuItem.starting_quantity + quantity,
            current_quantity=DailyMenuItem.current_quantity + quantity,
            is_available=True,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise NotFoundError(f"Daily menu item {daily_menu_item_id} not found.")
    db.commit()
    item = db.get(DailyMenuItem, daily_menu_item_id)
    db.refresh(item)
    logger.info("Restocked daily item %s by %s, %s left", daily_menu_item_id, quantity, item.current_quantity)
    return item


def set_starting_quantity(db: Session, daily_menu_item_id: int, starting_quantity: int) -> DailyMenuItem:
    """Owner correction of the day's starting stock.

    Remaining stock shifts by the same delta so units already reserved stay
    reserved. Rejected when the new figure is below what has already been sold.
    """
    if isinstance(starting_quantity, bool) or not isinstance(starting_quantity, int) or starting_quantity < 0:
        raise OrderValidationError("Quantity must be zero or more.")

    shifted_expr = DailyMenuItem.current_quantity + (starting_quantity - DailyMenuItem.starting_quantity)
    result = db.execute(
        update(DailyMenuItem)
        .where(DailyMenuItem.id == daily_menu_item_id, shifted_expr >= 0)
        .values(
            starting_quantity=starting_quantity,
            current_quantity=shifted_expr,
            is_available=shifted_expr > 0,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        item = db.get(DailyMenuItem, daily_menu_item_id)
        if item is None:
            raise NotFoundError(f"Daily menu item {daily_menu_item_id} not found.")
        sold = item.starting_quantity - item.current_quantity
        raise OrderValidationError(f"Starting quantity cannot go below the {sold} already ordered.")
    db.commit()
    item = db.get(DailyMenuItem, daily_menu_item_id)
    db.refresh(item)
    return item
