"""Store schedule and catalog helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from dailyorders.core.config import settings
from dailyorders.models.store import ACCEPTANCE_STATUSES, MenuItem, Store
from dailyorders.services.acceptance import (
    STATUS_CLOSED,
    STATUS_CURRENT,
    StoreSchedule,
    is_within_order_window,
)
from dailyorders.services.errors import NotFoundError, OrderValidationError
from dailyorders.utils.time import normalize_hhmm, store_now, to_minutes

logger = logging.getLogger(__name__)


def _validated_window(business_start_time: str, order_cutoff_time: str) -> tuple[str, str]:
    """Return canonical window times or raise when they cannot form a same-day window."""
    start_value = normalize_hhmm(business_start_time)
    cutoff_value = normalize_hhmm(order_cutoff_time)
    if start_value is None or cutoff_value is None:
        raise OrderValidationError("Times must be given as HH:MM.")
    if to_minutes(start_value) >= to_minutes(cutoff_value):
        raise OrderValidationError("Business start time must be earlier than the order cutoff time.")
    return start_value, cutoff_value


def _validated_timezone(timezone_name: str) -> str:
    try:
        ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise OrderValidationError(f"Unknown time zone: {timezone_name}.") from exc
    return timezone_name


def _validated_override(status: str) -> str:
    if status not in ACCEPTANCE_STATUSES:
        raise OrderValidationError(f"Acceptance status must be one of: {', '.join(ACCEPTANCE_STATUSES)}.")
    return status


def create_store(
    db: Session,
    *,
    name: str,
    phone: str | None = None,
    timezone_name: str | None = None,
    business_start_time: str | None = None,
    order_cutoff_time: str | None = None,
    acceptance_override: str = STATUS_CLOSED,
    delivery_fee: Decimal = Decimal("0.00"),
) -> Store:
    """Create a store; missing window times fall back to configured defaults."""
    if not name.strip():
        raise OrderValidationError("Store name is required.")
    start_value, cutoff_value = _validated_window(
        business_start_time or settings.default_business_start_time,
        order_cutoff_time or settings.default_order_cutoff_time,
    )
    store = Store(
        name=name.strip(),
        phone=phone,
        timezone=_validated_timezone(timezone_name or settings.store_timezone),
        business_start_time=start_value,
        order_cutoff_time=cutoff_value,
        acceptance_override=_validated_override(acceptance_override),
        delivery_fee=delivery_fee,
        is_active=True,
    )
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


def get_store(db: Session, store_id: int) -> Store:
    store: Store | None = db.get(Store, store_id)
    if store is None or not store.is_active:
        raise NotFoundError(f"Store {store_id} not found.")
    return store


def schedule_for(store: Store) -> StoreSchedule:
    """Return the evaluator snapshot for a loaded store row."""
    return StoreSchedule(
        business_start_time=store.business_start_time,
        order_cutoff_time=store.order_cutoff_time,
        acceptance_override=store.acceptance_override,
    )


def get_schedule(db: Session, store_id: int) -> StoreSchedule:
    return schedule_for(get_store(db, store_id))


def update_schedule(db: Session, store_id: int, *, business_start_time: str, order_cutoff_time: str) -> Store:
    """Persist new window times after validating they form a same-day window."""
    store = get_store(db, store_id)
    store.business_start_time, store.order_cutoff_time = _validated_window(business_start_time, order_cutoff_time)
    db.commit()
    db.refresh(store)
    logger.info("Store %s schedule set to %s-%s", store.id, store.business_start_time, store.order_cutoff_time)
    return store


def set_acceptance_override(db: Session, store_id: int, status: str) -> Store:
    """Owner action: set the after-cutoff acceptance status."""
    store = get_store(db, store_id)
    store.acceptance_override = _validated_override(status)
    db.commit()
    db.refresh(store)
    logger.info("Store %s acceptance override set to %s", store.id, store.acceptance_override)
    return store


def refresh_acceptance_overrides(db: Session, clock: Callable[[str], datetime] | None = None) -> int:
    """Normalize stored overrides against each store's current time.

    Inside the window the override becomes ``current``; past the window a stale
    ``current`` becomes ``closed``. ``tomorrow`` is left alone. The evaluator
    recomputes the window on every call, so skipping this job never opens
    ordering by mistake. Returns the number of stores changed.
    """
    clock = clock or store_now
    changed = 0
    stores: list[Store] = db.query(Store).filter(Store.is_active.is_(True)).order_by(Store.id.asc()).all()
    for store in stores:
        start_minutes = to_minutes(store.business_start_time)
        cutoff_minutes = to_minutes(store.order_cutoff_time)
        if start_minutes is None or cutoff_minutes is None:
            logger.warning("Store %s has an unreadable schedule; skipping refresh", store.id)
            continue

        now = clock(store.timezone)
        now_minutes = now.hour * 60 + now.minute
        if is_within_order_window(now_minutes, start_minutes, cutoff_minutes):
            desired = STATUS_CURRENT
        elif store.acceptance_override == STATUS_CURRENT:
            desired = STATUS_CLOSED
        else:
            desired = store.acceptance_override

        if desired != store.acceptance_override:
            logger.info("Store %s acceptance %s -> %s", store.id, store.acceptance_override, desired)
            store.acceptance_override = desired
            changed += 1

    if changed:
        db.commit()
    return changed


def create_menu_item(
    db: Session,
    *,
    store_id: int,
    name: str,
    price: Decimal,
    description: str | None = None,
    is_active: bool = True,
) -> MenuItem:
    """Create and persist a catalog item."""
    get_store(db, store_id)
    if price < 0:
        raise OrderValidationError("Price must not be negative.")
    item = MenuItem(store_id=store_id, name=name, description=description, price=price, is_active=is_active)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def list_menu_items(db: Session, store_id: int) -> list[MenuItem]:
    """Return complete catalog for one store, active and inactive."""
    return db.query(MenuItem).filter(MenuItem.store_id == store_id).order_by(MenuItem.id.asc()).all()
