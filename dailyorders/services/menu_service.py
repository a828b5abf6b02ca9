"""Daily menu publishing helpers shared by the API and seed data."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from dailyorders.models.menu import DailyMenu, DailyMenuItem
from dailyorders.models.order import OrderItem
from dailyorders.models.store import MenuItem
from dailyorders.services.errors import NotFoundError, OrderValidationError
from dailyorders.services.store_service import get_store

DEFAULT_DAILY_MENU_TITLE: str = "Today's menu"


def _new_daily_item(db: Session, store_id: int, menu_id: int, quantity: int) -> DailyMenuItem:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise OrderValidationError("Quantity must be zero or more.")
    menu_item: MenuItem | None = db.get(MenuItem, menu_id)
    if menu_item is None or menu_item.store_id != store_id:
        raise NotFoundError(f"Menu item {menu_id} not found for this store.")
    return DailyMenuItem(
        menu_id=menu_id,
        starting_quantity=quantity,
        current_quantity=quantity,
        is_available=quantity > 0,
    )


def publish_daily_menu(
    db: Session,
    *,
    store_id: int,
    menu_date: date,
    items: Iterable[tuple[int, int]],
    title: str | None = None,
    description: str | None = None,
) -> DailyMenu:
    """Create the menu for one store/date with ``(menu_id, quantity)`` stock lines."""
    get_store(db, store_id)
    existing = get_daily_menu(db, store_id=store_id, menu_date=menu_date)
    if existing is not None:
        raise OrderValidationError(f"A daily menu for {menu_date.isoformat()} already exists.")

    daily_menu = DailyMenu(
        store_id=store_id,
        menu_date=menu_date,
        title=title or DEFAULT_DAILY_MENU_TITLE,
        description=description,
        is_active=True,
    )
    seen_menu_ids: set[int] = set()
    for menu_id, quantity in items:
        if menu_id in seen_menu_ids:
            raise OrderValidationError(f"Menu item {menu_id} is listed twice.")
        seen_menu_ids.add(menu_id)
        daily_menu.items.append(_new_daily_item(db, store_id, menu_id, quantity))

    db.add(daily_menu)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise OrderValidationError(f"A daily menu for {menu_date.isoformat()} already exists.") from exc
    db.refresh(daily_menu)
    return daily_menu


def add_daily_menu_item(db: Session, *, daily_menu_id: int, menu_id: int, quantity: int) -> DailyMenuItem:
    """Add one stocked item to an existing daily menu."""
    daily_menu = get_daily_menu_by_id(db, daily_menu_id)
    if any(item.menu_id == menu_id for item in daily_menu.items):
        raise OrderValidationError(f"Menu item {menu_id} is already on this daily menu.")
    daily_item = _new_daily_item(db, daily_menu.store_id, menu_id, quantity)
    daily_menu.items.append(daily_item)
    db.commit()
    db.refresh(daily_item)
    return daily_item


def get_daily_menu_by_id(db: Session, daily_menu_id: int) -> DailyMenu:
    daily_menu: DailyMenu | None = db.get(DailyMenu, daily_menu_id)
    if daily_menu is None:
        raise NotFoundError(f"Daily menu {daily_menu_id} not found.")
    return daily_menu


def get_daily_menu(db: Session, *, store_id: int, menu_date: date) -> DailyMenu | None:
    """Return the store's menu for a date, with its items loaded."""
    return (
        db.query(DailyMenu)
        .options(selectinload(DailyMenu.items).selectinload(DailyMenuItem.menu_item))
        .filter(DailyMenu.store_id == store_id, DailyMenu.menu_date == menu_date)
        .first()
    )


def list_daily_menus(db: Session, store_id: int) -> list[DailyMenu]:
    """Return every menu a store has published, newest date first."""
    return db.query(DailyMenu).filter(DailyMenu.store_id == store_id).order_by(DailyMenu.menu_date.desc()).all()


def list_daily_menu_items(db: Session, daily_menu_id: int) -> list[DailyMenuItem]:
    return (
        db.query(DailyMenuItem)
        .options(selectinload(DailyMenuItem.menu_item))
        .filter(DailyMenuItem.daily_menu_id == daily_menu_id)
        .order_by(DailyMenuItem.id.asc())
        .all()
    )


def set_daily_menu_active(db: Session, daily_menu_id: int, is_active: bool) -> DailyMenu:
    daily_menu = get_daily_menu_by_id(db, daily_menu_id)
    daily_menu.is_active = is_active
    db.commit()
    db.refresh(daily_menu)
    return daily_menu


def remove_daily_menu_item(db: Session, daily_menu_item_id: int) -> None:
    """Delete a stocked item that nobody has ordered yet."""
    daily_item: DailyMenuItem | None = db.get(DailyMenuItem, daily_menu_item_id)
    if daily_item is None:
        raise NotFoundError(f"Daily menu item {daily_menu_item_id} not found.")
    ordered = db.query(OrderItem.id).filter(OrderItem.daily_menu_item_id == daily_menu_item_id).first()
    if ordered is not None or daily_item.current_quantity != daily_item.starting_quantity:
        raise OrderValidationError("Items that already have orders cannot be removed.")
    db.delete(daily_item)
    db.commit()
