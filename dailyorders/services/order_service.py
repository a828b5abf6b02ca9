"""Order intake: window check, stock reservation and order persistence.

``place_order`` either writes a complete order with all its stock reserved or
leaves the database exactly as it found it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import Session, selectinload

from dailyorders.models.menu import DailyMenu, DailyMenuItem
from dailyorders.models.order import Order, OrderItem
from dailyorders.models.store import MenuItem, Store
from dailyorders.services.acceptance import AcceptanceVerdict, evaluate
from dailyorders.services.errors import (
    InsufficientStockError,
    NotFoundError,
    OrderingClosedError,
    OrderingError,
    OrderValidationError,
)
from dailyorders.services.inventory_service import reserve_lines
from dailyorders.services.order_status import set_status
from dailyorders.services.store_service import get_store, schedule_for

logger = logging.getLogger(__name__)

PAYMENT_METHODS: tuple[str, ...] = ("bank_transfer", "card", "cash")
ORDER_TYPES: tuple[str, ...] = ("pickup", "delivery")

Notifier = Callable[[int, int], None]


@dataclass(frozen=True)
class CartLine:
    menu_id: int
    quantity: int


@dataclass(frozen=True)
class CustomerInfo:
    """Contact, payment and handover details supplied with an order."""

    name: str
    phone: str
    payment_method: str
    depositor_name: str | None = None
    order_type: str = "pickup"
    delivery_address: str | None = None
    requested_time: str | None = None
    special_requests: str | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def merge_cart_lines(cart_lines: Iterable[CartLine]) -> list[CartLine]:
    """Validate quantities and fold repeated menu items into one line each."""
    totals: dict[int, int] = {}
    for line in cart_lines:
        if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity < 1:
            raise OrderValidationError("Each item quantity must be at least 1.")
        totals[line.menu_id] = totals.get(line.menu_id, 0) + line.quantity
    if not totals:
        raise OrderValidationError("Your cart is empty.")
    return [CartLine(menu_id=menu_id, quantity=quantity) for menu_id, quantity in totals.items()]


def validate_customer(customer: CustomerInfo) -> CustomerInfo:
    """Return a trimmed copy of the customer details or raise ``OrderValidationError``."""
    name = _clean(customer.name)
    phone = _clean(customer.phone)
    if name is None or phone is None:
        raise OrderValidationError("Please enter your name and phone number.")
    if customer.payment_method not in PAYMENT_METHODS:
        raise OrderValidationError("Please select a payment method.")
    depositor_name = _clean(customer.depositor_name)
    if customer.payment_method == "bank_transfer" and depositor_name is None:
        raise OrderValidationError("Please enter the depositor name for the bank transfer.")
    if customer.order_type not in ORDER_TYPES:
        raise OrderValidationError("Order type must be pickup or delivery.")
    delivery_address = _clean(customer.delivery_address)
    if customer.order_type == "delivery" and delivery_address is None:
        raise OrderValidationError("Please enter a delivery address.")
    return CustomerInfo(
        name=name,
        phone=phone,
        payment_method=customer.payment_method,
        depositor_name=depositor_name,
        order_type=customer.order_type,
        delivery_address=delivery_address,
        requested_time=_clean(customer.requested_time),
        special_requests=_clean(customer.special_requests),
    )


def _load_daily_menu(db: Session, store_id: int, daily_menu_id: int, target_date: date) -> DailyMenu:
    daily_menu: DailyMenu | None = (
        db.query(DailyMenu)
        .options(selectinload(DailyMenu.items))
        .filter(DailyMenu.id == daily_menu_id)
        .first()
    )
    if daily_menu is None or daily_menu.store_id != store_id:
        raise OrderValidationError("This menu is no longer available.")
    if not daily_menu.is_active:
        raise OrderValidationError("This menu is no longer available.")
    if daily_menu.menu_date != target_date:
        raise OrderValidationError(
            f"This menu is for {daily_menu.menu_date.isoformat()}, but orders are now taken for "
            f"{target_date.isoformat()}. Please refresh the menu."
        )
    return daily_menu


def _stocked_menu_id(db: Session, store_id: int, target_date: date, lines: list[CartLine]) -> int | None:
    """Return the date's published menu when it stocks any cart line."""
    daily_menu: DailyMenu | None = (
        db.query(DailyMenu)
        .options(selectinload(DailyMenu.items))
        .filter(DailyMenu.store_id == store_id, DailyMenu.menu_date == target_date)
        .first()
    )
    if daily_menu is None:
        return None
    stocked = {item.menu_id for item in daily_menu.items}
    if any(line.menu_id in stocked for line in lines):
        return daily_menu.id
    return None


def _load_menu_items(db: Session, store_id: int, lines: list[CartLine]) -> dict[int, MenuItem]:
    menu_ids = [line.menu_id for line in lines]
    rows: list[MenuItem] = db.query(MenuItem).filter(MenuItem.id.in_(menu_ids)).all()
    menu_items = {row.id: row for row in rows if row.store_id == store_id and row.is_active}
    for menu_id in menu_ids:
        if menu_id not in menu_items:
            raise OrderValidationError(f"Menu item {menu_id} is not available.")
    return menu_items


def _reserve_daily_stock(
    db: Session,
    daily_menu: DailyMenu,
    lines: list[CartLine],
    menu_items: dict[int, MenuItem],
) -> dict[int, DailyMenuItem]:
    daily_items = {item.menu_id: item for item in daily_menu.items}
    for line in lines:
        if line.menu_id not in daily_items:
            raise OrderValidationError(f"{menu_items[line.menu_id].name} is not on this menu.")

    try:
        reserve_lines(db, [(daily_items[line.menu_id].id, line.quantity) for line in lines])
    except InsufficientStockError as exc:
        names = {item.id: menu_items[item.menu_id].name for item in daily_items.values() if item.menu_id in menu_items}
        raise InsufficientStockError(
            exc.daily_menu_item_id,
            requested=exc.requested,
            available=exc.available,
            name=names.get(exc.daily_menu_item_id),
        ) from exc
    return daily_items


def place_order(
    db: Session,
    store_id: int,
    cart_lines: Iterable[CartLine],
    customer: CustomerInfo,
    now: datetime,
    daily_menu_id: int | None = None,
    notifier: Notifier | None = None,
) -> Order:
    """Accept an order or raise, leaving no partial state behind.

    ``now`` is the store-local current time. Lines are reserved against the
    daily menu named by ``daily_menu_id``, or against the target date's
    published menu when it stocks any of them. Only carts with no stocked item
    become plain catalog orders without stock bookkeeping.
    """
    try:
        store: Store = get_store(db, store_id)
        lines = merge_cart_lines(cart_lines)
        contact = validate_customer(customer)

        verdict: AcceptanceVerdict = evaluate(now, schedule_for(store))
        if not verdict.can_order or verdict.target_date is None:
            raise OrderingClosedError(verdict.message)
        target_date = verdict.target_date

        menu_items = _load_menu_items(db, store_id, lines)
        if daily_menu_id is None:
            # Stocked items always draw on the day's stock, named menu or not.
            daily_menu_id = _stocked_menu_id(db, store_id, target_date, lines)
        daily_items: dict[int, DailyMenuItem] = {}
        if daily_menu_id is not None:
            daily_menu = _load_daily_menu(db, store_id, daily_menu_id, target_date)
            daily_items = _reserve_daily_stock(db, daily_menu, lines, menu_items)

        delivery_fee = Decimal(store.delivery_fee or 0) if contact.order_type == "delivery" else Decimal("0.00")
        order = Order(
            store_id=store_id,
            daily_menu_id=daily_menu_id,
            menu_date=target_date,
            customer_name=contact.name,
            customer_phone=contact.phone,
            payment_method=contact.payment_method,
            depositor_name=contact.depositor_name,
            order_type=contact.order_type,
            delivery_address=contact.delivery_address,
            requested_time=contact.requested_time,
            special_requests=contact.special_requests,
            delivery_fee=delivery_fee,
        )
        set_status(order, "pending_payment", now)

        subtotal = Decimal("0.00")
        for line in lines:
            menu_item = menu_items[line.menu_id]
            unit_price = Decimal(menu_item.price)
            line_total = unit_price * line.quantity
            subtotal += line_total
            daily_item = daily_items.get(line.menu_id)
            order.items.append(
                OrderItem(
                    menu_id=menu_item.id,
                    daily_menu_item_id=daily_item.id if daily_item is not None else None,
                    name=menu_item.name,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    line_total=line_total,
                )
            )
        order.subtotal_amount = subtotal
        order.total_amount = subtotal + delivery_fee

        db.add(order)
        db.commit()
    except OrderingError as exc:
        db.rollback()
        logger.info("Order rejected for store %s: %s (%s)", store_id, exc.code, exc.message)
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    logger.info(
        "Order %s placed for store %s on %s, total %s",
        order.id,
        store_id,
        order.menu_date.isoformat(),
        order.total_amount,
    )

    if notifier is not None:
        try:
            notifier(store_id, order.id)
        except Exception:
            logger.warning("Owner notification for order %s could not be scheduled", order.id, exc_info=True)
    return order


def get_order(db: Session, order_id: int) -> Order:
    order: Order | None = (
        db.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
    )
    if order is None:
        raise NotFoundError(f"Order {order_id} not found.")
    return order


def list_store_orders(
    db: Session,
    store_id: int,
    menu_date: date | None = None,
    status: str | None = None,
) -> list[Order]:
    """Return a store's orders, oldest first, optionally narrowed by date and status."""
    query = db.query(Order).options(selectinload(Order.items)).filter(Order.store_id == store_id)
    if menu_date is not None:
        query = query.filter(Order.menu_date == menu_date)
    if status is not None:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.asc(), Order.id.asc()).all()


@dataclass(frozen=True)
class OrderPage:
    orders: list[Order]
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


def list_orders_by_phone(db: Session, store_id: int, phone: str, page: int = 1, limit: int = 5) -> OrderPage:
    """Customer lookup: one page of a phone number's orders at a store, newest first."""
    customer_phone = _clean(phone)
    if customer_phone is None:
        raise OrderValidationError("Please enter your phone number.")
    if page < 1 or not 1 <= limit <= 50:
        raise OrderValidationError("Page must be 1 or more and limit between 1 and 50.")
    get_store(db, store_id)

    query = db.query(Order).filter(Order.store_id == store_id, Order.customer_phone == customer_phone)
    total_count = query.count()
    orders = (
        query.options(selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return OrderPage(orders=orders, page=page, limit=limit, total_count=total_count)
