"""Order endpoints."""

from datetime import date, datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from dailyorders.api.v1.errors import to_http_exception
from dailyorders.db.session import get_db
from dailyorders.models.order import Order
from dailyorders.schemas.order import OrderCreate, OrderLookupResponse, OrderResponse, OrderStatusUpdate
from dailyorders.services.errors import OrderingError
from dailyorders.services.notification_service import notify_owner_new_order
from dailyorders.services.order_service import (
    CartLine,
    CustomerInfo,
    OrderPage,
    get_order,
    list_orders_by_phone,
    list_store_orders,
    place_order,
)
from dailyorders.services.order_status import update_order_status
from dailyorders.services.store_service import get_store
from dailyorders.utils.time import store_now

router: APIRouter = APIRouter()


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_order_endpoint(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> Order:
    """Accept an order for the store's current ordering date."""

    def schedule_owner_notification(store_id: int, order_id: int) -> None:
        background_tasks.add_task(notify_owner_new_order, store_id, order_id)

    customer = CustomerInfo(
        name=payload.customer_name,
        phone=payload.customer_phone,
        payment_method=payload.payment_method,
        depositor_name=payload.depositor_name,
        order_type=payload.order_type,
        delivery_address=payload.delivery_address,
        requested_time=payload.requested_time,
        special_requests=payload.special_requests,
    )
    try:
        store = get_store(db, payload.store_id)
        return place_order(
            db,
            store.id,
            [CartLine(menu_id=item.menu_id, quantity=item.quantity) for item in payload.items],
            customer,
            store_now(store.timezone),
            daily_menu_id=payload.daily_menu_id,
            notifier=schedule_owner_notification,
        )
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.get("", response_model=list[OrderResponse])
def list_orders_endpoint(
    store_id: int = Query(...),
    menu_date: date | None = Query(default=None),
    order_status: str | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
) -> list[Order]:
    """List a store's orders for the owner, optionally by date and status."""
    try:
        get_store(db, store_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return list_store_orders(db, store_id, menu_date=menu_date, status=order_status)


@router.get("/lookup", response_model=OrderLookupResponse)
def lookup_orders_endpoint(
    store_id: int = Query(...),
    phone: str = Query(...),
    page: int = Query(default=1),
    limit: int = Query(default=5),
    db: Session = Depends(get_db),
) -> OrderPage:
    """Customer looks up their own orders by phone number."""
    try:
        return list_orders_by_phone(db, store_id, phone, page=page, limit=limit)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{order_id}", response_model=OrderResponse)
def get_order_endpoint(order_id: int, db: Session = Depends(get_db)) -> Order:
    try:
        return get_order(db, order_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status_endpoint(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
) -> Order:
    """Owner moves an order along pending_payment, payment_confirmed, fulfilled."""
    try:
        return update_order_status(db, order_id, payload.status, datetime.now(timezone.utc))
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
