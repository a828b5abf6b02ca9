"""Store schedule, acceptance and catalog endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from dailyorders.api.v1.errors import to_http_exception
from dailyorders.db.session import get_db
from dailyorders.models.store import MenuItem, Store
from dailyorders.schemas.store import (
    AcceptanceOverrideUpdate,
    AcceptanceResponse,
    MenuItemCreate,
    MenuItemResponse,
    RefreshAcceptanceResponse,
    ScheduleUpdate,
    StoreCreate,
    StoreResponse,
)
from dailyorders.services.acceptance import describe, evaluate
from dailyorders.services.errors import OrderingError
from dailyorders.services.store_service import (
    create_menu_item,
    create_store,
    get_store,
    list_menu_items,
    refresh_acceptance_overrides,
    schedule_for,
    set_acceptance_override,
    update_schedule,
)
from dailyorders.utils.time import store_now

router: APIRouter = APIRouter()


@router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
def create_store_endpoint(payload: StoreCreate, db: Session = Depends(get_db)) -> Store:
    """Register a store with its ordering window."""
    try:
        return create_store(
            db,
            name=payload.name,
            phone=payload.phone,
            timezone_name=payload.timezone,
            business_start_time=payload.business_start_time,
            order_cutoff_time=payload.order_cutoff_time,
            acceptance_override=payload.acceptance_override,
            delivery_fee=payload.delivery_fee,
        )
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.post("/refresh-acceptance", response_model=RefreshAcceptanceResponse)
def refresh_acceptance_endpoint(db: Session = Depends(get_db)) -> RefreshAcceptanceResponse:
    """Normalize every store's acceptance override against its local clock."""
    return RefreshAcceptanceResponse(updated_stores=refresh_acceptance_overrides(db, clock=store_now))


@router.get("/{store_id}", response_model=StoreResponse)
def get_store_endpoint(store_id: int, db: Session = Depends(get_db)) -> Store:
    try:
        return get_store(db, store_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{store_id}/acceptance", response_model=AcceptanceResponse)
def get_acceptance_endpoint(store_id: int, db: Session = Depends(get_db)) -> AcceptanceResponse:
    """Tell customers whether ordering is open right now and for which date."""
    try:
        store = get_store(db, store_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    verdict = evaluate(store_now(store.timezone), schedule_for(store))
    return AcceptanceResponse(store_id=store.id, **describe(verdict))


@router.put("/{store_id}/schedule", response_model=StoreResponse)
def update_schedule_endpoint(store_id: int, payload: ScheduleUpdate, db: Session = Depends(get_db)) -> Store:
    try:
        return update_schedule(
            db,
            store_id,
            business_start_time=payload.business_start_time,
            order_cutoff_time=payload.order_cutoff_time,
        )
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.put("/{store_id}/acceptance-override", response_model=StoreResponse)
def set_acceptance_override_endpoint(
    store_id: int,
    payload: AcceptanceOverrideUpdate,
    db: Session = Depends(get_db),
) -> Store:
    """Owner toggle for taking tomorrow's orders after the cutoff."""
    try:
        return set_acceptance_override(db, store_id, payload.status)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{store_id}/menu-items", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item_endpoint(store_id: int, payload: MenuItemCreate, db: Session = Depends(get_db)) -> MenuItem:
    try:
        return create_menu_item(
            db,
            store_id=store_id,
            name=payload.name,
            price=payload.price,
            description=payload.description,
            is_active=payload.is_active,
        )
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{store_id}/menu-items", response_model=list[MenuItemResponse])
def list_menu_items_endpoint(store_id: int, db: Session = Depends(get_db)) -> list[MenuItem]:
    try:
        get_store(db, store_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return list_menu_items(db, store_id)
