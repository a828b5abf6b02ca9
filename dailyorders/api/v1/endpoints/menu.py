"""Daily menu and stock endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from dailyorders.api.v1.errors import to_http_exception
from dailyorders.db.session import get_db
from dailyorders.models.menu import DailyMenu, DailyMenuItem
from dailyorders.schemas.menu import (
    DailyMenuActiveUpdate,
    DailyMenuCreate,
    DailyMenuItemPayload,
    DailyMenuItemResponse,
    DailyMenuResponse,
    RestockRequest,
    StartingQuantityUpdate,
)
from dailyorders.services.errors import OrderingError
from dailyorders.services.inventory_service import restock, set_starting_quantity
from dailyorders.services.menu_service import (
    add_daily_menu_item,
    get_daily_menu,
    list_daily_menu_items,
    list_daily_menus,
    publish_daily_menu,
    remove_daily_menu_item,
    set_daily_menu_active,
)
from dailyorders.services.store_service import get_store

router: APIRouter = APIRouter()


def _serialize_daily_item(daily_item: DailyMenuItem) -> DailyMenuItemResponse:
    menu_item = daily_item.menu_item
    return DailyMenuItemResponse(
        id=daily_item.id,
        daily_menu_id=daily_item.daily_menu_id,
        menu_id=daily_item.menu_id,
        name=menu_item.name,
        price=menu_item.price,
        starting_quantity=daily_item.starting_quantity,
        current_quantity=daily_item.current_quantity,
        is_available=daily_item.is_available,
    )


def _serialize_daily_menu(db: Session, daily_menu: DailyMenu) -> DailyMenuResponse:
    return DailyMenuResponse(
        id=daily_menu.id,
        store_id=daily_menu.store_id,
        menu_date=daily_menu.menu_date,
        title=daily_menu.title,
        description=daily_menu.description,
        is_active=daily_menu.is_active,
        items=[_serialize_daily_item(item) for item in list_daily_menu_items(db, daily_menu.id)],
    )


@router.post("", response_model=DailyMenuResponse, status_code=status.HTTP_201_CREATED)
def publish_daily_menu_endpoint(payload: DailyMenuCreate, db: Session = Depends(get_db)) -> DailyMenuResponse:
    """Publish a store's menu for one date with starting stock per item."""
    try:
        daily_menu = publish_daily_menu(
            db,
            store_id=payload.store_id,
            menu_date=payload.menu_date,
            items=[(item.menu_id, item.quantity) for item in payload.items],
            title=payload.title,
            description=payload.description,
        )
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return _serialize_daily_menu(db, daily_menu)


@router.get("", response_model=list[DailyMenuResponse])
def list_daily_menus_endpoint(
    store_id: int = Query(...),
    menu_date: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
) -> list[DailyMenuResponse]:
    """List a store's daily menus with remaining stock, or just the one for ``date``."""
    try:
        get_store(db, store_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc

    if menu_date is not None:
        daily_menu = get_daily_menu(db, store_id=store_id, menu_date=menu_date)
        menus = [daily_menu] if daily_menu is not None else []
    else:
        menus = list_daily_menus(db, store_id)
    return [_serialize_daily_menu(db, daily_menu) for daily_menu in menus]


@router.post("/{daily_menu_id}/items", response_model=DailyMenuItemResponse, status_code=status.HTTP_201_CREATED)
def add_daily_menu_item_endpoint(
    daily_menu_id: int,
    payload: DailyMenuItemPayload,
    db: Session = Depends(get_db),
) -> DailyMenuItemResponse:
    try:
        daily_item = add_daily_menu_item(
            db,
            daily_menu_id=daily_menu_id,
            menu_id=payload.menu_id,
            quantity=payload.quantity,
        )
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return _serialize_daily_item(daily_item)


@router.put("/{daily_menu_id}/active", response_model=DailyMenuResponse)
def set_daily_menu_active_endpoint(
    daily_menu_id: int,
    payload: DailyMenuActiveUpdate,
    db: Session = Depends(get_db),
) -> DailyMenuResponse:
    try:
        daily_menu = set_daily_menu_active(db, daily_menu_id, payload.is_active)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return _serialize_daily_menu(db, daily_menu)


@router.post("/items/{daily_menu_item_id}/restock", response_model=DailyMenuItemResponse)
def restock_endpoint(
    daily_menu_item_id: int,
    payload: RestockRequest,
    db: Session = Depends(get_db),
) -> DailyMenuItemResponse:
    """Owner action: add fresh stock to a daily menu item."""
    try:
        daily_item = restock(db, daily_menu_item_id, payload.quantity)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return _serialize_daily_item(daily_item)


@router.put("/items/{daily_menu_item_id}/starting-quantity", response_model=DailyMenuItemResponse)
def set_starting_quantity_endpoint(
    daily_menu_item_id: int,
    payload: StartingQuantityUpdate,
    db: Session = Depends(get_db),
) -> DailyMenuItemResponse:
    try:
        daily_item = set_starting_quantity(db, daily_menu_item_id, payload.starting_quantity)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return _serialize_daily_item(daily_item)


@router.delete("/items/{daily_menu_item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_daily_menu_item_endpoint(daily_menu_item_id: int, db: Session = Depends(get_db)) -> Response:
    try:
        remove_daily_menu_item(db, daily_menu_item_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
