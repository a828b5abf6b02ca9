"""Schema exports."""

from dailyorders.schemas.menu import (
    DailyMenuActiveUpdate,
    DailyMenuCreate,
    DailyMenuItemPayload,
    DailyMenuItemResponse,
    DailyMenuResponse,
    DailyMenuSummary,
    RestockRequest,
    StartingQuantityUpdate,
)
from dailyorders.schemas.order import (
    OrderCreate,
    OrderItemPayload,
    OrderItemResponse,
    OrderLookupResponse,
    OrderResponse,
    OrderStatusUpdate,
)
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

__all__ = [
    "AcceptanceOverrideUpdate",
    "AcceptanceResponse",
    "DailyMenuActiveUpdate",
    "DailyMenuCreate",
    "DailyMenuItemPayload",
    "DailyMenuItemResponse",
    "DailyMenuResponse",
    "DailyMenuSummary",
    "MenuItemCreate",
    "MenuItemResponse",
    "OrderCreate",
    "OrderItemPayload",
    "OrderItemResponse",
    "OrderLookupResponse",
    "OrderResponse",
    "OrderStatusUpdate",
    "RefreshAcceptanceResponse",
    "RestockRequest",
    "ScheduleUpdate",
    "StartingQuantityUpdate",
    "StoreCreate",
    "StoreResponse",
]
