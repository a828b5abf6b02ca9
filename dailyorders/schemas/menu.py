"""Daily menu API schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class DailyMenuItemPayload(BaseModel):
    """One catalog item offered on a daily menu with its stock."""

    menu_id: int
    quantity: int = Field(ge=0)


class DailyMenuCreate(BaseModel):
    """Payload for publishing a store's menu for one date."""

    store_id: int
    menu_date: date
    title: str | None = None
    description: str | None = None
    items: list[DailyMenuItemPayload] = Field(default_factory=list)


class DailyMenuActiveUpdate(BaseModel):
    is_active: bool


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


class StartingQuantityUpdate(BaseModel):
    starting_quantity: int = Field(ge=0)


class DailyMenuItemResponse(BaseModel):
    """Serialized daily menu row with dish details and remaining stock."""

    id: int
    daily_menu_id: int
    menu_id: int
    name: str
    price: Decimal
    starting_quantity: int
    current_quantity: int
    is_available: bool


class DailyMenuResponse(BaseModel):
    """Serialized daily menu."""

    id: int
    store_id: int
    menu_date: date
    title: str
    description: str | None
    is_active: bool
    items: list[DailyMenuItemResponse]


class DailyMenuSummary(BaseModel):
    id: int
    store_id: int
    menu_date: date
    title: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
