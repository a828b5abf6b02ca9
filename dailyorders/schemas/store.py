"""Store and catalog API schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class StoreCreate(BaseModel):
    """Payload for creating a store."""

    name: str = Field(min_length=1)
    phone: str | None = None
    timezone: str | None = None
    business_start_time: str | None = None
    order_cutoff_time: str | None = None
    acceptance_override: str = "closed"
    delivery_fee: Decimal = Field(default=Decimal("0.00"), ge=0)


class StoreResponse(BaseModel):
    """Serialized store with its ordering schedule."""

    id: int
    name: str
    phone: str | None
    timezone: str
    business_start_time: str | None
    order_cutoff_time: str | None
    acceptance_override: str
    delivery_fee: Decimal
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class ScheduleUpdate(BaseModel):
    business_start_time: str
    order_cutoff_time: str


class AcceptanceOverrideUpdate(BaseModel):
    status: str


class AcceptanceResponse(BaseModel):
    """Whether the store takes orders right now, and for which date."""

    store_id: int
    status: str
    can_order: bool
    is_tomorrow_order: bool
    target_date: date | None
    message: str


class RefreshAcceptanceResponse(BaseModel):
    updated_stores: int


class MenuItemCreate(BaseModel):
    """Payload for creating a catalog item."""

    name: str = Field(min_length=1)
    description: str | None = None
    price: Decimal = Field(ge=0)
    is_active: bool = True


class MenuItemResponse(BaseModel):
    """Serialized catalog item."""

    id: int
    store_id: int
    name: str
    description: str | None
    price: Decimal
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
