"""Order API schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class OrderItemPayload(BaseModel):
    """Single order item payload."""

    menu_id: int
    quantity: int = Field(default=1, ge=1)


class OrderCreate(BaseModel):
    """Customer order for one store."""

    store_id: int
    daily_menu_id: int | None = None
    items: list[OrderItemPayload]
    customer_name: str
    customer_phone: str
    payment_method: str
    depositor_name: str | None = None
    order_type: str = "pickup"
    delivery_address: str | None = None
    requested_time: str | None = None
    special_requests: str | None = None


class OrderItemResponse(BaseModel):
    """Serialized order item with its frozen price."""

    menu_id: int
    daily_menu_item_id: int | None
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Serialized order."""

    id: int
    store_id: int
    daily_menu_id: int | None
    menu_date: date
    status: str
    customer_name: str
    customer_phone: str
    payment_method: str
    depositor_name: str | None
    order_type: str
    delivery_address: str | None
    requested_time: str | None
    special_requests: str | None
    subtotal_amount: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    created_at: datetime
    status_updated_at: datetime | None
    payment_confirmed_at: datetime | None
    fulfilled_at: datetime | None
    cancelled_at: datetime | None
    items: list[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


class OrderLookupResponse(BaseModel):
    """One page of a customer's orders, newest first."""

    orders: list[OrderResponse]
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    model_config = ConfigDict(from_attributes=True)


class OrderStatusUpdate(BaseModel):
    status: str
