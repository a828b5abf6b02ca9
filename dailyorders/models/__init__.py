"""Application models package."""

from dailyorders.models.menu import DailyMenu, DailyMenuItem
from dailyorders.models.order import Order, OrderItem
from dailyorders.models.store import ACCEPTANCE_STATUSES, MenuItem, Store

__all__ = [
    "ACCEPTANCE_STATUSES", "DailyMenu", "DailyMenuItem", "MenuItem", "Order", "OrderItem", "Store",
]
