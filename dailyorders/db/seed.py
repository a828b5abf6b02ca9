"""Database seeding helpers."""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from dailyorders.core.config import settings
from dailyorders.models.store import Store
from dailyorders.services.menu_service import get_daily_menu, publish_daily_menu
from dailyorders.services.store_service import create_menu_item, create_store
from dailyorders.utils.time import store_now

logger = logging.getLogger(__name__)

DEMO_STORE_NAME = "Demo Lunch Box"
DEMO_MENU: list[tuple[str, Decimal, int]] = [
    ("Bulgogi rice bowl", Decimal("9.50"), 20),
    ("Kimchi fried rice", Decimal("8.00"), 15),
    ("Seasonal side dish set", Decimal("6.50"), 10),
]


def ensure_demo_store(session: Session) -> int | None:
    """Ensure a demo store with today's published menu exists in development only."""
    if settings.app_env != "dev":
        return None

    store = session.query(Store).filter(Store.name == DEMO_STORE_NAME).first()
    if store is None:
        store = create_store(session, name=DEMO_STORE_NAME, phone="010-0000-0000")
        for name, price, _ in DEMO_MENU:
            create_menu_item(session, store_id=store.id, name=name, price=price)
        logger.info("Created demo store %s", store.id)

    today = store_now(store.timezone).date()
    if get_daily_menu(session, store_id=store.id, menu_date=today) is None:
        quantities = {name: quantity for name, _, quantity in DEMO_MENU}
        items = [(item.id, quantities.get(item.name, 0)) for item in store.menu_items]
        publish_daily_menu(session, store_id=store.id, menu_date=today, items=items)
        logger.info("Published demo menu for %s", today.isoformat())
    return store.id
