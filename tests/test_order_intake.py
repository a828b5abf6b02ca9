"""Order intake tests: window, validation, stock and rollback."""

import threading
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from dailyorders.db.base import Base
from dailyorders.models.menu import DailyMenuItem
from dailyorders.models.order import Order
from dailyorders.services.errors import InsufficientStockError, NotFoundError, OrderingClosedError, OrderValidationError
from dailyorders.services.menu_service import publish_daily_menu, set_daily_menu_active
from dailyorders.services.order_service import (
    CartLine,
    CustomerInfo,
    get_order,
    list_orders_by_phone,
    list_store_orders,
    place_order,
)
from dailyorders.services.store_service import create_menu_item, create_store, set_acceptance_override

SEOUL = ZoneInfo("Asia/Seoul")
MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)
DURING_WINDOW = datetime(2026, 3, 2, 11, 0, tzinfo=SEOUL)
AFTER_CUTOFF = datetime(2026, 3, 2, 16, 0, tzinfo=SEOUL)
CUSTOMER = CustomerInfo(name="Kim Minji", phone="010-1234-5678", payment_method="card")


@pytest.fixture()
def session_factory(tmp_path: Path) -> sessionmaker:
    engine = create_engine(f"sqlite:///{tmp_path / 'test_intake.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def _seed_store(testing_session_local: sessionmaker, quantities: tuple[int, int, int] = (5, 5, 1)) -> dict[str, int]:
    with testing_session_local() as db:
        store = create_store(db, name="Banchan House", delivery_fee=Decimal("3.00"))
        prices = (Decimal("8.00"), Decimal("6.50"), Decimal("12.00"))
        menu_ids = [
            create_menu_item(db, store_id=store.id, name=name, price=price).id
            for name, price in zip(("Bibimbap", "Japchae", "Galbi"), prices)
        ]
        daily_menu = publish_daily_menu(db, store_id=store.id, menu_date=MONDAY, items=list(zip(menu_ids, quantities)))
        daily_item_ids = [item.id for item in daily_menu.items]
        return {
            "store_id": store.id,
            "daily_menu_id": daily_menu.id,
            "bibimbap_id": menu_ids[0],
            "japchae_id": menu_ids[1],
            "galbi_id": menu_ids[2],
            "bibimbap_daily_id": daily_item_ids[0],
            "japchae_daily_id": daily_item_ids[1],
            "galbi_daily_id": daily_item_ids[2],
        }


def _remaining(testing_session_local: sessionmaker, daily_menu_item_id: int) -> int:
    with testing_session_local() as db:
        return db.get(DailyMenuItem, daily_menu_item_id).current_quantity


def _order_count(testing_session_local: sessionmaker) -> int:
    with testing_session_local() as db:
        return db.query(Order).count()


def test_place_order_reserves_stock_and_freezes_prices(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)

    with session_factory() as db:
        order = place_order(
            db,
            ids["store_id"],
            [CartLine(ids["bibimbap_id"], 2), CartLine(ids["galbi_id"], 1)],
            CUSTOMER,
            DURING_WINDOW,
            daily_menu_id=ids["daily_menu_id"],
        )
        assert order.status == "pending_payment"
        assert order.menu_date == MONDAY
        assert order.subtotal_amount == Decimal("28.00")
        assert order.delivery_fee == Decimal("0.00")
        assert order.total_amount == Decimal("28.00")
        assert [(item.name, item.quantity, item.unit_price) for item in order.items] == [
            ("Bibimbap", 2, Decimal("8.00")),
            ("Galbi", 1, Decimal("12.00")),
        ]
        assert order.items[0].daily_menu_item_id == ids["bibimbap_daily_id"]

    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 3
    assert _remaining(session_factory, ids["galbi_daily_id"]) == 0


def test_duplicate_lines_are_merged(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)

    with session_factory() as db:
        order = place_order(
            db,
            ids["store_id"],
            [CartLine(ids["japchae_id"], 1), CartLine(ids["japchae_id"], 2)],
            CUSTOMER,
            DURING_WINDOW,
            daily_menu_id=ids["daily_menu_id"],
        )
        assert [(item.menu_id, item.quantity) for item in order.items] == [(ids["japchae_id"], 3)]

    assert _remaining(session_factory, ids["japchae_daily_id"]) == 2


def test_third_line_shortage_rolls_back_everything(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)

    with session_factory() as db:
        with pytest.raises(InsufficientStockError) as exc_info:
            place_order(
                db,
                ids["store_id"],
                [CartLine(ids["bibimbap_id"], 2), CartLine(ids["japchae_id"], 3), CartLine(ids["galbi_id"], 2)],
                CUSTOMER,
                DURING_WINDOW,
                daily_menu_id=ids["daily_menu_id"],
            )

    assert "Galbi" in exc_info.value.message
    assert exc_info.value.available == 1
    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 5
    assert _remaining(session_factory, ids["japchae_daily_id"]) == 5
    assert _remaining(session_factory, ids["galbi_daily_id"]) == 1
    assert _order_count(session_factory) == 0


def test_closed_store_rejects_without_side_effects(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)

    with session_factory() as db:
        with pytest.raises(OrderingClosedError) as exc_info:
            place_order(
                db,
                ids["store_id"],
                [CartLine(ids["bibimbap_id"], 1)],
                CUSTOMER,
                AFTER_CUTOFF,
                daily_menu_id=ids["daily_menu_id"],
            )

    assert "closed" in exc_info.value.message
    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 5
    assert _order_count(session_factory) == 0


def test_tomorrow_mode_requires_tomorrows_menu(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    with session_factory() as db:
        set_acceptance_override(db, ids["store_id"], "tomorrow")

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            place_order(
                db,
                ids["store_id"],
                [CartLine(ids["bibimbap_id"], 1)],
                CUSTOMER,
                AFTER_CUTOFF,
                daily_menu_id=ids["daily_menu_id"],
            )
    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 5

    with session_factory() as db:
        tomorrow_menu = publish_daily_menu(db, store_id=ids["store_id"], menu_date=TUESDAY, items=[(ids["bibimbap_id"], 4)])
        tomorrow_menu_id = tomorrow_menu.id
        tomorrow_item_id = tomorrow_menu.items[0].id

    with session_factory() as db:
        order = place_order(
            db,
            ids["store_id"],
            [CartLine(ids["bibimbap_id"], 1)],
            CUSTOMER,
            AFTER_CUTOFF,
            daily_menu_id=tomorrow_menu_id,
        )
        assert order.menu_date == TUESDAY

    assert _remaining(session_factory, tomorrow_item_id) == 3
    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 5


def test_inactive_menu_is_rejected(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    with session_factory() as db:
        set_daily_menu_active(db, ids["daily_menu_id"], False)

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            place_order(
                db,
                ids["store_id"],
                [CartLine(ids["bibimbap_id"], 1)],
                CUSTOMER,
                DURING_WINDOW,
                daily_menu_id=ids["daily_menu_id"],
            )


@pytest.mark.parametrize(
    "customer",
    [
        CustomerInfo(name=" ", phone="010-1111-2222", payment_method="card"),
        CustomerInfo(name="Lee", phone="", payment_method="card"),
        CustomerInfo(name="Lee", phone="010-1111-2222", payment_method=""),
        CustomerInfo(name="Lee", phone="010-1111-2222", payment_method="crypto"),
        CustomerInfo(name="Lee", phone="010-1111-2222", payment_method="bank_transfer"),
        CustomerInfo(name="Lee", phone="010-1111-2222", payment_method="cash", order_type="delivery"),
        CustomerInfo(name="Lee", phone="010-1111-2222", payment_method="cash", order_type="drone"),
    ],
)
def test_customer_details_are_validated(session_factory: sessionmaker, customer: CustomerInfo) -> None:
    ids = _seed_store(session_factory)

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            place_order(
                db,
                ids["store_id"],
                [CartLine(ids["bibimbap_id"], 1)],
                customer,
                DURING_WINDOW,
                daily_menu_id=ids["daily_menu_id"],
            )

    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 5


def test_empty_cart_and_bad_quantities_are_rejected(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            place_order(db, ids["store_id"], [], CUSTOMER, DURING_WINDOW)
        with pytest.raises(OrderValidationError):
            place_order(db, ids["store_id"], [CartLine(ids["bibimbap_id"], 0)], CUSTOMER, DURING_WINDOW)


def test_validation_is_reported_before_closed_window(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            place_order(db, ids["store_id"], [], CUSTOMER, AFTER_CUTOFF)


def test_item_not_on_menu_is_rejected(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    with session_factory() as db:
        extra_id = create_menu_item(db, store_id=ids["store_id"], name="Tteokbokki", price=Decimal("5.00")).id

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            place_order(
                db,
                ids["store_id"],
                [CartLine(ids["bibimbap_id"], 1), CartLine(extra_id, 1)],
                CUSTOMER,
                DURING_WINDOW,
                daily_menu_id=ids["daily_menu_id"],
            )

    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 5


def test_unknown_store_is_not_found(session_factory: sessionmaker) -> None:
    with session_factory() as db:
        with pytest.raises(NotFoundError):
            place_order(db, 404, [CartLine(1, 1)], CUSTOMER, DURING_WINDOW)


def test_delivery_order_adds_store_fee(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    customer = CustomerInfo(
        name="Park",
        phone="010-9999-0000",
        payment_method="bank_transfer",
        depositor_name="Park J",
        order_type="delivery",
        delivery_address="12 Sejong-daero",
        special_requests="  Less spicy ",
    )

    with session_factory() as db:
        order = place_order(
            db,
            ids["store_id"],
            [CartLine(ids["japchae_id"], 2)],
            customer,
            DURING_WINDOW,
            daily_menu_id=ids["daily_menu_id"],
        )
        assert order.subtotal_amount == Decimal("13.00")
        assert order.delivery_fee == Decimal("3.00")
        assert order.total_amount == Decimal("16.00")
        assert order.depositor_name == "Park J"
        assert order.special_requests == "Less spicy"


def test_plain_catalog_order_skips_stock(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    with session_factory() as db:
        extra_id = create_menu_item(db, store_id=ids["store_id"], name="Mandu", price=Decimal("8.00")).id

    with session_factory() as db:
        order = place_order(db, ids["store_id"], [CartLine(extra_id, 4)], CUSTOMER, DURING_WINDOW)
        assert order.daily_menu_id is None
        assert order.items[0].daily_menu_item_id is None
        assert order.total_amount == Decimal("32.00")

    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 5


def test_notifier_receives_new_order(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    notified: list[tuple[int, int]] = []

    with session_factory() as db:
        order = place_order(
            db,
            ids["store_id"],
            [CartLine(ids["bibimbap_id"], 1)],
            CUSTOMER,
            DURING_WINDOW,
            notifier=lambda store_id, order_id: notified.append((store_id, order_id)),
        )

    assert notified == [(ids["store_id"], order.id)]


def test_notifier_failure_does_not_fail_order(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)

    def broken_notifier(store_id: int, order_id: int) -> None:
        raise RuntimeError("push gateway down")

    with session_factory() as db:
        order = place_order(
            db,
            ids["store_id"],
            [CartLine(ids["bibimbap_id"], 1)],
            CUSTOMER,
            DURING_WINDOW,
            daily_menu_id=ids["daily_menu_id"],
            notifier=broken_notifier,
        )
        order_id = order.id

    assert _order_count(session_factory) == 1
    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 4
    with session_factory() as db:
        assert get_order(db, order_id).status == "pending_payment"


def test_list_store_orders_filters(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    with session_factory() as db:
        place_order(db, ids["store_id"], [CartLine(ids["bibimbap_id"], 1)], CUSTOMER, DURING_WINDOW)
        place_order(db, ids["store_id"], [CartLine(ids["japchae_id"], 1)], CUSTOMER, DURING_WINDOW)

    with session_factory() as db:
        assert len(list_store_orders(db, ids["store_id"])) == 2
        assert len(list_store_orders(db, ids["store_id"], menu_date=MONDAY, status="pending_payment")) == 2
        assert list_store_orders(db, ids["store_id"], menu_date=TUESDAY) == []
        assert list_store_orders(db, ids["store_id"], status="fulfilled") == []
        with pytest.raises(NotFoundError):
            get_order(db, 9999)


def test_stocked_item_without_menu_id_still_draws_daily_stock(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    with session_factory() as db:
        place_order(
            db,
            ids["store_id"],
            [CartLine(ids["galbi_id"], 1)],
            CUSTOMER,
            DURING_WINDOW,
            daily_menu_id=ids["daily_menu_id"],
        )
    assert _remaining(session_factory, ids["galbi_daily_id"]) == 0

    with session_factory() as db:
        with pytest.raises(InsufficientStockError):
            place_order(db, ids["store_id"], [CartLine(ids["galbi_id"], 50)], CUSTOMER, DURING_WINDOW)

    with session_factory() as db:
        order = place_order(db, ids["store_id"], [CartLine(ids["japchae_id"], 2)], CUSTOMER, DURING_WINDOW)
        assert order.daily_menu_id == ids["daily_menu_id"]
        assert order.items[0].daily_menu_item_id == ids["japchae_daily_id"]

    assert _remaining(session_factory, ids["galbi_daily_id"]) == 0
    assert _remaining(session_factory, ids["japchae_daily_id"]) == 3
    with session_factory() as db:
        galbi_ordered = sum(
            item.quantity
            for order in list_store_orders(db, ids["store_id"], menu_date=MONDAY)
            for item in order.items
            if item.menu_id == ids["galbi_id"]
        )
    assert galbi_ordered == 1


def test_stocked_item_on_inactive_menu_cannot_be_ordered_plain(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    with session_factory() as db:
        set_daily_menu_active(db, ids["daily_menu_id"], False)

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            place_order(db, ids["store_id"], [CartLine(ids["bibimbap_id"], 1)], CUSTOMER, DURING_WINDOW)

    assert _order_count(session_factory) == 0


def test_cart_mixing_stocked_and_unstocked_items_is_rejected(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)
    with session_factory() as db:
        extra_id = create_menu_item(db, store_id=ids["store_id"], name="Mandu", price=Decimal("8.00")).id

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            place_order(
                db,
                ids["store_id"],
                [CartLine(ids["bibimbap_id"], 1), CartLine(extra_id, 1)],
                CUSTOMER,
                DURING_WINDOW,
            )

    assert _remaining(session_factory, ids["bibimbap_daily_id"]) == 5
    assert _order_count(session_factory) == 0


def test_concurrent_orders_for_last_units_never_oversell(tmp_path: Path) -> None:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test_intake_race.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    ids = _seed_store(testing_session_local, quantities=(5, 5, 2))
    workers = 4
    barrier = threading.Barrier(workers)
    outcomes: list[str] = []
    lock = threading.Lock()

    def attempt() -> None:
        with testing_session_local() as db:
            barrier.wait()
            try:
                place_order(
                    db,
                    ids["store_id"],
                    [CartLine(ids["bibimbap_id"], 1), CartLine(ids["galbi_id"], 1)],
                    CUSTOMER,
                    DURING_WINDOW,
                    daily_menu_id=ids["daily_menu_id"],
                )
            except InsufficientStockError:
                result = "rejected"
            else:
                result = "placed"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["placed", "placed", "rejected", "rejected"]
    assert _remaining(testing_session_local, ids["galbi_daily_id"]) == 0
    assert _remaining(testing_session_local, ids["bibimbap_daily_id"]) == 3
    assert _order_count(testing_session_local) == 2
    engine.dispose()


def test_lookup_by_phone_pages_newest_first(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory, quantities=(20, 20, 20))
    other = CustomerInfo(name="Yoon", phone="010-7777-8888", payment_method="cash")
    placed: list[int] = []
    with session_factory() as db:
        for _ in range(3):
            placed.append(place_order(db, ids["store_id"], [CartLine(ids["bibimbap_id"], 1)], CUSTOMER, DURING_WINDOW).id)
        place_order(db, ids["store_id"], [CartLine(ids["japchae_id"], 1)], other, DURING_WINDOW)

    with session_factory() as db:
        first_page = list_orders_by_phone(db, ids["store_id"], " 010-1234-5678 ", page=1, limit=2)
        second_page = list_orders_by_phone(db, ids["store_id"], "010-1234-5678", page=2, limit=2)

        assert [order.id for order in first_page.orders] == [placed[2], placed[1]]
        assert [order.id for order in second_page.orders] == [placed[0]]
    assert first_page.total_count == 3
    assert first_page.total_pages == 2
    assert first_page.has_next_page is True
    assert first_page.has_prev_page is False
    assert second_page.has_next_page is False
    assert second_page.has_prev_page is True


def test_lookup_by_phone_validates_input(session_factory: sessionmaker) -> None:
    ids = _seed_store(session_factory)

    with session_factory() as db:
        empty = list_orders_by_phone(db, ids["store_id"], "010-0000-0000")
        assert empty.orders == []
        assert empty.total_pages == 0
        assert empty.has_next_page is False
        with pytest.raises(OrderValidationError):
            list_orders_by_phone(db, ids["store_id"], "  ")
        with pytest.raises(OrderValidationError):
            list_orders_by_phone(db, ids["store_id"], "010-1234-5678", page=0)
        with pytest.raises(OrderValidationError):
            list_orders_by_phone(db, ids["store_id"], "010-1234-5678", limit=500)
        with pytest.raises(NotFoundError):
            list_orders_by_phone(db, 999, "010-1234-5678")
