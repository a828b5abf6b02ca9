"""Daily menu stock reservation tests."""

import threading
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from dailyorders.db.base import Base
from dailyorders.models.menu import DailyMenuItem
from dailyorders.services.errors import InsufficientStockError, NotFoundError, OrderValidationError
from dailyorders.services.inventory_service import (
    conditional_decrement,
    release,
    reserve,
    reserve_lines,
    restock,
    set_starting_quantity,
)
from dailyorders.services.menu_service import publish_daily_menu
from dailyorders.services.store_service import create_menu_item, create_store


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )


@pytest.fixture()
def session_factory(tmp_path: Path) -> sessionmaker:
    engine = _build_test_engine(tmp_path / "test_inventory.db")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def _seed_menu(testing_session_local: sessionmaker, quantities: list[int]) -> list[int]:
    with testing_session_local() as db:
        store = create_store(db, name="Lunch Box")
        menu_ids = [
            create_menu_item(db, store_id=store.id, name=f"Dish {index}", price=Decimal("8.00")).id
            for index in range(len(quantities))
        ]
        daily_menu = publish_daily_menu(
            db,
            store_id=store.id,
            menu_date=date(2026, 3, 2),
            items=list(zip(menu_ids, quantities)),
        )
        return [item.id for item in daily_menu.items]


def _stock(testing_session_local: sessionmaker, daily_menu_item_id: int) -> tuple[int, int, bool]:
    with testing_session_local() as db:
        item: DailyMenuItem = db.get(DailyMenuItem, daily_menu_item_id)
        return item.starting_quantity, item.current_quantity, item.is_available


def test_conditional_decrement_reports_success_and_remaining(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [5])

    with session_factory() as db:
        first = conditional_decrement(db, item_id, 2)
        second = conditional_decrement(db, item_id, 4)
        db.commit()

    assert first.success is True
    assert first.remaining == 3
    assert second.success is False
    assert second.remaining == 3
    assert _stock(session_factory, item_id) == (5, 3, True)


def test_reserve_failure_does_not_mutate(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [2])

    with session_factory() as db:
        with pytest.raises(InsufficientStockError) as exc_info:
            reserve(db, item_id, 3)
        db.commit()

    assert exc_info.value.requested == 3
    assert exc_info.value.available == 2
    assert _stock(session_factory, item_id) == (2, 2, True)


def test_reserving_last_unit_marks_item_unavailable(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [3])

    with session_factory() as db:
        reservation = reserve(db, item_id, 3)
        db.commit()

    assert reservation.remaining == 0
    assert _stock(session_factory, item_id) == (3, 0, False)


def test_zero_stock_item_is_unavailable_from_the_start(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [0])

    assert _stock(session_factory, item_id) == (0, 0, False)
    with session_factory() as db:
        with pytest.raises(InsufficientStockError):
            reserve(db, item_id, 1)


@pytest.mark.parametrize("quantity", [0, -1, True])
def test_reserve_rejects_non_positive_quantities(session_factory: sessionmaker, quantity: int) -> None:
    [item_id] = _seed_menu(session_factory, [5])

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            reserve(db, item_id, quantity)


def test_reserve_unknown_item_is_not_found(session_factory: sessionmaker) -> None:
    with session_factory() as db:
        with pytest.raises(NotFoundError):
            reserve(db, 999, 1)


def test_reserve_lines_is_all_or_nothing(session_factory: sessionmaker) -> None:
    first_id, second_id, third_id = _seed_menu(session_factory, [5, 4, 1])

    with session_factory() as db:
        with pytest.raises(InsufficientStockError) as exc_info:
            reserve_lines(db, [(first_id, 2), (second_id, 1), (third_id, 2)])
        db.commit()

    assert exc_info.value.daily_menu_item_id == third_id
    assert _stock(session_factory, first_id) == (5, 5, True)
    assert _stock(session_factory, second_id) == (4, 4, True)
    assert _stock(session_factory, third_id) == (1, 1, True)


def test_reserve_lines_reserves_every_line(session_factory: sessionmaker) -> None:
    first_id, second_id = _seed_menu(session_factory, [5, 4])

    with session_factory() as db:
        reservations = reserve_lines(db, [(second_id, 4), (first_id, 1)])
        db.commit()

    assert [reservation.daily_menu_item_id for reservation in reservations] == [first_id, second_id]
    assert _stock(session_factory, first_id) == (5, 4, True)
    assert _stock(session_factory, second_id) == (4, 0, False)


def test_release_restores_availability_and_caps_at_starting(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [2])

    with session_factory() as db:
        reserve(db, item_id, 2)
        db.commit()
    assert _stock(session_factory, item_id) == (2, 0, False)

    with session_factory() as db:
        assert release(db, item_id, 5) == 2
        db.commit()
    assert _stock(session_factory, item_id) == (2, 2, True)


def test_restock_raises_starting_and_current(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [2])
    with session_factory() as db:
        reserve(db, item_id, 2)
        db.commit()

    with session_factory() as db:
        item = restock(db, item_id, 3)
        assert item.current_quantity == 3

    assert _stock(session_factory, item_id) == (5, 3, True)


def test_restock_unknown_item_is_not_found(session_factory: sessionmaker) -> None:
    with session_factory() as db:
        with pytest.raises(NotFoundError):
            restock(db, 42, 1)


def test_set_starting_quantity_keeps_reserved_units(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [10])
    with session_factory() as db:
        reserve(db, item_id, 4)
        db.commit()

    with session_factory() as db:
        set_starting_quantity(db, item_id, 6)
    assert _stock(session_factory, item_id) == (6, 2, True)

    with session_factory() as db:
        set_starting_quantity(db, item_id, 4)
    assert _stock(session_factory, item_id) == (4, 0, False)


def test_set_starting_quantity_below_sold_is_rejected(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [10])
    with session_factory() as db:
        reserve(db, item_id, 4)
        db.commit()

    with session_factory() as db:
        with pytest.raises(OrderValidationError):
            set_starting_quantity(db, item_id, 3)

    assert _stock(session_factory, item_id) == (10, 6, True)


def test_concurrent_reservations_never_oversell(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [5])
    barrier = threading.Barrier(2)
    outcomes: list[str] = []
    lock = threading.Lock()

    def attempt() -> None:
        db: Session = session_factory()
        try:
            barrier.wait()
            try:
                reserve(db, item_id, 3)
            except InsufficientStockError:
                db.rollback()
                result = "rejected"
            else:
                db.commit()
                result = "reserved"
        finally:
            db.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["rejected", "reserved"]
    assert _stock(session_factory, item_id) == (5, 2, True)


def test_many_concurrent_single_unit_reservations_match_stock(session_factory: sessionmaker) -> None:
    [item_id] = _seed_menu(session_factory, [4])
    workers = 8
    barrier = threading.Barrier(workers)
    reserved: list[int] = []
    lock = threading.Lock()

    def attempt() -> None:
        with session_factory() as db:
            barrier.wait()
            try:
                reserve(db, item_id, 1)
            except InsufficientStockError:
                db.rollback()
                return
            db.commit()
        with lock:
            reserved.append(1)

    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    starting, current, available = _stock(session_factory, item_id)
    assert sum(reserved) == 4
    assert sum(reserved) + current == starting
    assert available is False
