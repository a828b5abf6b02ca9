"""Order acceptance window evaluation.

``evaluate`` is a pure function of the current store-local time and a schedule
snapshot. It never reads the clock or the database, so two calls with the same
arguments always return the same verdict.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from dailyorders.utils.time import to_minutes

STATUS_CURRENT: str = "current"
STATUS_TOMORROW: str = "tomorrow"
STATUS_CLOSED: str = "closed"

MESSAGE_CURRENT: str = "We are taking orders for today."
MESSAGE_TOMORROW: str = "We are taking advance orders for tomorrow."
MESSAGE_CLOSED: str = "Ordering for today has closed. Check back for tomorrow's advance orders."
MESSAGE_UNAVAILABLE: str = "Store schedule is unavailable, ordering is closed."


@dataclass(frozen=True)
class StoreSchedule:
    """Snapshot of a store's ordering schedule.

    Times are ``HH:MM`` strings (or ``None`` when unset); they are parsed on
    every evaluation so malformed rows fail closed instead of defaulting open.
    """

    business_start_time: str | None
    order_cutoff_time: str | None
    acceptance_override: str | None


@dataclass(frozen=True)
class AcceptanceVerdict:
    status: str
    can_order: bool
    target_date: date | None
    message: str

    @property
    def is_tomorrow_order(self) -> bool:
        return self.status == STATUS_TOMORROW


def _closed(message: str) -> AcceptanceVerdict:
    return AcceptanceVerdict(status=STATUS_CLOSED, can_order=False, target_date=None, message=message)


def is_within_order_window(now_minutes: int, start_minutes: int, cutoff_minutes: int) -> bool:
    """Return True when now is inside the same-day window; the cutoff is exclusive."""
    return start_minutes <= now_minutes < cutoff_minutes


def evaluate(now: datetime, schedule: StoreSchedule) -> AcceptanceVerdict:
    """Decide whether an order placed at ``now`` is accepted, and for which date.

    ``now`` must already be expressed in the store's local time.
    """
    start_minutes = to_minutes(schedule.business_start_time)
    cutoff_minutes = to_minutes(schedule.order_cutoff_time)
    if start_minutes is None or cutoff_minutes is None:
        return _closed(MESSAGE_UNAVAILABLE)
    # Windows spanning midnight are rejected at write time; a stored one fails closed.
    if start_minutes >= cutoff_minutes:
        return _closed(MESSAGE_UNAVAILABLE)

    today: date = now.date()
    now_minutes = now.hour * 60 + now.minute
    if is_within_order_window(now_minutes, start_minutes, cutoff_minutes):
        return AcceptanceVerdict(status=STATUS_CURRENT, can_order=True, target_date=today, message=MESSAGE_CURRENT)

    if schedule.acceptance_override == STATUS_TOMORROW:
        return AcceptanceVerdict(
            status=STATUS_TOMORROW,
            can_order=True,
            target_date=today + timedelta(days=1),
            message=MESSAGE_TOMORROW,
        )

    # "closed", unset, or a "current" override left stale past cutoff.
    return _closed(MESSAGE_CLOSED)


def describe(verdict: AcceptanceVerdict) -> dict[str, object]:
    """Flatten a verdict into the payload shown to customers."""
    return {
        "status": verdict.status,
        "can_order": verdict.can_order,
        "is_tomorrow_order": verdict.is_tomorrow_order,
        "target_date": verdict.target_date,
        "message": verdict.message,
    }
