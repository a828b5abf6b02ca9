"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from dailyorders.models import menu as _menu  # noqa: E402,F401
from dailyorders.models import order as _order  # noqa: E402,F401
from dailyorders.models import store as _store  # noqa: E402,F401
