"""Daily menu ORM models."""

from datetime import date, datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailyorders.db.base import Base


class DailyMenu(Base):
    """Date-scoped menu a store publishes for one day."""

    __tablename__ = "daily_menus"
    __table_args__ = (
        UniqueConstraint("store_id", "menu_date", name="uq_daily_menu_store_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    menu_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="Today's menu")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    items: Mapped[list["DailyMenuItem"]] = relationship(
        back_populates="daily_menu",
        cascade="all, delete-orphan",
        order_by="DailyMenuItem.id",
    )


class DailyMenuItem(Base):
    """Finite daily stock of one catalog item.

    ``current_quantity`` and ``is_available`` are only ever written together by
    the conditional UPDATE statements in ``inventory_service``.
    """

    __tablename__ = "daily_menu_items"
    __table_args__ = (
        UniqueConstraint("daily_menu_id", "menu_id", name="uq_daily_menu_item_menu"),
        CheckConstraint("current_quantity >= 0", name="ck_daily_menu_item_current_non_negative"),
        CheckConstraint("current_quantity <= starting_quantity", name="ck_daily_menu_item_current_le_starting"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    daily_menu_id: Mapped[int] = mapped_column(ForeignKey("daily_menus.id"), nullable=False, index=True)
    menu_id: Mapped[int] = mapped_column(ForeignKey("menu_items.id"), nullable=False)
    starting_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    daily_menu: Mapped[DailyMenu] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship()
