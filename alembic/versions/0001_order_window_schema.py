"""order window schema

Revision ID: 0001_order_window_schema
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_order_window_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("business_start_time", sa.String(length=5), nullable=True),
        sa.Column("order_cutoff_time", sa.String(length=5), nullable=True),
        sa.Column("acceptance_override", sa.String(length=16), nullable=False, server_default="closed"),
        sa.Column("delivery_fee", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_menu_items_store_id", "menu_items", ["store_id"])

    op.create_table(
        "daily_menus",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("menu_date", sa.Date(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("store_id", "menu_date", name="uq_daily_menu_store_date"),
    )
    op.create_index("ix_daily_menus_store_id", "daily_menus", ["store_id"])
    op.create_index("ix_daily_menus_menu_date", "daily_menus", ["menu_date"])

    op.create_table(
        "daily_menu_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("daily_menu_id", sa.Integer(), sa.ForeignKey("daily_menus.id"), nullable=False),
        sa.Column("menu_id", sa.Integer(), sa.ForeignKey("menu_items.id"), nullable=False),
        sa.Column("starting_quantity", sa.Integer(), nullable=False),
        sa.Column("current_quantity", sa.Integer(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("daily_menu_id", "menu_id", name="uq_daily_menu_item_menu"),
        sa.CheckConstraint("current_quantity >= 0", name="ck_daily_menu_item_current_non_negative"),
        sa.CheckConstraint("current_quantity <= starting_quantity", name="ck_daily_menu_item_current_le_starting"),
    )
    op.create_index("ix_daily_menu_items_daily_menu_id", "daily_menu_items", ["daily_menu_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("daily_menu_id", sa.Integer(), sa.ForeignKey("daily_menus.id"), nullable=True),
        sa.Column("menu_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending_payment"),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=32), nullable=False),
        sa.Column("payment_method", sa.String(length=16), nullable=False),
        sa.Column("depositor_name", sa.String(length=255), nullable=True),
        sa.Column("order_type", sa.String(length=16), nullable=False, server_default="pickup"),
        sa.Column("delivery_address", sa.String(length=500), nullable=True),
        sa.Column("requested_time", sa.String(length=32), nullable=True),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("subtotal_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("delivery_fee", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("fulfilled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_orders_store_menu_date", "orders", ["store_id", "menu_date"])
    op.create_index("ix_orders_status", "orders", ["status"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("menu_id", sa.Integer(), sa.ForeignKey("menu_items.id"), nullable=False),
        sa.Column("daily_menu_item_id", sa.Integer(), sa.ForeignKey("daily_menu_items.id"), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("line_total", sa.Numeric(10, 2), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("order_items")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_index("ix_orders_store_menu_date", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_daily_menu_items_daily_menu_id", table_name="daily_menu_items")
    op.drop_table("daily_menu_items")
    op.drop_index("ix_daily_menus_menu_date", table_name="daily_menus")
    op.drop_index("ix_daily_menus_store_id", table_name="daily_menus")
    op.drop_table("daily_menus")
    op.drop_index("ix_menu_items_store_id", table_name="menu_items")
    op.drop_table("menu_items")
    op.drop_table("stores")
