"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

staff_role = sa.Enum("WAITER", "KITCHEN", "MANAGER", "CASHIER", name="staffrole")
order_status = sa.Enum(
    "PENDING", "CONFIRMED", "PREPARING", "READY", "SERVED", "COMPLETED", "CANCELLED",
    name="orderstatus",
)
order_type = sa.Enum("DINE_IN", "TAKEAWAY", "DELIVERY", name="ordertype")
payment_mode = sa.Enum("CASH", "CARD", name="paymentmode")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # People
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False, server_default="admin"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_admins_email", "admins", ["email"], unique=True)

    op.create_table(
        "staff",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("role", staff_role, nullable=False),
        sa.Column("external_id", sa.String(100), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_staff_email", "staff", ["email"], unique=True)

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_customers_phone", "customers", ["phone"], unique=True)

    # Menu
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "portions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "ingredients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("unit_of_measurement", sa.String(20), nullable=False),
        sa.Column("current_stock_quantity", sa.Numeric(12, 3), nullable=False, server_default="0"),
        sa.Column("reorder_level", sa.Numeric(12, 3), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "food_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column(
            "category_id", sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_food_items_category_id", "food_items", ["category_id"])

    op.create_table(
        "food_item_portions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "food_item_id", sa.Integer(),
            sa.ForeignKey("food_items.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "portion_id", sa.Integer(),
            sa.ForeignKey("portions.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.UniqueConstraint("food_item_id", "portion_id", name="uq_food_item_portion"),
    )
    op.create_index("ix_food_item_portions_food_item_id", "food_item_portions", ["food_item_id"])
    op.create_index("ix_food_item_portions_portion_id", "food_item_portions", ["portion_id"])

    op.create_table(
        "food_item_portion_ingredients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "food_item_portion_id", sa.Integer(),
            sa.ForeignKey("food_item_portions.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "ingredient_id", sa.Integer(),
            sa.ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.UniqueConstraint("food_item_portion_id", "ingredient_id", name="uq_portion_ingredient"),
    )
    op.create_index(
        "ix_food_item_portion_ingredients_food_item_portion_id",
        "food_item_portion_ingredients", ["food_item_portion_id"],
    )
    op.create_index(
        "ix_food_item_portion_ingredients_ingredient_id",
        "food_item_portion_ingredients", ["ingredient_id"],
    )

    op.create_table(
        "ingredient_movements",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ts", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "ingredient_id", sa.Integer(),
            sa.ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("qty_delta", sa.Numeric(12, 3), nullable=False),
        sa.Column("reason", sa.String(50), nullable=False),
        sa.Column("ref_type", sa.String(50), nullable=True),
        sa.Column("ref_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_ingredient_movements_ts", "ingredient_movements", ["ts"])
    op.create_index("ix_ingredient_movements_ingredient_id", "ingredient_movements", ["ingredient_id"])

    # Orders
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("table_number", sa.Integer(), nullable=True),
        sa.Column("status", order_status, nullable=False, server_default="PENDING"),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("bill_number", sa.String(50), nullable=True, unique=True),
        sa.Column("order_type", order_type, nullable=False, server_default="DINE_IN"),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("customer_email", sa.String(255), nullable=True),
        sa.Column("customer_phone", sa.String(50), nullable=True),
        sa.Column("staff_id", sa.Integer(), sa.ForeignKey("staff.id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "customer_id", sa.Integer(),
            sa.ForeignKey("customers.id", ondelete="SET NULL"), nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_orders_table_number", "orders", ["table_number"])
    op.create_index("ix_orders_status", "orders", ["status"])
    op.create_index("ix_orders_staff_id", "orders", ["staff_id"])
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "food_item_id", sa.Integer(),
            sa.ForeignKey("food_items.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column(
            "portion_id", sa.Integer(),
            sa.ForeignKey("portions.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("special_requests", sa.Text(), nullable=True),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])
    op.create_index("ix_order_items_food_item_id", "order_items", ["food_item_id"])
    op.create_index("ix_order_items_portion_id", "order_items", ["portion_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "customer_id", sa.Integer(),
            sa.ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("received_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("balance", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("payment_mode", payment_mode, nullable=False),
        sa.Column("reference_number", sa.String(100), nullable=True),
        sa.Column("payment_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_payments_order_id", "payments", ["order_id"])
    op.create_index("ix_payments_customer_id", "payments", ["customer_id"])

    op.create_table(
        "restaurant_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("service_charge_rate", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("theme", sa.String(20), nullable=False, server_default="blue"),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("restaurant_settings")
    op.drop_table("payments")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("ingredient_movements")
    op.drop_table("food_item_portion_ingredients")
    op.drop_table("food_item_portions")
    op.drop_table("food_items")
    op.drop_table("ingredients")
    op.drop_table("portions")
    op.drop_table("categories")
    op.drop_table("customers")
    op.drop_table("staff")
    op.drop_table("admins")

    bind = op.get_bind()
    for enum in (payment_mode, order_type, order_status, staff_role):
        enum.drop(bind, checkfirst=True)
