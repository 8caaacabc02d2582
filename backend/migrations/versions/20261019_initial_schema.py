"""Initial back-office schema: inventory, orders, vendors, expenses, auth

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
    ]


def _order_line_columns(order_table: str):
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("unit", sa.String(16), nullable=True),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("line_total_cents", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["order_id"], [f"{order_table}.id"],
            name=f"fk_{order_table[:-1]}_lines_order_id_{order_table}",
            ondelete="CASCADE",
        ),
    ]


def upgrade():
    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("unit", sa.String(16), nullable=False),
        sa.Column("min_stock", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("cost_per_unit_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(16), nullable=False, server_default="out-of-stock"),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_inventory_items"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("inventory_items", schema=None) as batch_op:
        batch_op.create_index("ix_inventory_items_category_name", ["category", "name"], unique=False)
        batch_op.create_index("ix_inventory_items_status", ["status"], unique=False)

    op.create_table(
        "regular_orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("payment_amount_cents", sa.Integer(), nullable=True),
        sa.Column("payment_method", sa.String(16), nullable=False),
        sa.Column("card_reference", sa.String(64), nullable=True),
        sa.Column("order_date", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_regular_orders"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("regular_orders", schema=None) as batch_op:
        batch_op.create_index("ix_regular_orders_order_date", ["order_date"], unique=False)

    op.create_table(
        "regular_order_lines",
        *_order_line_columns("regular_orders"),
        sa.PrimaryKeyConstraint("id", name="pk_regular_order_lines"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("regular_order_lines", schema=None) as batch_op:
        batch_op.create_index("ix_regular_order_lines_order_id", ["order_id"], unique=False)
        batch_op.create_index("ix_regular_order_lines_item_id", ["item_id"], unique=False)

    op.create_table(
        "event_orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("purpose", sa.String(255), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("delivery_date", sa.Date(), nullable=False),
        sa.Column("delivery_time", sa.String(8), nullable=False),
        sa.Column("discount_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_amount_cents", sa.Integer(), nullable=False),
        sa.Column("paid_amount_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("payment_status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("order_status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_event_orders"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("event_orders", schema=None) as batch_op:
        batch_op.create_index("ix_event_orders_delivery", ["delivery_date", "order_status"], unique=False)
        batch_op.create_index("ix_event_orders_order_status", ["order_status"], unique=False)
        batch_op.create_index("ix_event_orders_created_at", ["created_at"], unique=False)

    op.create_table(
        "event_order_lines",
        *_order_line_columns("event_orders"),
        sa.PrimaryKeyConstraint("id", name="pk_event_order_lines"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("event_order_lines", schema=None) as batch_op:
        batch_op.create_index("ix_event_order_lines_order_id", ["order_id"], unique=False)
        batch_op.create_index("ix_event_order_lines_item_id", ["item_id"], unique=False)

    op.create_table(
        "event_order_payments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("method", sa.String(16), nullable=False),
        sa.Column("card_reference", sa.String(64), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["order_id"], ["event_orders.id"],
            name="fk_event_order_payments_order_id_event_orders",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_event_order_payments"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("event_order_payments", schema=None) as batch_op:
        batch_op.create_index("ix_event_order_payments_order_id", ["order_id"], unique=False)

    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("contact", sa.String(64), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("supplied_items", sa.JSON(), nullable=False),
        sa.Column("daily_supply", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("monthly_supply", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("rate_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("payment_due_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_payment_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_vendors"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("vendors", schema=None) as batch_op:
        batch_op.create_index("ix_vendors_name", ["name"], unique=False)

    op.create_table(
        "vendor_transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("vendor_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("payment_method", sa.String(16), nullable=False),
        sa.Column("card_reference", sa.String(64), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["vendor_id"], ["vendors.id"],
            name="fk_vendor_transactions_vendor_id_vendors",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_vendor_transactions"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("vendor_transactions", schema=None) as batch_op:
        batch_op.create_index("ix_vendor_transactions_vendor_id", ["vendor_id"], unique=False)

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("payment_method", sa.String(16), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_expenses"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("expenses", schema=None) as batch_op:
        batch_op.create_index("ix_expenses_category_date", ["category", "date"], unique=False)
        batch_op.create_index("ix_expenses_date", ["date"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index("ix_users_username", ["username"], unique=True)
        batch_op.create_index("ix_users_email", ["email"], unique=True)

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False),
        *_timestamps(),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_session_tokens_user_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_session_tokens"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("session_tokens", schema=None) as batch_op:
        batch_op.create_index("ix_session_tokens_token_hash", ["token_hash"], unique=True)
        batch_op.create_index("ix_session_tokens_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_session_tokens_expires_at", ["expires_at"], unique=False)
        batch_op.create_index("ix_session_tokens_user_active", ["user_id", "is_revoked"], unique=False)


def downgrade():
    for table in (
        "session_tokens",
        "users",
        "expenses",
        "vendor_transactions",
        "vendors",
        "event_order_payments",
        "event_order_lines",
        "event_orders",
        "regular_order_lines",
        "regular_orders",
        "inventory_items",
    ):
        op.drop_table(table)
