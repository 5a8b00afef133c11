"""Create inventory_transactions table

Revision ID: 20261018_000002
Revises: 20261018_000001
Create Date: 2026-10-18

Append-only stock adjustment ledger.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261018_000002"
down_revision: Union[str, None] = "20261018_000001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "inventory_transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column(
            "type",
            sa.Enum("add", "remove", name="inventory_transaction_type", create_constraint=True),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("previous_stock", sa.Integer(), nullable=False),
        sa.Column("new_stock", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("performed_by", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["product_id"],
            ["products.id"],
            name="fk_inventory_transactions_product_id",
            ondelete="RESTRICT",
        ),
        sa.CheckConstraint("quantity > 0", name="ck_inventory_transactions_quantity_positive"),
        sa.CheckConstraint("previous_stock >= 0", name="ck_inventory_transactions_previous_stock"),
        sa.CheckConstraint("new_stock >= 0", name="ck_inventory_transactions_new_stock"),
        sa.CheckConstraint(
            "(type = 'add' AND new_stock = previous_stock + quantity) OR "
            "(type = 'remove' AND new_stock = previous_stock - quantity)",
            name="ck_inventory_transactions_stock_arithmetic",
        ),
    )
    op.create_index("ix_inventory_transactions_product_id", "inventory_transactions", ["product_id"])
    op.create_index("ix_inventory_transactions_type", "inventory_transactions", ["type"])
    op.create_index("ix_inventory_transactions_created_at", "inventory_transactions", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_inventory_transactions_created_at", table_name="inventory_transactions")
    op.drop_index("ix_inventory_transactions_type", table_name="inventory_transactions")
    op.drop_index("ix_inventory_transactions_product_id", table_name="inventory_transactions")
    op.drop_table("inventory_transactions")
