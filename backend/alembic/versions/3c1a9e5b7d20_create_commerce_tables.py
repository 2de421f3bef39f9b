"""Create product, customer_order and order_item with audit columns.

Revision ID: 3c1a9e5b7d20
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3c1a9e5b7d20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "last_modified",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "last_modified_with_dependents",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "product",
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("product_id", name="pk_product"),
    )
    op.create_table(
        "customer_order",
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(200), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("order_id", name="pk_customer_order"),
    )
    op.create_table(
        "order_item",
        sa.Column("order_item_id", sa.Integer(), nullable=False),
        sa.Column(
            "order_id",
            sa.Integer(),
            sa.ForeignKey(
                "customer_order.order_id",
                name="fk_order_item_order_id_customer_order",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey(
                "product.product_id",
                name="fk_order_item_product_id_product",
                ondelete="RESTRICT",
            ),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("order_item_id", name="pk_order_item"),
    )
    op.create_index("idx_order_item_order", "order_item", ["order_id"])
    op.create_index("idx_order_item_product", "order_item", ["product_id"])


def downgrade() -> None:
    op.drop_index("idx_order_item_product", table_name="order_item")
    op.drop_index("idx_order_item_order", table_name="order_item")
    op.drop_table("order_item")
    op.drop_table("customer_order")
    op.drop_table("product")
