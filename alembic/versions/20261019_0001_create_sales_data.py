"""create sales_data table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sales_data",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "user_id",
            sa.String(length=255),
            nullable=False,
            comment="Opaque owner identity from the identity provider",
        ),
        sa.Column("dataset_name", sa.String(length=255), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column(
            "date_of_sale",
            sa.Text(),
            nullable=False,
            comment="ISO-8601 date string; first 10 characters are the day",
        ),
        sa.Column("quantity_sold", sa.BigInteger(), nullable=False),
        sa.Column(
            "revenue",
            sa.Numeric(),
            nullable=False,
            comment="Unconstrained numeric; stores the ingested value without rounding",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_sales_data"),
    )
    op.create_index(
        "ix_sales_data_user_dataset",
        "sales_data",
        ["user_id", "dataset_name"],
        unique=False,
    )
    op.create_index(
        "ix_sales_data_user_dataset_date",
        "sales_data",
        ["user_id", "dataset_name", "date_of_sale"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_sales_data_user_dataset_date", table_name="sales_data")
    op.drop_index("ix_sales_data_user_dataset", table_name="sales_data")
    op.drop_table("sales_data")
