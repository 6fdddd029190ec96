"""create ai_reports, shared_dashboards and goals tables

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "ai_reports",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("dataset_name", sa.String(length=255), nullable=False),
        sa.Column("report_type", sa.String(length=32), nullable=False, comment="manual or scheduled"),
        sa.Column("analysis", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("anomalies", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_ai_reports"),
    )
    op.create_index("ix_ai_reports_user_created", "ai_reports", ["user_id", "created_at"], unique=False)

    op.create_table(
        "shared_dashboards",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("dataset_name", sa.String(length=255), nullable=False),
        sa.Column("share_token", sa.String(length=128), nullable=False),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            comment="Deactivate a link without deleting it",
        ),
        sa.Column(
            "expires_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="NULL means the link never expires",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_shared_dashboards"),
        sa.UniqueConstraint("share_token", name="uq_shared_dashboards_share_token"),
    )
    op.create_index("ix_shared_dashboards_user_id", "shared_dashboards", ["user_id"], unique=False)

    op.create_table(
        "goals",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("dataset_name", sa.String(length=255), nullable=False),
        sa.Column("target_type", sa.String(length=32), nullable=False, comment="revenue or quantity"),
        sa.Column(
            "target_scope",
            sa.String(length=32),
            nullable=False,
            comment="overall, product or category",
        ),
        sa.Column("scope_value", sa.String(length=255), nullable=True),
        sa.Column("target_value", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_goals"),
    )
    op.create_index("ix_goals_user_dataset", "goals", ["user_id", "dataset_name"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_goals_user_dataset", table_name="goals")
    op.drop_table("goals")
    op.drop_index("ix_shared_dashboards_user_id", table_name="shared_dashboards")
    op.drop_table("shared_dashboards")
    op.drop_index("ix_ai_reports_user_created", table_name="ai_reports")
    op.drop_table("ai_reports")
