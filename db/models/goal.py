"""
db/models/goal.py

Revenue or quantity target for a dataset, overall or scoped to one product
or category.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Index, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Goal(Base):
    __tablename__ = "goals"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    dataset_name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="revenue or quantity",
    )
    target_scope: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="overall, product or category",
    )
    scope_value: Mapped[str | None] = mapped_column(String(255), nullable=True)
    target_value: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_goals_user_dataset", "user_id", "dataset_name"),
    )

    def __repr__(self) -> str:
        return (
            f"<Goal id={self.id} dataset={self.dataset_name!r} "
            f"{self.target_type}/{self.target_scope}={self.target_value}>"
        )
