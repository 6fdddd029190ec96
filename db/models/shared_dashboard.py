"""
db/models/shared_dashboard.py

Read-only share link for one dataset. The token grants unauthenticated
access to the dataset's derived views while the link is active and not
expired.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class SharedDashboard(TimestampMixin, Base):
    __tablename__ = "shared_dashboards"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    dataset_name: Mapped[str] = mapped_column(String(255), nullable=False)
    share_token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Deactivate a link without deleting it",
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="NULL means the link never expires",
    )

    __table_args__ = (
        Index("ix_shared_dashboards_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<SharedDashboard id={self.id} dataset={self.dataset_name!r} "
            f"active={self.is_active}>"
        )
