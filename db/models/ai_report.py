"""
db/models/ai_report.py

Saved AI analysis report for one dataset, with the anomaly alerts detected
at generation time.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class AIReport(Base):
    __tablename__ = "ai_reports"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    dataset_name: Mapped[str] = mapped_column(String(255), nullable=False)
    report_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="manual",
        comment="manual or scheduled",
    )
    analysis: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    anomalies: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_ai_reports_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AIReport id={self.id} dataset={self.dataset_name!r} type={self.report_type!r}>"
