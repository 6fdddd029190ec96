"""
db/models/sales_record.py

SalesRecordRow model: one persisted transaction line of a named dataset.
Datasets are not a table of their own: a dataset is the set of rows sharing
one (user_id, dataset_name) pair.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Index, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from analytics.models import SalesRecord
from db.base import Base


class SalesRecordRow(Base):
    __tablename__ = "sales_data"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Opaque owner identity from the identity provider",
    )
    dataset_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    date_of_sale: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="ISO-8601 date string; first 10 characters are the day",
    )
    quantity_sold: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    revenue: Mapped[Decimal] = mapped_column(
        Numeric,
        nullable=False,
        default=0,
        comment="Unconstrained numeric; stores the ingested value without rounding",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_sales_data_user_dataset", "user_id", "dataset_name"),
        Index("ix_sales_data_user_dataset_date", "user_id", "dataset_name", "date_of_sale"),
    )

    def to_sales_record(self) -> SalesRecord:
        """Map the persisted row onto the canonical record shape."""
        return SalesRecord(
            id=str(self.id),
            product_name=self.product_name,
            category=self.category,
            date_of_sale=self.date_of_sale,
            quantity_sold=int(self.quantity_sold or 0),
            revenue=float(self.revenue or 0),
        )

    def __repr__(self) -> str:
        return (
            f"<SalesRecordRow id={self.id} dataset={self.dataset_name!r} "
            f"product={self.product_name!r} date={self.date_of_sale!r}>"
        )
