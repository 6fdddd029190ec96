"""
app/repositories/sales_record_repository.py

Persistence layer for sales datasets.

The repository never commits; callers own the transaction boundary.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from analytics.models import SalesRecord
from app.domain.sales import DatasetInfo
from db.models.sales_record import SalesRecordRow

_DEFAULT_BATCH_SIZE = 500


class SalesRecordRepository:
    """
    Repository for named sales datasets scoped to one user.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def replace_dataset(
        self,
        *,
        user_id: str,
        dataset_name: str,
        records: Sequence[SalesRecord],
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Delete the dataset's existing rows and insert *records* in chunks.

        Runs inside the caller's transaction so a failure leaves the
        previous rows in place once the caller rolls back.
        """

        self._session.execute(
            delete(SalesRecordRow).where(
                SalesRecordRow.user_id == user_id,
                SalesRecordRow.dataset_name == dataset_name,
            )
        )
        return self.bulk_insert(
            user_id=user_id,
            dataset_name=dataset_name,
            records=records,
            batch_size=batch_size,
        )

    def bulk_insert(
        self,
        *,
        user_id: str,
        dataset_name: str,
        records: Sequence[SalesRecord],
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        PostgreSQL bulk INSERT chunked at *batch_size* rows per statement.
        """

        if not records:
            return 0

        size = max(1, batch_size)
        payloads: list[dict[str, Any]] = [
            {
                "user_id": user_id,
                "dataset_name": dataset_name,
                "product_name": record.product_name,
                "category": record.category,
                "date_of_sale": record.date_of_sale,
                "quantity_sold": record.quantity_sold,
                "revenue": Decimal(str(record.revenue)),
            }
            for record in records
        ]

        inserted = 0
        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            self._session.execute(insert(SalesRecordRow), chunk)
            inserted += len(chunk)
        return inserted

    def load_dataset(self, *, user_id: str, dataset_name: str) -> list[SalesRecord]:
        stmt = (
            select(SalesRecordRow)
            .where(
                SalesRecordRow.user_id == user_id,
                SalesRecordRow.dataset_name == dataset_name,
            )
            .order_by(SalesRecordRow.date_of_sale.asc(), SalesRecordRow.created_at.asc())
        )
        return [row.to_sales_record() for row in self._session.scalars(stmt)]

    def dataset_exists(self, *, user_id: str, dataset_name: str) -> bool:
        stmt = (
            select(SalesRecordRow.id)
            .where(
                SalesRecordRow.user_id == user_id,
                SalesRecordRow.dataset_name == dataset_name,
            )
            .limit(1)
        )
        return self._session.scalar(stmt) is not None

    def list_datasets(self, *, user_id: str) -> list[DatasetInfo]:
        created_at = func.min(SalesRecordRow.created_at)
        stmt = (
            select(
                SalesRecordRow.dataset_name,
                func.count(SalesRecordRow.id),
                created_at,
            )
            .where(SalesRecordRow.user_id == user_id)
            .group_by(SalesRecordRow.dataset_name)
            .order_by(created_at.desc())
        )
        return [
            DatasetInfo(name=name, record_count=int(count), created_at=first_created)
            for name, count, first_created in self._session.execute(stmt)
        ]

    def delete_dataset(self, *, user_id: str, dataset_name: str) -> int:
        result = self._session.execute(
            delete(SalesRecordRow).where(
                SalesRecordRow.user_id == user_id,
                SalesRecordRow.dataset_name == dataset_name,
            )
        )
        return int(result.rowcount or 0)
