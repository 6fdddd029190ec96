"""
app/services/dataset_service.py

Read-side operations over stored sales datasets: listing, loading,
deletion and the derived dashboard / anomaly views.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from analytics.aggregation import DashboardSnapshot, compute_dashboard
from analytics.anomaly import AnomalyAlert, AnomalyDetector
from analytics.filters import apply_filters, distinct_categories, distinct_products
from analytics.models import FilterState, SalesRecord
from app.config import get_anomaly_settings
from app.domain.sales import DatasetInfo
from app.repositories.sales_record_repository import SalesRecordRepository
from app.services.sales_ingestion_service import SalesPersistenceError

logger = logging.getLogger(__name__)


class DatasetNotFoundError(LookupError):
    """
    Raised when a user has no dataset with the requested name.
    """

    def __init__(self, dataset_name: str) -> None:
        self.dataset_name = dataset_name
        super().__init__(f"Dataset not found: {dataset_name}")


def build_anomaly_detector() -> AnomalyDetector:
    settings = get_anomaly_settings()
    return AnomalyDetector(
        threshold=settings.std_threshold,
        min_samples=settings.min_samples,
        max_alerts=settings.max_alerts,
    )


class DatasetService:
    def __init__(
        self,
        session: Session,
        *,
        repository: SalesRecordRepository | None = None,
        detector: AnomalyDetector | None = None,
    ) -> None:
        self._session = session
        self._repository = repository or SalesRecordRepository(session)
        self._detector = detector or build_anomaly_detector()

    def list_datasets(self, user_id: str) -> list[DatasetInfo]:
        return self._repository.list_datasets(user_id=user_id)

    def load_records(self, user_id: str, dataset_name: str) -> list[SalesRecord]:
        """
        Load every record of a dataset.

        Raises
        ------
        DatasetNotFoundError
            When the dataset holds no rows for this user.
        """

        records = self._repository.load_dataset(user_id=user_id, dataset_name=dataset_name)
        if not records:
            raise DatasetNotFoundError(dataset_name)
        return records

    def load_filtered(
        self,
        user_id: str,
        dataset_name: str,
        filter_state: FilterState | None = None,
    ) -> list[SalesRecord]:
        records = self.load_records(user_id, dataset_name)
        if filter_state is None or filter_state.is_empty():
            return records
        return apply_filters(records, filter_state)

    def delete_dataset(self, user_id: str, dataset_name: str) -> int:
        try:
            deleted = self._repository.delete_dataset(user_id=user_id, dataset_name=dataset_name)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesPersistenceError("Failed to delete dataset.") from exc

        if deleted == 0:
            raise DatasetNotFoundError(dataset_name)
        logger.info("Deleted dataset user=%r dataset=%r rows=%d", user_id, dataset_name, deleted)
        return deleted

    def dashboard(
        self,
        user_id: str,
        dataset_name: str,
        filter_state: FilterState | None = None,
    ) -> DashboardSnapshot:
        return compute_dashboard(self.load_filtered(user_id, dataset_name, filter_state))

    def anomalies(
        self,
        user_id: str,
        dataset_name: str,
        filter_state: FilterState | None = None,
    ) -> list[AnomalyAlert]:
        records = self.load_filtered(user_id, dataset_name, filter_state)
        return self._detector.detect_alerts(records)

    def filter_options(self, user_id: str, dataset_name: str) -> dict[str, list[str]]:
        records = self.load_records(user_id, dataset_name)
        return {
            "categories": distinct_categories(records),
            "products": distinct_products(records),
        }
