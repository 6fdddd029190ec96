"""
app/services/comparison_service.py

Loads the two sides of a comparison and hands them to the pure comparison
engine.

Dataset mode loads two datasets independently; date-range mode loads one
dataset once and slices two (possibly overlapping) date windows out of it.
Each side's load is tracked explicitly so that a failure on either side is
reported as a failure of the whole comparison, never as a one-sided result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from analytics.comparison import ComparisonResult, compare_record_sets
from analytics.filters import filter_date_window
from analytics.models import SalesRecord
from app.domain.sales import DateWindow
from app.repositories.sales_record_repository import SalesRecordRepository

logger = logging.getLogger(__name__)


class LoadStatus:
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class SideLoad:
    """
    Load state of one comparison side.
    """

    label: str
    status: str = LoadStatus.PENDING
    records: list[SalesRecord] = field(default_factory=list)
    error: str | None = None

    def succeed(self, records: list[SalesRecord]) -> None:
        self.records = records
        self.status = LoadStatus.SUCCEEDED
        self.error = None

    def fail(self, error: str) -> None:
        self.records = []
        self.status = LoadStatus.FAILED
        self.error = error


class ComparisonLoadError(RuntimeError):
    """
    Raised when one or both comparison sides could not be loaded.
    """

    def __init__(self, failed: list[SideLoad]) -> None:
        self.failed_sides = tuple(side.label for side in failed)
        details = "; ".join(f"{side.label}: {side.error}" for side in failed)
        super().__init__(f"Failed to load comparison data ({details})")


class ComparisonService:
    def __init__(
        self,
        session: Session,
        *,
        repository: SalesRecordRepository | None = None,
    ) -> None:
        self._repository = repository or SalesRecordRepository(session)

    def compare_datasets(
        self,
        user_id: str,
        dataset_a: str,
        dataset_b: str,
    ) -> ComparisonResult:
        """
        Compare two stored datasets.

        Raises
        ------
        ComparisonLoadError
            When either dataset fails to load.
        ComparisonNotReadyError
            When either dataset holds no records.
        """

        side_a = self._load_side(user_id, dataset_a)
        side_b = self._load_side(user_id, dataset_b)
        self._ensure_loaded(side_a, side_b)
        return compare_record_sets(side_a.label, side_a.records, side_b.label, side_b.records)

    def compare_date_windows(
        self,
        user_id: str,
        dataset_name: str,
        window_a: DateWindow,
        window_b: DateWindow,
    ) -> ComparisonResult:
        """
        Compare two inclusive date windows of a single dataset.
        """

        source = self._load_side(user_id, dataset_name)
        self._ensure_loaded(source)
        records_a = filter_date_window(source.records, window_a.date_from, window_a.date_to)
        records_b = filter_date_window(source.records, window_b.date_from, window_b.date_to)
        return compare_record_sets(window_a.label, records_a, window_b.label, records_b)

    def _load_side(self, user_id: str, dataset_name: str) -> SideLoad:
        side = SideLoad(label=dataset_name)
        try:
            side.succeed(self._repository.load_dataset(user_id=user_id, dataset_name=dataset_name))
        except SQLAlchemyError as exc:
            logger.error(
                "Comparison load failed user=%r dataset=%r: %s", user_id, dataset_name, exc
            )
            side.fail(str(exc) or exc.__class__.__name__)
        return side

    @staticmethod
    def _ensure_loaded(*sides: SideLoad) -> None:
        failed = [side for side in sides if side.status != LoadStatus.SUCCEEDED]
        if failed:
            raise ComparisonLoadError(failed)
