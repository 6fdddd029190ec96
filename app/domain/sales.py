"""
app/domain/sales.py

Domain models used by the sales ingestion, dataset and sharing flows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from analytics.models import SalesRecord


@dataclass(frozen=True)
class DatasetInfo:
    """
    One named dataset owned by a user.
    """

    name: str
    record_count: int
    created_at: datetime | None = None


@dataclass(frozen=True)
class SalesIngestionResult:
    """
    Outcome of a successful ingestion; failed ingestions raise instead.
    """

    dataset_name: str
    records_saved: int
    records: list[SalesRecord] = field(default_factory=list)


@dataclass(frozen=True)
class DateWindow:
    """
    Inclusive ISO date window used by date-range comparisons.
    """

    date_from: str
    date_to: str

    @property
    def label(self) -> str:
        return f"{self.date_from} → {self.date_to}"


@dataclass(frozen=True)
class SharedView:
    """
    Read-only materialized view of a shared dataset.
    """

    dataset_name: str
    records: list[SalesRecord]
