"""
analytics/session.py

Explicit container for the currently active dataset and its view filter.

Callers pass a ``DashboardSession`` around instead of relying on ambient
state; the aggregation functions themselves only ever see the record list.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from analytics.filters import apply_filters
from analytics.models import FilterState, SalesRecord


@dataclass
class DashboardSession:
    active_dataset: str | None = None
    records: tuple[SalesRecord, ...] = ()
    filter_state: FilterState = field(default_factory=FilterState)

    def load(self, dataset_name: str, records: list[SalesRecord] | tuple[SalesRecord, ...]) -> None:
        """Switch the active dataset; the view filter is reset."""
        self.active_dataset = dataset_name
        self.records = tuple(records)
        self.filter_state = FilterState()

    def clear(self) -> None:
        self.active_dataset = None
        self.records = ()
        self.filter_state = FilterState()

    def set_filter(self, **changes: str | None) -> FilterState:
        self.filter_state = replace(self.filter_state, **changes)
        return self.filter_state

    def filtered(self) -> list[SalesRecord]:
        return apply_filters(self.records, self.filter_state)
