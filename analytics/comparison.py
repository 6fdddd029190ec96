"""
analytics/comparison.py

Side-by-side comparison of two independently scoped record sets.

Each side is aggregated on its own; the two record sets are never merged or
cross-aggregated. A comparison is only produced when both sides hold at least
one record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from analytics.aggregation import (
    compute_dashboard_stats,
    compute_product_summaries,
    compute_time_series,
)
from analytics.models import DashboardStats, ProductSummary, SalesRecord, TimeSeriesPoint

DEFAULT_TOP_PRODUCTS: int = 8


class ComparisonNotReadyError(ValueError):
    """Raised when one or both sides of a comparison hold no records."""

    def __init__(self, empty_sides: Sequence[str]) -> None:
        self.empty_sides = tuple(empty_sides)
        super().__init__(
            "Comparison requires records on both sides; empty: "
            + ", ".join(self.empty_sides)
        )


@dataclass(frozen=True)
class ComparisonSide:
    """Aggregates for one side of a comparison."""

    label: str
    record_count: int
    stats: DashboardStats
    top_products: list[ProductSummary]
    time_series: list[TimeSeriesPoint]

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "record_count": self.record_count,
            "stats": self.stats.to_dict(),
            "top_products": [product.to_dict() for product in self.top_products],
            "time_series": [point.to_dict() for point in self.time_series],
        }


@dataclass(frozen=True)
class ComparisonResult:
    side_a: ComparisonSide
    side_b: ComparisonSide

    def to_dict(self) -> dict[str, Any]:
        return {"side_a": self.side_a.to_dict(), "side_b": self.side_b.to_dict()}


def summarize_side(
    label: str,
    records: Sequence[SalesRecord],
    *,
    top_products: int = DEFAULT_TOP_PRODUCTS,
) -> ComparisonSide:
    """Aggregate one side: stats, top products by revenue, daily series."""
    snapshot = list(records)
    return ComparisonSide(
        label=label,
        record_count=len(snapshot),
        stats=compute_dashboard_stats(snapshot),
        top_products=compute_product_summaries(snapshot)[:top_products],
        time_series=compute_time_series(snapshot),
    )


def compare_record_sets(
    label_a: str,
    records_a: Sequence[SalesRecord],
    label_b: str,
    records_b: Sequence[SalesRecord],
    *,
    top_products: int = DEFAULT_TOP_PRODUCTS,
) -> ComparisonResult:
    """
    Pair the aggregates of two record sets for display.

    Raises
    ------
    ComparisonNotReadyError
        When either record set is empty; no one-sided result is produced.
    """
    empty_sides = [
        label or default
        for label, records, default in ((label_a, records_a, "A"), (label_b, records_b, "B"))
        if not records
    ]
    if empty_sides:
        raise ComparisonNotReadyError(empty_sides)

    return ComparisonResult(
        side_a=summarize_side(label_a, records_a, top_products=top_products),
        side_b=summarize_side(label_b, records_b, top_products=top_products),
    )
