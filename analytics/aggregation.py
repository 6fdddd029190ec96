"""
analytics/aggregation.py

Aggregation engine: dashboard stats, per-product summaries with trend
classification, daily time series and per-category rollups.

Every function is pure and total over any finite record set, including the
empty one. Grouping preserves first-encounter order (plain ``dict`` insertion
order) and every sort is stable, so ties always resolve the same way for the
same input order.

Formulas
--------
Total Sales      = Σ quantity_sold
Total Revenue    = Σ revenue
Avg Order Value  = total_revenue / number_of_records
Trend            = compare revenue of the chronologically second half of a
                   product's sales against the first half:
                       second > first * 1.1  → growing
                       second < first * 0.9  → declining
                       otherwise             → stable
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from analytics.models import (
    CategoryPerformance,
    DashboardStats,
    ProductSummary,
    SalesRecord,
    TimeSeriesPoint,
    Trend,
)

logger = logging.getLogger(__name__)

GROWTH_FACTOR: float = 1.1
DECLINE_FACTOR: float = 0.9
DAY_KEY_LENGTH: int = 10


def day_key(record: SalesRecord) -> str:
    """Return the calendar-day bucket (``YYYY-MM-DD``) for *record*."""
    return record.date_of_sale[:DAY_KEY_LENGTH]


def date_range(records: Sequence[SalesRecord]) -> tuple[str, str] | None:
    """First and last ``date_of_sale`` in record order, or None when empty."""
    if not records:
        return None
    return records[0].date_of_sale, records[-1].date_of_sale


# ---------------------------------------------------------------------------
# Dashboard stats
# ---------------------------------------------------------------------------


def compute_dashboard_stats(records: Sequence[SalesRecord]) -> DashboardStats:
    """
    Compute headline figures for *records*.

    An empty record set yields :meth:`DashboardStats.empty`.

    Products are ranked by revenue with a stable descending sort, so among
    equal revenues the first product encountered is the top product and the
    last one encountered is the lowest.
    """
    if not records:
        return DashboardStats.empty()

    total_sales = sum(record.quantity_sold for record in records)
    total_revenue = sum(record.revenue for record in records)

    product_revenue: dict[str, float] = {}
    for record in records:
        product_revenue[record.product_name] = (
            product_revenue.get(record.product_name, 0.0) + record.revenue
        )

    ranked = sorted(product_revenue.items(), key=lambda item: item[1], reverse=True)

    stats = DashboardStats(
        total_sales=total_sales,
        total_revenue=total_revenue,
        top_product=ranked[0][0],
        lowest_product=ranked[-1][0],
        avg_order_value=total_revenue / len(records),
        total_products=len(product_revenue),
    )
    logger.debug(
        "Dashboard stats computed from %d records: revenue=%.4f products=%d",
        len(records),
        total_revenue,
        stats.total_products,
    )
    return stats


# ---------------------------------------------------------------------------
# Product summaries
# ---------------------------------------------------------------------------


@dataclass
class _ProductGroup:
    category: str
    records: list[SalesRecord] = field(default_factory=list)


def classify_trend(first_half_revenue: float, second_half_revenue: float) -> str:
    """Map first/second-half revenue totals onto a :class:`Trend` label."""
    if second_half_revenue > first_half_revenue * GROWTH_FACTOR:
        return Trend.GROWING
    if second_half_revenue < first_half_revenue * DECLINE_FACTOR:
        return Trend.DECLINING
    return Trend.STABLE


def _product_trend(records: Sequence[SalesRecord]) -> str:
    # sorted() copies, so the caller's records keep their order.
    chronological = sorted(records, key=lambda record: record.date_of_sale)
    mid = len(chronological) // 2
    first_half = sum(record.revenue for record in chronological[:mid])
    second_half = sum(record.revenue for record in chronological[mid:])
    return classify_trend(first_half, second_half)


def compute_product_summaries(records: Sequence[SalesRecord]) -> list[ProductSummary]:
    """
    Group *records* by product name and summarise each group.

    The category reported for a product is the category of the first record
    seen for it; later records under a different category do not change it.

    Returns summaries sorted by ``total_revenue`` descending.
    """
    groups: dict[str, _ProductGroup] = {}
    for record in records:
        group = groups.get(record.product_name)
        if group is None:
            group = groups[record.product_name] = _ProductGroup(category=record.category)
        group.records.append(record)

    summaries: list[ProductSummary] = []
    for name, group in groups.items():
        total_quantity = sum(record.quantity_sold for record in group.records)
        total_revenue = sum(record.revenue for record in group.records)
        summaries.append(
            ProductSummary(
                product_name=name,
                category=group.category,
                total_quantity=total_quantity,
                total_revenue=total_revenue,
                avg_revenue=total_revenue / len(group.records),
                sales_count=len(group.records),
                trend=_product_trend(group.records),
            )
        )

    return sorted(summaries, key=lambda summary: summary.total_revenue, reverse=True)


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------


def compute_time_series(records: Sequence[SalesRecord]) -> list[TimeSeriesPoint]:
    """
    Sum quantity and revenue per calendar day, ascending by date.

    Finer-grained timestamps collapse onto their day.
    """
    buckets: dict[str, list[float]] = {}
    for record in records:
        bucket = buckets.setdefault(day_key(record), [0, 0.0])
        bucket[0] += record.quantity_sold
        bucket[1] += record.revenue

    return [
        TimeSeriesPoint(date=day, quantity=int(values[0]), revenue=values[1])
        for day, values in sorted(buckets.items(), key=lambda item: item[0])
    ]


# ---------------------------------------------------------------------------
# Category performance
# ---------------------------------------------------------------------------


@dataclass
class _CategoryGroup:
    revenue: float = 0.0
    quantity: int = 0
    products: set[str] = field(default_factory=set)


def compute_category_performance(
    records: Sequence[SalesRecord],
) -> list[CategoryPerformance]:
    """Roll up revenue, quantity and distinct products per category, revenue descending."""
    groups: dict[str, _CategoryGroup] = {}
    for record in records:
        group = groups.setdefault(record.category, _CategoryGroup())
        group.revenue += record.revenue
        group.quantity += record.quantity_sold
        group.products.add(record.product_name)

    performance = [
        CategoryPerformance(
            category=category,
            total_revenue=group.revenue,
            total_quantity=group.quantity,
            product_count=len(group.products),
        )
        for category, group in groups.items()
    ]
    return sorted(performance, key=lambda item: item.total_revenue, reverse=True)


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DashboardSnapshot:
    """All four aggregates for one record set."""

    stats: DashboardStats
    products: list[ProductSummary]
    time_series: list[TimeSeriesPoint]
    categories: list[CategoryPerformance]

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "products": [product.to_dict() for product in self.products],
            "time_series": [point.to_dict() for point in self.time_series],
            "categories": [category.to_dict() for category in self.categories],
        }


def compute_dashboard(records: Iterable[SalesRecord]) -> DashboardSnapshot:
    """Run every aggregation over one snapshot of *records*."""
    snapshot = list(records)
    return DashboardSnapshot(
        stats=compute_dashboard_stats(snapshot),
        products=compute_product_summaries(snapshot),
        time_series=compute_time_series(snapshot),
        categories=compute_category_performance(snapshot),
    )
