"""
tests/test_aggregation.py

Pytest unit tests for the aggregation engine.

All tests are pure Python with no database or I/O. Records are built inline
so each expectation can be checked by hand.

Coverage
--------
- Dashboard stats on a small mixed dataset and on the empty set
- Revenue ties between products
- Trend classification at and around the 1.1 / 0.9 thresholds
- Odd-length halves and chronological ordering inside a product
- First-seen category for a product listed under two categories
- Daily bucketing of timestamps and ascending time series
- Category rollups and distinct product counts
- Inputs are never reordered or mutated
"""

from __future__ import annotations

import pytest

from analytics.aggregation import (
    classify_trend,
    compute_category_performance,
    compute_dashboard,
    compute_dashboard_stats,
    compute_product_summaries,
    compute_time_series,
)
from analytics.models import NO_PRODUCT, DashboardStats, SalesRecord, Trend


def _record(
    product: str,
    category: str,
    day: str,
    qty: int,
    revenue: float,
    rid: str | None = None,
) -> SalesRecord:
    return SalesRecord(
        id=rid or f"{product}-{day}",
        product_name=product,
        category=category,
        date_of_sale=day,
        quantity_sold=qty,
        revenue=revenue,
    )


@pytest.fixture()
def mixed_records() -> list[SalesRecord]:
    return [
        _record("A", "X", "2024-01-01", 2, 20.0),
        _record("A", "X", "2024-01-02", 3, 30.0),
        _record("B", "Y", "2024-01-01", 1, 50.0),
    ]


# ---------------------------------------------------------------------------
# Dashboard stats
# ---------------------------------------------------------------------------


class TestDashboardStats:
    def test_totals_and_ranking(self, mixed_records: list[SalesRecord]) -> None:
        stats = compute_dashboard_stats(mixed_records)

        assert stats.total_sales == 6
        assert stats.total_revenue == pytest.approx(100.0)
        assert stats.total_products == 2
        assert stats.avg_order_value == pytest.approx(33.333, abs=1e-3)

    def test_revenue_tie_resolves_by_encounter_order(self, mixed_records: list[SalesRecord]) -> None:
        # A and B both total 50; A is seen first.
        stats = compute_dashboard_stats(mixed_records)

        assert stats.top_product == "A"
        assert stats.lowest_product == "B"

    def test_three_way_tie_keeps_first_as_top_and_last_as_lowest(self) -> None:
        records = [
            _record("First", "X", "2024-01-01", 1, 50.0),
            _record("Second", "X", "2024-01-02", 1, 50.0),
            _record("Third", "X", "2024-01-03", 1, 50.0),
        ]

        stats = compute_dashboard_stats(records)

        assert stats.top_product == "First"
        assert stats.lowest_product == "Third"

    def test_avg_order_value_is_per_record(self) -> None:
        records = [
            _record("A", "X", "2024-01-01", 1, 10.0, rid="1"),
            _record("A", "X", "2024-01-02", 1, 10.0, rid="2"),
            _record("A", "X", "2024-01-03", 1, 10.0, rid="3"),
            _record("B", "X", "2024-01-01", 1, 90.0, rid="4"),
        ]

        stats = compute_dashboard_stats(records)

        assert stats.avg_order_value == pytest.approx(30.0)
        assert stats.top_product == "B"
        assert stats.lowest_product == "A"

    def test_empty_records_return_sentinel(self) -> None:
        stats = compute_dashboard_stats([])

        assert stats == DashboardStats.empty()
        assert stats.total_sales == 0
        assert stats.total_revenue == 0.0
        assert stats.top_product == NO_PRODUCT
        assert stats.lowest_product == NO_PRODUCT
        assert stats.avg_order_value == 0.0
        assert stats.total_products == 0

    def test_single_product_is_both_top_and_lowest(self) -> None:
        stats = compute_dashboard_stats([_record("Solo", "X", "2024-01-01", 4, 40.0)])

        assert stats.top_product == "Solo"
        assert stats.lowest_product == "Solo"


# ---------------------------------------------------------------------------
# Trend classification
# ---------------------------------------------------------------------------


class TestTrend:
    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [
            (100.0, 112.0, Trend.GROWING),
            (100.0, 85.0, Trend.DECLINING),
            (100.0, 100.0, Trend.STABLE),
            (100.0, 110.0, Trend.STABLE),
            (100.0, 90.0, Trend.STABLE),
        ],
    )
    def test_thresholds_are_strict(self, first: float, second: float, expected: str) -> None:
        assert classify_trend(first, second) == expected

    @pytest.mark.parametrize(
        ("second", "expected"),
        [(112.0, Trend.GROWING), (85.0, Trend.DECLINING), (100.0, Trend.STABLE)],
    )
    def test_two_record_product(self, second: float, expected: str) -> None:
        records = [
            _record("A", "X", "2024-01-01", 1, 100.0),
            _record("A", "X", "2024-01-02", 1, second),
        ]

        (summary,) = compute_product_summaries(records)

        assert summary.trend == expected

    def test_halves_use_chronological_order(self) -> None:
        # Chronologically [10, 10, 30]; mid = 1 so first = 10, second = 40.
        records = [
            _record("A", "X", "2024-01-03", 1, 30.0),
            _record("A", "X", "2024-01-01", 1, 10.0),
            _record("A", "X", "2024-01-02", 1, 10.0),
        ]

        (summary,) = compute_product_summaries(records)

        assert summary.trend == Trend.GROWING

    def test_odd_count_puts_extra_record_in_second_half(self) -> None:
        # Chronologically [50, 30, 30]; first = 50, second = 60 -> growing.
        records = [
            _record("A", "X", "2024-01-01", 1, 50.0),
            _record("A", "X", "2024-01-02", 1, 30.0),
            _record("A", "X", "2024-01-03", 1, 30.0),
        ]

        (summary,) = compute_product_summaries(records)

        assert summary.trend == Trend.GROWING

    def test_single_sale_counts_as_growing(self) -> None:
        (summary,) = compute_product_summaries([_record("A", "X", "2024-01-01", 1, 5.0)])

        assert summary.trend == Trend.GROWING


# ---------------------------------------------------------------------------
# Product summaries
# ---------------------------------------------------------------------------


class TestProductSummaries:
    def test_sums_and_average(self, mixed_records: list[SalesRecord]) -> None:
        summaries = {s.product_name: s for s in compute_product_summaries(mixed_records)}

        a = summaries["A"]
        assert a.total_quantity == 5
        assert a.total_revenue == pytest.approx(50.0)
        assert a.sales_count == 2
        assert a.avg_revenue == pytest.approx(25.0)
        assert a.category == "X"

    def test_sorted_by_revenue_descending(self) -> None:
        records = [
            _record("Low", "X", "2024-01-01", 1, 5.0),
            _record("High", "X", "2024-01-01", 1, 500.0),
            _record("Mid", "X", "2024-01-01", 1, 50.0),
        ]

        names = [s.product_name for s in compute_product_summaries(records)]

        assert names == ["High", "Mid", "Low"]

    def test_first_seen_category_wins(self) -> None:
        records = [
            _record("A", "Outdoor", "2024-01-01", 1, 10.0, rid="1"),
            _record("A", "Garden", "2024-01-02", 1, 10.0, rid="2"),
        ]

        (summary,) = compute_product_summaries(records)

        assert summary.category == "Outdoor"
        assert summary.sales_count == 2

    def test_input_order_is_untouched(self) -> None:
        records = [
            _record("A", "X", "2024-01-03", 1, 30.0),
            _record("A", "X", "2024-01-01", 1, 10.0),
        ]
        before = list(records)

        compute_product_summaries(records)

        assert records == before


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------


class TestTimeSeries:
    def test_buckets_by_day_ascending(self) -> None:
        records = [
            _record("A", "X", "2024-01-03", 1, 1.0, rid="1"),
            _record("A", "X", "2024-01-01", 2, 2.0, rid="2"),
            _record("B", "X", "2024-01-01", 3, 3.0, rid="3"),
        ]

        series = compute_time_series(records)

        assert [p.date for p in series] == ["2024-01-01", "2024-01-03"]
        assert series[0].quantity == 5
        assert series[0].revenue == pytest.approx(5.0)

    def test_timestamps_collapse_onto_day(self) -> None:
        records = [
            _record("A", "X", "2024-02-10T09:15:00", 1, 10.0, rid="1"),
            _record("A", "X", "2024-02-10T18:45:00", 1, 15.0, rid="2"),
        ]

        (point,) = compute_time_series(records)

        assert point.date == "2024-02-10"
        assert point.revenue == pytest.approx(25.0)

    def test_empty(self) -> None:
        assert compute_time_series([]) == []


# ---------------------------------------------------------------------------
# Category performance
# ---------------------------------------------------------------------------


class TestCategoryPerformance:
    def test_rollup(self, mixed_records: list[SalesRecord]) -> None:
        performance = compute_category_performance(mixed_records)

        assert [(c.category, c.total_revenue, c.total_quantity, c.product_count) for c in performance] == [
            ("X", 50.0, 5, 1),
            ("Y", 50.0, 1, 1),
        ]

    def test_product_count_is_distinct(self) -> None:
        records = [
            _record("A", "X", "2024-01-01", 1, 1.0, rid="1"),
            _record("A", "X", "2024-01-02", 1, 1.0, rid="2"),
            _record("B", "X", "2024-01-02", 1, 1.0, rid="3"),
            _record("C", "Y", "2024-01-02", 1, 10.0, rid="4"),
        ]

        performance = compute_category_performance(records)

        assert [c.category for c in performance] == ["Y", "X"]
        assert performance[1].product_count == 2


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------


def test_compute_dashboard_bundles_every_view(mixed_records: list[SalesRecord]) -> None:
    snapshot = compute_dashboard(iter(mixed_records))

    assert snapshot.stats.total_sales == 6
    assert len(snapshot.products) == 2
    assert len(snapshot.time_series) == 2
    assert len(snapshot.categories) == 2

    payload = snapshot.to_dict()
    assert set(payload) == {"stats", "products", "time_series", "categories"}
    assert payload["stats"]["top_product"] == "A"


def test_compute_dashboard_on_empty_input() -> None:
    snapshot = compute_dashboard([])

    assert snapshot.stats == DashboardStats.empty()
    assert snapshot.products == []
    assert snapshot.time_series == []
    assert snapshot.categories == []
