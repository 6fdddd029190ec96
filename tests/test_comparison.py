"""
tests/test_comparison.py

Pytest unit tests for the comparison engine and ComparisonService.

The service is exercised against an in-memory repository double; no
database is required.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from analytics.comparison import ComparisonNotReadyError, compare_record_sets, summarize_side
from analytics.models import SalesRecord
from app.domain.sales import DateWindow
from app.services.comparison_service import (
    ComparisonLoadError,
    ComparisonService,
    LoadStatus,
    SideLoad,
)


def _record(rid: str, product: str, day: str, revenue: float, qty: int = 1) -> SalesRecord:
    return SalesRecord(
        id=rid,
        product_name=product,
        category="General",
        date_of_sale=day,
        quantity_sold=qty,
        revenue=revenue,
    )


JANUARY = [
    _record("j1", "Lamp", "2024-01-05", 100.0, qty=2),
    _record("j2", "Mat", "2024-01-20", 40.0),
]
FEBRUARY = [
    _record("f1", "Lamp", "2024-02-03", 300.0, qty=3),
    _record("f2", "Tea", "2024-02-11", 20.0, qty=4),
    _record("f3", "Mat", "2024-02-14", 60.0),
]


class FakeSalesRepository:
    def __init__(self, datasets: dict[str, list[SalesRecord]], failing: set[str] | None = None) -> None:
        self._datasets = datasets
        self._failing = failing or set()
        self.loads: list[str] = []

    def load_dataset(self, *, user_id: str, dataset_name: str) -> list[SalesRecord]:
        self.loads.append(dataset_name)
        if dataset_name in self._failing:
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return list(self._datasets.get(dataset_name, []))


def _service(repository: FakeSalesRepository) -> ComparisonService:
    return ComparisonService(MagicMock(), repository=repository)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class TestCompareRecordSets:
    def test_each_side_is_aggregated_independently(self) -> None:
        result = compare_record_sets("Jan", JANUARY, "Feb", FEBRUARY)

        assert result.side_a.label == "Jan"
        assert result.side_a.record_count == 2
        assert result.side_a.stats.total_revenue == pytest.approx(140.0)
        assert result.side_b.stats.total_revenue == pytest.approx(380.0)
        assert result.side_b.stats.total_sales == 8
        assert result.side_b.stats.top_product == "Lamp"
        assert [p.date for p in result.side_a.time_series] == ["2024-01-05", "2024-01-20"]

    def test_empty_side_raises(self) -> None:
        with pytest.raises(ComparisonNotReadyError) as excinfo:
            compare_record_sets("Jan", JANUARY, "Feb", [])

        assert excinfo.value.empty_sides == ("Feb",)

    def test_both_empty_with_blank_labels(self) -> None:
        with pytest.raises(ComparisonNotReadyError) as excinfo:
            compare_record_sets("", [], "", [])

        assert excinfo.value.empty_sides == ("A", "B")

    def test_top_products_are_capped(self) -> None:
        side = summarize_side("Feb", FEBRUARY, top_products=2)

        assert [p.product_name for p in side.top_products] == ["Lamp", "Mat"]

    def test_to_dict_shape(self) -> None:
        payload = compare_record_sets("Jan", JANUARY, "Feb", FEBRUARY).to_dict()

        assert set(payload) == {"side_a", "side_b"}
        assert set(payload["side_a"]) == {"label", "record_count", "stats", "top_products", "time_series"}


# ---------------------------------------------------------------------------
# SideLoad
# ---------------------------------------------------------------------------


def test_side_load_transitions() -> None:
    side = SideLoad(label="Jan")
    assert side.status == LoadStatus.PENDING

    side.succeed(list(JANUARY))
    assert side.status == LoadStatus.SUCCEEDED
    assert side.records == JANUARY

    side.fail("timeout")
    assert side.status == LoadStatus.FAILED
    assert side.records == []
    assert side.error == "timeout"


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TestComparisonService:
    def test_compare_datasets(self) -> None:
        repository = FakeSalesRepository({"Jan": JANUARY, "Feb": FEBRUARY})

        result = _service(repository).compare_datasets("user-1", "Jan", "Feb")

        assert repository.loads == ["Jan", "Feb"]
        assert result.side_a.label == "Jan"
        assert result.side_b.record_count == 3

    def test_failed_side_fails_whole_comparison(self) -> None:
        repository = FakeSalesRepository({"Jan": JANUARY, "Feb": FEBRUARY}, failing={"Feb"})

        with pytest.raises(ComparisonLoadError) as excinfo:
            _service(repository).compare_datasets("user-1", "Jan", "Feb")

        assert excinfo.value.failed_sides == ("Feb",)

    def test_missing_dataset_is_not_ready(self) -> None:
        repository = FakeSalesRepository({"Jan": JANUARY})

        with pytest.raises(ComparisonNotReadyError) as excinfo:
            _service(repository).compare_datasets("user-1", "Jan", "Mar")

        assert excinfo.value.empty_sides == ("Mar",)

    def test_date_windows_may_overlap(self) -> None:
        repository = FakeSalesRepository({"All": JANUARY + FEBRUARY})
        window_a = DateWindow(date_from="2024-01-01", date_to="2024-02-05")
        window_b = DateWindow(date_from="2024-02-01", date_to="2024-02-28")

        result = _service(repository).compare_date_windows("user-1", "All", window_a, window_b)

        assert repository.loads == ["All"]
        assert result.side_a.label == window_a.label
        assert result.side_a.record_count == 3
        assert result.side_b.record_count == 3
        assert result.side_a.stats.total_revenue == pytest.approx(440.0)

    def test_empty_window_is_not_ready(self) -> None:
        repository = FakeSalesRepository({"All": JANUARY})
        window_a = DateWindow(date_from="2024-01-01", date_to="2024-01-31")
        window_b = DateWindow(date_from="2024-03-01", date_to="2024-03-31")

        with pytest.raises(ComparisonNotReadyError) as excinfo:
            _service(repository).compare_date_windows("user-1", "All", window_a, window_b)

        assert excinfo.value.empty_sides == (window_b.label,)

    def test_date_window_load_failure(self) -> None:
        repository = FakeSalesRepository({}, failing={"All"})
        window = DateWindow(date_from="2024-01-01", date_to="2024-01-31")

        with pytest.raises(ComparisonLoadError):
            _service(repository).compare_date_windows("user-1", "All", window, window)
