"""
tests/test_sales_ingestion.py

Pytest unit tests for the ingestion normalizer and SalesIngestionService.

Coverage
--------
- Numeric coercion: leading-number parsing, unparsable and negative values
- Header alias resolution and the "Uncategorized" default
- Fail-fast validation with 1-based row numbers, including values the
  sales_data columns cannot hold
- CSV reading: BOM, blank lines, missing header, non UTF-8 bytes
- Manual rows: skipped blank lines, default date, empty form
- Save workflow: replace-by-name, append for manual rows, rollback on
  database errors, rejected batches never reach the repository
"""

from __future__ import annotations

import io
import re
from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from analytics.models import UNCATEGORIZED, SalesRecord
from app.services.sales_ingestion_service import (
    SalesCSVFormatError,
    SalesIngestionService,
    SalesPersistenceError,
    SalesRowValidationError,
    default_dataset_name,
    normalize_manual_rows,
    normalize_rows,
    parse_csv,
    parse_quantity,
    parse_revenue,
    read_csv_rows,
)


class FakeSalesRepository:
    def __init__(self, existing: dict[str, list[SalesRecord]] | None = None, fail: bool = False) -> None:
        self.datasets: dict[str, list[SalesRecord]] = dict(existing or {})
        self.fail = fail
        self.replace_calls: list[dict] = []

    def replace_dataset(self, *, user_id, dataset_name, records, batch_size=500) -> int:
        self.replace_calls.append(
            {"user_id": user_id, "dataset_name": dataset_name, "batch_size": batch_size}
        )
        if self.fail:
            raise OperationalError("INSERT", {}, Exception("disk full"))
        self.datasets[dataset_name] = list(records)
        return len(records)

    def load_dataset(self, *, user_id, dataset_name) -> list[SalesRecord]:
        return list(self.datasets.get(dataset_name, []))


def _csv(text: str, *, bom: bool = False) -> io.BytesIO:
    payload = text.encode("utf-8")
    return io.BytesIO((b"\xef\xbb\xbf" if bom else b"") + payload)


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12", 12),
        (" 7 ", 7),
        ("12 units", 12),
        ("3.9", 3),
        ("abc", 0),
        ("", 0),
        (None, 0),
        ("-5", 0),
    ],
)
def test_parse_quantity(raw: str | None, expected: int) -> None:
    assert parse_quantity(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("19.99", 19.99),
        ("12.5abc", 12.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("$5", 0.0),
        ("", 0.0),
        (None, 0.0),
        ("-3", 0.0),
    ],
)
def test_parse_revenue(raw: str | None, expected: float) -> None:
    assert parse_revenue(raw) == pytest.approx(expected)


def test_default_dataset_name() -> None:
    from datetime import datetime

    assert default_dataset_name(datetime(2024, 5, 6, 7, 8)) == "Dataset 2024-05-06 07:08"


# ---------------------------------------------------------------------------
# normalize_rows
# ---------------------------------------------------------------------------


class TestNormalizeRows:
    def test_alias_headers_and_defaults(self) -> None:
        rows = [
            {"Product Name": "  Yoga Mat ", "Category": "", "Date of Sale": "2024-01-02", "Quantity Sold": "3", "Revenue": "45.5"},
            {"productName": "Lamp", "category": "Electronics", "dateOfSale": "2024-01-03", "quantitySold": "x", "revenue": "n/a"},
            {"Product": "Tea", "Date": "2024-01-04", "Quantity": "2", "Total": "8"},
        ]

        records = normalize_rows(rows)

        assert [r.id for r in records] == ["csv-0", "csv-1", "csv-2"]
        assert records[0].product_name == "Yoga Mat"
        assert records[0].category == UNCATEGORIZED
        assert records[0].revenue == pytest.approx(45.5)
        assert records[1].quantity_sold == 0
        assert records[1].revenue == 0.0
        assert records[2].revenue == pytest.approx(8.0)
        assert records[2].category == UNCATEGORIZED

    def test_missing_product_rejects_batch_with_row_number(self) -> None:
        rows = [
            {"product_name": "Lamp", "revenue": "10"},
            {"product_name": "   ", "revenue": "10"},
            {"product_name": "", "revenue": "10"},
        ]

        with pytest.raises(SalesRowValidationError) as excinfo:
            normalize_rows(rows)

        assert excinfo.value.row_number == 2
        assert str(excinfo.value) == "Row 2: Missing product name"
        assert excinfo.value.to_dict() == {"message": "Row 2: Missing product name", "row_number": 2}

    def test_values_beyond_storage_limits_reject_batch(self) -> None:
        with pytest.raises(SalesRowValidationError) as quantity_error:
            normalize_rows([{"product_name": "Lamp"}, {"product_name": "Tea", "quantity_sold": str(2**63)}])
        with pytest.raises(SalesRowValidationError) as revenue_error:
            normalize_rows([{"product_name": "Lamp", "revenue": "1e400"}])

        assert str(quantity_error.value) == "Row 2: Quantity is too large"
        assert str(revenue_error.value) == "Row 1: Revenue is too large"

    def test_sub_cent_and_large_revenue_kept_exactly(self) -> None:
        records = normalize_rows(
            [{"product_name": "Pin", "revenue": "0.005"}, {"product_name": "Jet", "revenue": "1234567890123.45"}]
        )

        assert [r.revenue for r in records] == [0.005, 1234567890123.45]

    def test_id_prefix(self) -> None:
        (record,) = normalize_rows([{"product_name": "Lamp"}], id_prefix="manual")

        assert record.id == "manual-0"
        assert record.date_of_sale == ""


# ---------------------------------------------------------------------------
# CSV reading
# ---------------------------------------------------------------------------


class TestCSV:
    def test_bom_and_blank_lines(self) -> None:
        stream = _csv(
            "Product Name,Category,Date of Sale,Quantity Sold,Revenue\n"
            "Yoga Mat,Sportswear,2024-01-01,2,40\n"
            "\n"
            ",,,,\n"
            "Lamp,Electronics,2024-01-02,1,99.5\n",
            bom=True,
        )

        records = parse_csv(stream)

        assert [r.product_name for r in records] == ["Yoga Mat", "Lamp"]
        assert records[1].revenue == pytest.approx(99.5)

    def test_row_number_refers_to_data_rows(self) -> None:
        stream = _csv("Product,Revenue\nLamp,10\nTea,5\n,7\n")

        with pytest.raises(SalesRowValidationError) as excinfo:
            parse_csv(stream)

        assert excinfo.value.row_number == 3

    def test_empty_file_has_no_header(self) -> None:
        with pytest.raises(SalesCSVFormatError):
            read_csv_rows(io.BytesIO(b""))

    def test_non_utf8_bytes(self) -> None:
        with pytest.raises(SalesCSVFormatError):
            read_csv_rows(io.BytesIO(b"Product,Revenue\n\xff\xfe\xfa,10\n"))

    def test_stream_stays_open(self) -> None:
        stream = _csv("Product,Revenue\nLamp,10\n")

        read_csv_rows(stream)

        assert not stream.closed


# ---------------------------------------------------------------------------
# Manual rows
# ---------------------------------------------------------------------------


class TestManualRows:
    def test_blank_lines_skipped_and_date_defaulted(self) -> None:
        rows = [
            {"product_name": "Lamp", "category": "Electronics", "date_of_sale": "", "quantity_sold": "2", "revenue": "60"},
            {"product_name": "", "category": "Grocery", "date_of_sale": "", "quantity_sold": "", "revenue": ""},
            {"product_name": "Tea", "category": "", "date_of_sale": "2024-01-09", "quantity_sold": "1", "revenue": "4"},
        ]

        records = normalize_manual_rows(rows, today=date(2024, 2, 1))

        assert [r.product_name for r in records] == ["Lamp", "Tea"]
        assert records[0].date_of_sale == "2024-02-01"
        assert records[1].date_of_sale == "2024-01-09"
        assert records[1].category == UNCATEGORIZED
        assert records[0].id.startswith("manual-")

    def test_empty_form(self) -> None:
        with pytest.raises(SalesRowValidationError) as excinfo:
            normalize_manual_rows([{"product_name": "  "}, {}])

        assert excinfo.value.row_number is None
        assert str(excinfo.value) == "Please enter at least one product"


# ---------------------------------------------------------------------------
# SalesIngestionService
# ---------------------------------------------------------------------------


class TestSalesIngestionService:
    def test_ingest_csv_replaces_dataset(self) -> None:
        session = MagicMock()
        repository = FakeSalesRepository(
            {"Q1": [SalesRecord("old", "Old", "X", "2023-12-31", 1, 1.0)]}
        )
        service = SalesIngestionService(session, repository=repository, batch_size=50)

        result = service.ingest_csv(
            user_id="user-1",
            stream=_csv("Product,Revenue\nLamp,10\nTea,5\n"),
            dataset_name="  Q1 ",
            file_name="q1.csv",
        )

        assert result.dataset_name == "Q1"
        assert result.records_saved == 2
        assert [r.product_name for r in repository.datasets["Q1"]] == ["Lamp", "Tea"]
        assert repository.replace_calls[0]["batch_size"] == 50
        session.commit.assert_called_once()

    def test_rejected_csv_never_touches_repository(self) -> None:
        session = MagicMock()
        repository = FakeSalesRepository({"Q1": []})
        service = SalesIngestionService(session, repository=repository)

        with pytest.raises(SalesRowValidationError):
            service.ingest_csv(user_id="user-1", stream=_csv("Product,Revenue\n,10\n"), dataset_name="Q1")

        assert repository.replace_calls == []
        session.commit.assert_not_called()

    def test_database_error_rolls_back(self) -> None:
        session = MagicMock()
        service = SalesIngestionService(session, repository=FakeSalesRepository(fail=True))

        with pytest.raises(SalesPersistenceError):
            service.ingest_csv(user_id="user-1", stream=_csv("Product\nLamp\n"), dataset_name="Q1")

        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    def test_blank_dataset_name_gets_default(self) -> None:
        service = SalesIngestionService(MagicMock(), repository=FakeSalesRepository())

        result = service.ingest_csv(user_id="user-1", stream=_csv("Product\nLamp\n"), dataset_name="  ")

        assert re.fullmatch(r"Dataset \d{4}-\d{2}-\d{2} \d{2}:\d{2}", result.dataset_name)

    def test_overlong_dataset_name_is_rejected_before_saving(self) -> None:
        session = MagicMock()
        repository = FakeSalesRepository()
        service = SalesIngestionService(session, repository=repository)

        with pytest.raises(SalesRowValidationError) as excinfo:
            service.ingest_csv(user_id="user-1", stream=_csv("Product\nLamp\n"), dataset_name="Q" * 256)

        assert excinfo.value.row_number is None
        assert repository.replace_calls == []
        session.commit.assert_not_called()

    def test_manual_rows_append_to_existing(self) -> None:
        existing = [SalesRecord("r1", "Lamp", "Electronics", "2024-01-01", 1, 30.0)]
        repository = FakeSalesRepository({"Shop": existing})
        service = SalesIngestionService(MagicMock(), repository=repository)

        result = service.ingest_manual(
            user_id="user-1",
            rows=[{"product_name": "Tea", "date_of_sale": "2024-01-02", "quantity_sold": "3", "revenue": "9"}],
            dataset_name="Shop",
        )

        assert result.records_saved == 2
        assert [r.product_name for r in repository.datasets["Shop"]] == ["Lamp", "Tea"]

    def test_ingest_records(self) -> None:
        repository = FakeSalesRepository()
        service = SalesIngestionService(MagicMock(), repository=repository)
        records = [SalesRecord("s1", "Lamp", "Electronics", "2024-01-01", 1, 30.0)]

        result = service.ingest_records(user_id="user-1", records=records, dataset_name="Sample Data")

        assert result.dataset_name == "Sample Data"
        assert repository.datasets["Sample Data"] == records
