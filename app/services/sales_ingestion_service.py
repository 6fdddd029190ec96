"""
app/services/sales_ingestion_service.py

Ingestion normalizer and dataset save workflow.

Rows arrive either from an uploaded CSV file (any of the known header
spellings) or from the manual entry form. Every row is normalized into a
canonical ``SalesRecord`` before anything is written:

    - product name is required; one row without it rejects the whole batch
    - category defaults to "Uncategorized"
    - quantity / revenue that cannot be parsed become 0
    - quantity beyond BIGINT or a non-finite revenue rejects the batch
    - string fields are trimmed

Validation is fail-fast and runs before persistence, so a rejected batch
never touches the dataset already stored under the same name.
"""

from __future__ import annotations

import csv
import io
import logging
import math
import re
from datetime import date, datetime
from typing import Any, BinaryIO, Iterable, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from analytics.models import UNCATEGORIZED, SalesRecord
from app.config import get_sales_ingestion_settings
from app.domain.sales import SalesIngestionResult
from app.mappers.sales_row_mapper import (
    DEFAULT_COLUMN_ALIASES,
    SalesRowMapper,
    merge_aliases,
)
from app.repositories.sales_record_repository import SalesRecordRepository

logger = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Limits of the sales_data columns (BIGINT quantity, varchar dataset_name).
MAX_QUANTITY = 2**63 - 1
MAX_DATASET_NAME_LENGTH = 255


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SalesIngestionError(ValueError):
    """
    Base class for rejected ingestions.
    """


class SalesRowValidationError(SalesIngestionError):
    """
    Raised when one row fails validation; the whole batch is rejected.
    """

    def __init__(self, *, row_number: int | None, message: str) -> None:
        self.row_number = row_number
        self.reason = message
        text = f"Row {row_number}: {message}" if row_number is not None else message
        super().__init__(text)

    def to_dict(self) -> dict[str, object]:
        return {"message": str(self), "row_number": self.row_number}


class SalesCSVFormatError(SalesIngestionError):
    """
    Raised when the uploaded file is not readable CSV.
    """


class SalesPersistenceError(RuntimeError):
    """
    Raised when a validated dataset cannot be saved.
    """


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def parse_quantity(value: str | None) -> int:
    """
    Parse the leading integer of *value*; unparsable or negative → 0.
    """

    if value is None:
        return 0
    match = _INT_PREFIX.match(str(value))
    if match is None:
        return 0
    return max(0, int(match.group(1)))


def parse_revenue(value: str | None) -> float:
    """
    Parse the leading decimal number of *value*; unparsable or negative → 0.0.
    """

    if value is None:
        return 0.0
    match = _FLOAT_PREFIX.match(str(value))
    if match is None:
        return 0.0
    try:
        parsed = float(match.group(1))
    except ValueError:
        return 0.0
    return parsed if parsed > 0 else 0.0


def _trim(value: str | None) -> str:
    return (value or "").strip()


def _is_blank_row(row: Mapping[Any, Any]) -> bool:
    for value in row.values():
        if isinstance(value, list):
            if any(str(item).strip() for item in value):
                return False
        elif value is not None and str(value).strip():
            return False
    return True


def default_dataset_name(now: datetime | None = None) -> str:
    moment = now or datetime.now()
    return f"Dataset {moment:%Y-%m-%d %H:%M}"


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_rows(
    rows: Iterable[Mapping[Any, Any]],
    *,
    mapper: SalesRowMapper | None = None,
    id_prefix: str = "csv",
) -> list[SalesRecord]:
    """
    Map raw string-keyed rows onto ``SalesRecord`` values.

    Raises
    ------
    SalesRowValidationError
        For the first row (1-based) without a product name, or whose
        quantity or revenue cannot be stored. No records are returned in
        that case.
    """

    resolver = mapper or SalesRowMapper()
    records: list[SalesRecord] = []

    for index, raw_row in enumerate(rows):
        resolved = resolver.map_row(raw_row)
        product_name = _trim(resolved.product_name)
        if not product_name:
            raise SalesRowValidationError(row_number=index + 1, message="Missing product name")

        quantity = parse_quantity(resolved.quantity_sold)
        if quantity > MAX_QUANTITY:
            raise SalesRowValidationError(row_number=index + 1, message="Quantity is too large")
        revenue = parse_revenue(resolved.revenue)
        if not math.isfinite(revenue):
            raise SalesRowValidationError(row_number=index + 1, message="Revenue is too large")

        records.append(
            SalesRecord(
                id=f"{id_prefix}-{index}",
                product_name=product_name,
                category=_trim(resolved.category) or UNCATEGORIZED,
                date_of_sale=_trim(resolved.date_of_sale),
                quantity_sold=quantity,
                revenue=revenue,
            )
        )

    return records


def read_csv_rows(stream: BinaryIO) -> list[dict[str, Any]]:
    """
    Read a UTF-8 CSV stream (BOM tolerated) into header-keyed rows,
    skipping completely empty lines.
    """

    stream.seek(0)
    text_stream: io.TextIOWrapper | None = None
    try:
        text_stream = io.TextIOWrapper(stream, encoding="utf-8-sig", newline="")
        reader = csv.DictReader(text_stream)
        if not reader.fieldnames:
            raise SalesCSVFormatError("CSV header row is missing.")
        return [row for row in reader if not _is_blank_row(row)]
    except UnicodeDecodeError as exc:
        raise SalesCSVFormatError("CSV must be UTF-8 encoded.") from exc
    except csv.Error as exc:
        raise SalesCSVFormatError(f"Invalid CSV format: {exc}") from exc
    finally:
        if text_stream is not None:
            try:
                text_stream.detach()
            except ValueError:
                pass


def parse_csv(stream: BinaryIO, *, mapper: SalesRowMapper | None = None) -> list[SalesRecord]:
    return normalize_rows(read_csv_rows(stream), mapper=mapper, id_prefix="csv")


def normalize_manual_rows(
    rows: Sequence[Mapping[str, Any]],
    *,
    mapper: SalesRowMapper | None = None,
    today: date | None = None,
) -> list[SalesRecord]:
    """
    Normalize manual form rows.

    Rows without a product name are treated as unused form lines and
    skipped; a blank sale date becomes *today*.
    """

    resolver = mapper or SalesRowMapper()
    filled = [row for row in rows if _trim(resolver.resolve(row, "product_name"))]
    if not filled:
        raise SalesRowValidationError(row_number=None, message="Please enter at least one product")

    fallback_date = (today or date.today()).isoformat()
    records = normalize_rows(filled, mapper=resolver, id_prefix="manual")
    return [
        record
        if record.date_of_sale
        else SalesRecord(
            id=record.id,
            product_name=record.product_name,
            category=record.category,
            date_of_sale=fallback_date,
            quantity_sold=record.quantity_sold,
            revenue=record.revenue,
        )
        for record in records
    ]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SalesIngestionService:
    """
    Coordinates normalization and whole-dataset persistence.
    """

    def __init__(
        self,
        session: Session,
        *,
        repository: SalesRecordRepository | None = None,
        mapper: SalesRowMapper | None = None,
        batch_size: int | None = None,
    ) -> None:
        settings = get_sales_ingestion_settings()
        self._session = session
        self._repository = repository or SalesRecordRepository(session)
        self._mapper = mapper or SalesRowMapper(
            aliases=merge_aliases(DEFAULT_COLUMN_ALIASES, settings.extra_column_aliases)
        )
        self._batch_size = max(1, batch_size or settings.insert_batch_size)

    def ingest_csv(
        self,
        *,
        user_id: str,
        stream: BinaryIO,
        dataset_name: str | None = None,
        file_name: str | None = None,
    ) -> SalesIngestionResult:
        """
        Parse an uploaded CSV and save it as the named dataset.
        """

        try:
            records = parse_csv(stream, mapper=self._mapper)
        except SalesIngestionError as exc:
            logger.warning("CSV ingestion rejected user=%r file=%r: %s", user_id, file_name, exc)
            raise

        name = _resolve_dataset_name(dataset_name)
        return self._save(user_id=user_id, dataset_name=name, records=records, source="csv")

    def ingest_manual(
        self,
        *,
        user_id: str,
        rows: Sequence[Mapping[str, Any]],
        dataset_name: str | None = None,
    ) -> SalesIngestionResult:
        """
        Append manually entered rows to the named dataset and save it.
        """

        try:
            new_records = normalize_manual_rows(rows, mapper=self._mapper)
        except SalesIngestionError as exc:
            logger.warning("Manual ingestion rejected user=%r: %s", user_id, exc)
            raise

        name = _resolve_dataset_name(dataset_name)
        existing = self._repository.load_dataset(user_id=user_id, dataset_name=name)
        return self._save(
            user_id=user_id,
            dataset_name=name,
            records=[*existing, *new_records],
            source="manual",
        )

    def ingest_records(
        self,
        *,
        user_id: str,
        records: Sequence[SalesRecord],
        dataset_name: str | None = None,
        source: str = "sample",
    ) -> SalesIngestionResult:
        """
        Save already-normalized records (e.g. generated sample data).
        """

        name = _resolve_dataset_name(dataset_name)
        return self._save(user_id=user_id, dataset_name=name, records=list(records), source=source)

    def _save(
        self,
        *,
        user_id: str,
        dataset_name: str,
        records: list[SalesRecord],
        source: str,
    ) -> SalesIngestionResult:
        try:
            saved = self._repository.replace_dataset(
                user_id=user_id,
                dataset_name=dataset_name,
                records=records,
                batch_size=self._batch_size,
            )
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(
                "Failed to save dataset user=%r dataset=%r source=%s: %s",
                user_id,
                dataset_name,
                source,
                exc,
            )
            raise SalesPersistenceError("Failed to save sales records.") from exc

        logger.info(
            "Saved dataset user=%r dataset=%r source=%s records=%d",
            user_id,
            dataset_name,
            source,
            saved,
        )
        return SalesIngestionResult(dataset_name=dataset_name, records_saved=saved, records=records)


def _resolve_dataset_name(dataset_name: str | None) -> str:
    name = (dataset_name or "").strip()
    if not name:
        return default_dataset_name()
    if len(name) > MAX_DATASET_NAME_LENGTH:
        raise SalesRowValidationError(
            row_number=None,
            message=f"Dataset name must be at most {MAX_DATASET_NAME_LENGTH} characters",
        )
    return name
