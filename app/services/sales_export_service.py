"""
app/services/sales_export_service.py

Tabular exports of a dataset's derived views.

Supported kinds, each a flat list of rows with a fixed column order:

    products: one row per product summary
    sales: the raw (filtered) records
    categories: one row per category rollup
    anomalies: one row per anomaly alert
    ai_insights: summary first, then every analysis item by section

No serialisation happens here; the router turns an ``ExportResult`` into a
CSV download or a JSON body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from analytics.aggregation import compute_category_performance, compute_product_summaries
from analytics.anomaly import AnomalyDetector
from analytics.models import SalesRecord
from llm_synthesis.schema import ANALYSIS_SECTIONS, SalesAnalysis

RECORD_KINDS: frozenset[str] = frozenset({"products", "sales", "categories", "anomalies"})
VALID_KINDS: frozenset[str] = RECORD_KINDS | {"ai_insights"}


# ---------------------------------------------------------------------------
# Export result container
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    """
    Flat tabular data ready for CSV or JSON serialisation.

    Attributes
    ----------
    rows:   Flat dict per row; all values are JSON-safe scalars or strings.
    fields: Ordered column names; deterministic for a given kind.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)


def _collect_fields(rows: list[dict[str, Any]], default: Sequence[str]) -> list[str]:
    """
    Union all keys across rows while preserving first-seen order; falls back
    to *default* so empty exports still carry a header.
    """
    seen: dict[str, None] = {}
    for row in rows:
        for k in row:
            seen.setdefault(k, None)
    return list(seen) or list(default)


_PRODUCT_FIELDS = ("Product", "Category", "Revenue", "Quantity", "Avg/Sale", "Trend")
_SALES_FIELDS = ("Product Name", "Category", "Date", "Quantity Sold", "Revenue")
_CATEGORY_FIELDS = ("Category", "Revenue", "Quantity", "Products")
_ANOMALY_FIELDS = ("Alert",)
_INSIGHT_FIELDS = ("Section", "Insight")


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SalesExportService:
    """
    Flatten dashboard views into export rows. Stateless and read-only.
    """

    def __init__(self, detector: AnomalyDetector | None = None) -> None:
        self._detector = detector or AnomalyDetector()

    def export(self, records: Sequence[SalesRecord], *, kind: str = "products") -> ExportResult:
        """
        Raises
        ------
        ValueError: When *kind* is not a record-based export kind.
        """
        if kind not in RECORD_KINDS:
            raise ValueError(f"Unknown export kind {kind!r}. Valid: {sorted(RECORD_KINDS)}")
        handler = getattr(self, f"_export_{kind}")
        return handler(list(records))

    def _export_products(self, records: list[SalesRecord]) -> ExportResult:
        rows = [
            {
                "Product": p.product_name,
                "Category": p.category,
                "Revenue": p.total_revenue,
                "Quantity": p.total_quantity,
                "Avg/Sale": f"{p.avg_revenue:.2f}",
                "Trend": p.trend,
            }
            for p in compute_product_summaries(records)
        ]
        return ExportResult(rows=rows, fields=_collect_fields(rows, _PRODUCT_FIELDS))

    def _export_sales(self, records: list[SalesRecord]) -> ExportResult:
        rows = [
            {
                "Product Name": r.product_name,
                "Category": r.category,
                "Date": r.date_of_sale,
                "Quantity Sold": r.quantity_sold,
                "Revenue": r.revenue,
            }
            for r in records
        ]
        return ExportResult(rows=rows, fields=_collect_fields(rows, _SALES_FIELDS))

    def _export_categories(self, records: list[SalesRecord]) -> ExportResult:
        rows = [
            {
                "Category": c.category,
                "Revenue": c.total_revenue,
                "Quantity": c.total_quantity,
                "Products": c.product_count,
            }
            for c in compute_category_performance(records)
        ]
        return ExportResult(rows=rows, fields=_collect_fields(rows, _CATEGORY_FIELDS))

    def _export_anomalies(self, records: list[SalesRecord]) -> ExportResult:
        rows = [{"Alert": message} for message in self._detector.detect(records)]
        return ExportResult(rows=rows, fields=_collect_fields(rows, _ANOMALY_FIELDS))

    def export_ai_insights(self, analysis: SalesAnalysis) -> ExportResult:
        rows: list[dict[str, Any]] = [{"Section": "summary", "Insight": analysis.summary}]
        for section in ANALYSIS_SECTIONS:
            rows.extend({"Section": section, "Insight": item} for item in getattr(analysis, section))
        return ExportResult(rows=rows, fields=list(_INSIGHT_FIELDS))
