"""
analytics/models.py

Canonical sales record and the derived view types built from it.

Every type here is a frozen dataclass: records are immutable once created
and derived summaries are recomputed on demand, never mutated.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

UNCATEGORIZED = "Uncategorized"
"""Category assigned when a row carries no category value."""

NO_PRODUCT = "-"
"""Placeholder product name reported for an empty record set."""


class Trend:
    """Revenue momentum labels for a product."""

    GROWING = "growing"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass(frozen=True)
class SalesRecord:
    """
    One transaction line.

    ``date_of_sale`` is a zero-padded ISO-8601 string; only its first ten
    characters are used for day bucketing and all date comparisons are
    lexical.
    """

    id: str
    product_name: str
    category: str
    date_of_sale: str
    quantity_sold: int
    revenue: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProductSummary:
    product_name: str
    category: str
    total_quantity: int
    total_revenue: float
    avg_revenue: float
    sales_count: int
    trend: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TimeSeriesPoint:
    date: str
    quantity: int
    revenue: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CategoryPerformance:
    category: str
    total_revenue: float
    total_quantity: int
    product_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DashboardStats:
    """
    Headline figures for one record set.

    ``avg_order_value`` is revenue per record, not per product.
    """

    total_sales: int
    total_revenue: float
    top_product: str
    lowest_product: str
    avg_order_value: float
    total_products: int

    @classmethod
    def empty(cls) -> "DashboardStats":
        """Zero-value sentinel returned for an empty record set."""
        return cls(
            total_sales=0,
            total_revenue=0.0,
            top_product=NO_PRODUCT,
            lowest_product=NO_PRODUCT,
            avg_order_value=0.0,
            total_products=0,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FilterState:
    """
    Active view filter over a loaded record set.

    Every field is optional; ``None`` or blank means "no constraint".
    """

    date_from: str | None = None
    date_to: str | None = None
    category: str | None = None
    product: str | None = None

    def is_empty(self) -> bool:
        return not any(
            _is_set(value)
            for value in (self.date_from, self.date_to, self.category, self.product)
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _is_set(value: str | None) -> bool:
    return value is not None and value.strip() != ""
