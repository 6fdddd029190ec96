"""
analytics/digest.py

Plain-text digest of a record set's aggregates, handed to the AI insight
collaborator. Only derived figures are included, never raw rows.
"""

from __future__ import annotations

from typing import Sequence

from analytics.aggregation import (
    compute_category_performance,
    compute_dashboard_stats,
    compute_product_summaries,
    date_range,
)
from analytics.models import CategoryPerformance, DashboardStats, ProductSummary, SalesRecord


def _amount(value: float) -> str:
    return f"{value:,.2f}"


def build_sales_digest(
    stats: DashboardStats,
    products: Sequence[ProductSummary],
    categories: Sequence[CategoryPerformance],
    period: tuple[str, str] | None,
) -> str:
    lines = [
        (
            f"Overall: {stats.total_sales} units sold, {_amount(stats.total_revenue)} total revenue, "
            f"{stats.total_products} products."
        ),
        f"Top product: {stats.top_product}, Lowest: {stats.lowest_product}.",
        "",
        "Products (name, category, revenue, qty, trend):",
    ]
    lines.extend(
        f"- {p.product_name} ({p.category}): {_amount(p.total_revenue)}, "
        f"{p.total_quantity} units, {p.trend}"
        for p in products
    )
    lines.append("")
    lines.append("Categories (name, revenue, qty):")
    lines.extend(
        f"- {c.category}: {_amount(c.total_revenue)}, {c.total_quantity} units, "
        f"{c.product_count} products"
        for c in categories
    )
    lines.append("")
    if period is None:
        lines.append("Date range: n/a")
    else:
        lines.append(f"Date range: {period[0]} to {period[1]}")
    return "\n".join(lines).strip()


def digest_for_records(records: Sequence[SalesRecord]) -> str:
    """Aggregate *records* and render the digest in one step."""
    snapshot = list(records)
    return build_sales_digest(
        stats=compute_dashboard_stats(snapshot),
        products=compute_product_summaries(snapshot),
        categories=compute_category_performance(snapshot),
        period=date_range(snapshot),
    )
