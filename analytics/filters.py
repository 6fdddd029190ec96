"""
analytics/filters.py

Predicate-based row filtering applied before aggregation.
"""

from __future__ import annotations

from typing import Sequence

from analytics.models import FilterState, SalesRecord


def _clean(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def apply_filters(records: Sequence[SalesRecord], filter_state: FilterState) -> list[SalesRecord]:
    """
    Return the records that satisfy every non-blank field of *filter_state*.

    Date bounds are inclusive and compared lexically against
    ``date_of_sale``; category and product must match exactly.
    Blank fields impose no constraint, so the filter is idempotent.
    """
    date_from = _clean(filter_state.date_from)
    date_to = _clean(filter_state.date_to)
    category = _clean(filter_state.category)
    product = _clean(filter_state.product)

    def _matches(record: SalesRecord) -> bool:
        if date_from is not None and record.date_of_sale < date_from:
            return False
        if date_to is not None and record.date_of_sale > date_to:
            return False
        if category is not None and record.category != category:
            return False
        if product is not None and record.product_name != product:
            return False
        return True

    return [record for record in records if _matches(record)]


def filter_date_window(
    records: Sequence[SalesRecord],
    date_from: str,
    date_to: str,
) -> list[SalesRecord]:
    """Records whose ``date_of_sale`` lies within ``[date_from, date_to]``."""
    return apply_filters(records, FilterState(date_from=date_from, date_to=date_to))


def distinct_categories(records: Sequence[SalesRecord]) -> list[str]:
    """Distinct categories in first-seen order."""
    return list(dict.fromkeys(record.category for record in records))


def distinct_products(records: Sequence[SalesRecord]) -> list[str]:
    """Distinct product names in first-seen order."""
    return list(dict.fromkeys(record.product_name for record in records))
