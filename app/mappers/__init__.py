"""
app/mappers package marker.
"""

from app.mappers.sales_row_mapper import (
    DEFAULT_COLUMN_ALIASES,
    LOGICAL_FIELDS,
    ResolvedSalesRow,
    SalesRowMapper,
    merge_aliases,
)

__all__ = [
    "DEFAULT_COLUMN_ALIASES",
    "LOGICAL_FIELDS",
    "ResolvedSalesRow",
    "SalesRowMapper",
    "merge_aliases",
]
