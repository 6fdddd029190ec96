"""
app/mappers/sales_row_mapper.py

Column resolution for heterogeneous sales rows.

Each logical field owns an ordered list of candidate header spellings; the
first candidate holding a non-blank value wins. The alias table is plain
data so new header spellings never require code changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

PRODUCT_NAME = "product_name"
CATEGORY = "category"
DATE_OF_SALE = "date_of_sale"
QUANTITY_SOLD = "quantity_sold"
REVENUE = "revenue"

LOGICAL_FIELDS: tuple[str, ...] = (
    PRODUCT_NAME,
    CATEGORY,
    DATE_OF_SALE,
    QUANTITY_SOLD,
    REVENUE,
)

DEFAULT_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    PRODUCT_NAME: ("Product Name", "product_name", "productName", "Product"),
    CATEGORY: ("Category", "category"),
    DATE_OF_SALE: ("Date of Sale", "date_of_sale", "dateOfSale", "Date", "date"),
    QUANTITY_SOLD: ("Quantity Sold", "quantity_sold", "quantitySold", "Quantity"),
    REVENUE: ("Revenue", "revenue", "Total", "total"),
}


def merge_aliases(
    base: Mapping[str, Sequence[str]],
    extra: Mapping[str, Sequence[str]] | None,
) -> dict[str, tuple[str, ...]]:
    """
    Append *extra* candidates after the *base* ones, keeping order and
    dropping duplicates. Unknown logical fields in *extra* are ignored.
    """

    merged: dict[str, tuple[str, ...]] = {key: tuple(value) for key, value in base.items()}
    for field_name, headers in (extra or {}).items():
        if field_name not in merged:
            continue
        merged[field_name] = tuple(dict.fromkeys((*merged[field_name], *headers)))
    return merged


@dataclass(frozen=True)
class ResolvedSalesRow:
    """
    Raw string values per logical field; ``None`` when no candidate matched.
    """

    product_name: str | None
    category: str | None
    date_of_sale: str | None
    quantity_sold: str | None
    revenue: str | None


class SalesRowMapper:
    """
    Resolves a generic string-keyed row into logical sales fields.
    """

    def __init__(self, *, aliases: Mapping[str, Sequence[str]] | None = None) -> None:
        source = aliases if aliases is not None else DEFAULT_COLUMN_ALIASES
        self._aliases: dict[str, tuple[str, ...]] = {
            field_name: tuple(source.get(field_name, ())) for field_name in LOGICAL_FIELDS
        }

    @property
    def aliases(self) -> dict[str, tuple[str, ...]]:
        return dict(self._aliases)

    def resolve(self, raw_row: Mapping[Any, Any], field_name: str) -> str | None:
        """
        Return the first non-blank candidate value for *field_name*.
        """

        for header in self._aliases.get(field_name, ()):
            value = raw_row.get(header)
            if value is None:
                continue
            text = str(value)
            if text.strip():
                return text
        return None

    def map_row(self, raw_row: Mapping[Any, Any]) -> ResolvedSalesRow:
        return ResolvedSalesRow(
            product_name=self.resolve(raw_row, PRODUCT_NAME),
            category=self.resolve(raw_row, CATEGORY),
            date_of_sale=self.resolve(raw_row, DATE_OF_SALE),
            quantity_sold=self.resolve(raw_row, QUANTITY_SOLD),
            revenue=self.resolve(raw_row, REVENUE),
        )
