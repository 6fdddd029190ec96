"""
analytics/sample_data.py

Synthetic demo dataset: 12 products across 5 categories over a trailing
window of days, with a growth trend on the first three products, a decline
on the last two and a weekend boost.
"""

from __future__ import annotations

import random
from datetime import date, timedelta

from analytics.models import SalesRecord

SAMPLE_PRODUCTS: tuple[tuple[str, str], ...] = (
    ("Wireless Headphones", "Electronics"),
    ("Organic Coffee Beans", "Grocery"),
    ("Running Shoes", "Sportswear"),
    ("Vitamin D Supplement", "Pharmacy"),
    ("Bluetooth Speaker", "Electronics"),
    ("Protein Bar Pack", "Grocery"),
    ("Yoga Mat", "Sportswear"),
    ("Face Moisturizer", "Beauty"),
    ("LED Desk Lamp", "Electronics"),
    ("Green Tea Box", "Grocery"),
    ("Resistance Bands", "Sportswear"),
    ("Pain Relief Gel", "Pharmacy"),
)

_PRESENCE_PROBABILITY = 0.7
_WEEKEND_BOOST = 1.4


def generate_sample_data(
    days: int = 90,
    *,
    today: date | None = None,
    seed: int | None = None,
) -> list[SalesRecord]:
    """
    Build ``days + 1`` days of sales ending at *today* (inclusive).

    Pass *seed* for a reproducible dataset.
    """
    rng = random.Random(seed)
    end = today or date.today()
    records: list[SalesRecord] = []

    for day_offset in range(days, -1, -1):
        current = end - timedelta(days=day_offset)
        date_str = current.isoformat()
        elapsed = days - day_offset
        weekend_boost = _WEEKEND_BOOST if current.weekday() >= 5 else 1.0

        present = [product for product in SAMPLE_PRODUCTS if rng.random() < _PRESENCE_PROBABILITY]
        for idx, (name, category) in enumerate(present):
            is_electronics = category == "Electronics"
            base_qty = 5 if is_electronics else 15
            if idx < 3:
                trend_multiplier = 1 + elapsed * 0.005
            elif idx > 9:
                trend_multiplier = 1 - elapsed * 0.003
            else:
                trend_multiplier = 1.0

            quantity = max(
                1,
                round(rng.randint(base_qty - 3, base_qty + 8) * trend_multiplier * weekend_boost),
            )
            unit_price = rng.randint(30, 120) if is_electronics else rng.randint(5, 35)
            records.append(
                SalesRecord(
                    id=f"{date_str}-{idx}",
                    product_name=name,
                    category=category,
                    date_of_sale=date_str,
                    quantity_sold=quantity,
                    revenue=float(quantity * unit_price),
                )
            )

    return records
