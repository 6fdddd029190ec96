"""
analytics/anomaly.py

Statistical outlier detection over a record set.

Two independent passes, daily alerts first:

1. Daily revenue: revenue is bucketed per calendar day; a day is flagged
   when ``|revenue - mean| > threshold * std`` (``spike`` above the mean,
   ``drop`` below it).
2. Product quantity: every individual sale of a product is flagged when
   ``|quantity - mean| > threshold * std`` over that product's sales.

Mean and standard deviation are population statistics (divisor ``n``).
A bucket with fewer than ``min_samples`` values produces no alerts.
The combined list is truncated to ``max_alerts``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from analytics.aggregation import day_key
from analytics.models import SalesRecord

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD: float = 2.0
DEFAULT_MIN_SAMPLES: int = 3
DEFAULT_MAX_ALERTS: int = 10


class AlertKind:
    SPIKE = "spike"
    DROP = "drop"
    QUANTITY = "quantity"


def population_mean_std(values: Sequence[float]) -> tuple[float, float]:
    """Return ``(mean, std)`` using divisor ``n``. *values* must be non-empty."""
    n = len(values)
    mean = sum(values) / n
    variance = sum((value - mean) ** 2 for value in values) / n
    return mean, math.sqrt(variance)


def _format_amount(value: float) -> str:
    text = f"{value:,.2f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


@dataclass(frozen=True)
class AnomalyAlert:
    """
    One detected outlier.

    ``subject`` is the day (``YYYY-MM-DD``) for daily alerts and the product
    name for quantity alerts.
    """

    kind: str
    subject: str
    value: float
    mean: float

    @property
    def message(self) -> str:
        if self.kind == AlertKind.QUANTITY:
            return f"{self.subject}: unusual quantity {int(self.value)} (avg: {self.mean:.0f})"
        return (
            f"Unusual {self.kind} on {self.subject}: "
            f"{_format_amount(self.value)} (avg: {self.mean:.0f})"
        )


class AnomalyDetector:
    """
    Stateless z-score style outlier detector.

    Parameters
    ----------
    threshold:
        Number of standard deviations a value must exceed to be flagged.
    min_samples:
        Minimum number of data points a bucket needs before it is examined.
    max_alerts:
        Cap on the number of alerts returned.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        min_samples: int = DEFAULT_MIN_SAMPLES,
        max_alerts: int = DEFAULT_MAX_ALERTS,
    ) -> None:
        self._threshold = threshold
        self._min_samples = max(1, min_samples)
        self._max_alerts = max(0, max_alerts)

    def detect(self, records: Sequence[SalesRecord]) -> list[str]:
        """Human-readable alert strings for *records*."""
        return [alert.message for alert in self.detect_alerts(records)]

    def detect_alerts(self, records: Sequence[SalesRecord]) -> list[AnomalyAlert]:
        """Structured alerts for *records*, daily revenue alerts first."""
        alerts = self._daily_revenue_alerts(records) + self._product_quantity_alerts(records)
        if len(alerts) > self._max_alerts:
            logger.debug(
                "Truncating %d anomaly alerts to %d", len(alerts), self._max_alerts
            )
        return alerts[: self._max_alerts]

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _daily_revenue_alerts(self, records: Sequence[SalesRecord]) -> list[AnomalyAlert]:
        daily: dict[str, float] = {}
        for record in records:
            key = day_key(record)
            daily[key] = daily.get(key, 0.0) + record.revenue

        if len(daily) < self._min_samples:
            return []

        mean, std = population_mean_std(list(daily.values()))
        alerts: list[AnomalyAlert] = []
        for day, revenue in daily.items():
            if abs(revenue - mean) > self._threshold * std:
                kind = AlertKind.SPIKE if revenue > mean else AlertKind.DROP
                alerts.append(AnomalyAlert(kind=kind, subject=day, value=revenue, mean=mean))
        return alerts

    def _product_quantity_alerts(self, records: Sequence[SalesRecord]) -> list[AnomalyAlert]:
        quantities: dict[str, list[int]] = {}
        for record in records:
            quantities.setdefault(record.product_name, []).append(record.quantity_sold)

        alerts: list[AnomalyAlert] = []
        for product, values in quantities.items():
            if len(values) < self._min_samples:
                continue
            mean, std = population_mean_std(values)
            for quantity in values:
                if abs(quantity - mean) > self._threshold * std:
                    alerts.append(
                        AnomalyAlert(
                            kind=AlertKind.QUANTITY,
                            subject=product,
                            value=quantity,
                            mean=mean,
                        )
                    )
        return alerts


def detect_anomalies(
    records: Sequence[SalesRecord],
    *,
    threshold: float = DEFAULT_THRESHOLD,
    min_samples: int = DEFAULT_MIN_SAMPLES,
    max_alerts: int = DEFAULT_MAX_ALERTS,
) -> list[str]:
    """Functional shortcut for :meth:`AnomalyDetector.detect`."""
    detector = AnomalyDetector(
        threshold=threshold,
        min_samples=min_samples,
        max_alerts=max_alerts,
    )
    return detector.detect(records)
