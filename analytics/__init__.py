"""
analytics package.

Pure, in-memory sales aggregation core: record model, aggregation engine,
filter evaluator, anomaly detector and comparison engine. No I/O lives here.
"""

from analytics.aggregation import (
    compute_category_performance,
    compute_dashboard,
    compute_dashboard_stats,
    compute_product_summaries,
    compute_time_series,
)
from analytics.anomaly import AnomalyDetector, detect_anomalies
from analytics.comparison import ComparisonNotReadyError, compare_record_sets
from analytics.filters import apply_filters
from analytics.models import (
    CategoryPerformance,
    DashboardStats,
    FilterState,
    ProductSummary,
    SalesRecord,
    TimeSeriesPoint,
    Trend,
)

__all__ = [
    "AnomalyDetector",
    "CategoryPerformance",
    "ComparisonNotReadyError",
    "DashboardStats",
    "FilterState",
    "ProductSummary",
    "SalesRecord",
    "TimeSeriesPoint",
    "Trend",
    "apply_filters",
    "compare_record_sets",
    "compute_category_performance",
    "compute_dashboard",
    "compute_dashboard_stats",
    "compute_product_summaries",
    "compute_time_series",
    "detect_anomalies",
]
