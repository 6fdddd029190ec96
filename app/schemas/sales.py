"""
app/schemas/sales.py

Request and response schemas for the sales dashboard endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Core views
# ---------------------------------------------------------------------------


class SalesRecordSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_name: str
    category: str
    date_of_sale: str
    quantity_sold: int = Field(..., ge=0)
    revenue: float = Field(..., ge=0)


class DashboardStatsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_sales: int
    total_revenue: float
    top_product: str
    lowest_product: str
    avg_order_value: float
    total_products: int


class ProductSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_name: str
    category: str
    total_quantity: int
    total_revenue: float
    avg_revenue: float
    sales_count: int
    trend: str


class TimeSeriesPointSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str
    quantity: int
    revenue: float


class CategoryPerformanceSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    total_revenue: float
    total_quantity: int
    product_count: int


class DashboardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stats: DashboardStatsSchema
    products: list[ProductSummarySchema]
    time_series: list[TimeSeriesPointSchema]
    categories: list[CategoryPerformanceSchema]


class AnomalyAlertSchema(BaseModel):
    kind: str
    subject: str
    value: float
    mean: float
    message: str


class AnomalyListResponse(BaseModel):
    alerts: list[AnomalyAlertSchema] = Field(default_factory=list)


class FilterOptionsResponse(BaseModel):
    categories: list[str]
    products: list[str]


# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------


class DatasetInfoSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    record_count: int
    created_at: datetime | None = None


class SalesIngestionResponse(BaseModel):
    dataset_name: str
    records_saved: int = Field(..., ge=0)


class ManualSalesRow(BaseModel):
    """
    One line of the manual entry form. Every field is optional text so a
    blank line can be submitted and skipped.
    """

    product_name: str = ""
    category: str = ""
    date_of_sale: str = ""
    quantity_sold: str | int | float = ""
    revenue: str | int | float = ""


class ManualSalesRequest(BaseModel):
    dataset_name: str | None = None
    rows: list[ManualSalesRow] = Field(default_factory=list)


class SampleDataRequest(BaseModel):
    dataset_name: str | None = "Sample Data"
    days: int = Field(default=90, ge=1, le=3650)
    seed: int | None = None


class DatasetDeleteResponse(BaseModel):
    dataset_name: str
    records_deleted: int


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


class CompareDatasetsRequest(BaseModel):
    dataset_a: str = Field(..., min_length=1)
    dataset_b: str = Field(..., min_length=1)


class DateWindowSchema(BaseModel):
    date_from: str = Field(..., min_length=1)
    date_to: str = Field(..., min_length=1)


class CompareDateRangeRequest(BaseModel):
    dataset_name: str = Field(..., min_length=1)
    window_a: DateWindowSchema
    window_b: DateWindowSchema


class ComparisonSideSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    record_count: int
    stats: DashboardStatsSchema
    top_products: list[ProductSummarySchema]
    time_series: list[TimeSeriesPointSchema]


class ComparisonResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    side_a: ComparisonSideSchema
    side_b: ComparisonSideSchema


# ---------------------------------------------------------------------------
# AI reports
# ---------------------------------------------------------------------------


class AnalysisRequest(BaseModel):
    analysis_type: str = "full"


class AIReportCreateRequest(BaseModel):
    dataset_name: str = Field(..., min_length=1)
    report_type: str = "manual"


class AIReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    dataset_name: str
    report_type: str
    analysis: dict[str, Any]
    anomalies: list[str]
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Shares
# ---------------------------------------------------------------------------


class ShareCreateRequest(BaseModel):
    dataset_name: str = Field(..., min_length=1)
    expires_in_days: int | None = Field(default=None, ge=1)


class ShareUpdateRequest(BaseModel):
    is_active: bool


class ShareResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    dataset_name: str
    share_token: str
    is_active: bool
    expires_at: datetime | None = None
    created_at: datetime | None = None


class SharedDashboardResponse(BaseModel):
    dataset_name: str
    records: list[SalesRecordSchema]
    dashboard: DashboardResponse


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


class GoalCreateRequest(BaseModel):
    dataset_name: str = Field(..., min_length=1)
    target_type: str
    target_scope: str = "overall"
    scope_value: str | None = None
    target_value: float = Field(..., gt=0)


class GoalResponse(BaseModel):
    id: uuid.UUID
    dataset_name: str
    target_type: str
    target_scope: str
    scope_value: str | None = None
    target_value: float
    current: float
    percent: float
