"""
app/schemas package marker.
"""

from app.schemas.sales import (
    ComparisonResponse,
    DashboardResponse,
    DatasetInfoSchema,
    SalesIngestionResponse,
    SalesRecordSchema,
    SharedDashboardResponse,
)

__all__ = [
    "ComparisonResponse",
    "DashboardResponse",
    "DatasetInfoSchema",
    "SalesIngestionResponse",
    "SalesRecordSchema",
    "SharedDashboardResponse",
]
