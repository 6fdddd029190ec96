"""
app/services package marker.
"""

from app.services.ai_analysis_service import AIAnalysisService
from app.services.comparison_service import ComparisonLoadError, ComparisonService
from app.services.dataset_service import DatasetNotFoundError, DatasetService
from app.services.goal_service import GoalService
from app.services.sales_export_service import ExportResult, SalesExportService
from app.services.sales_ingestion_service import (
    SalesCSVFormatError,
    SalesIngestionError,
    SalesIngestionService,
    SalesPersistenceError,
    SalesRowValidationError,
)
from app.services.share_service import ShareExpiredError, ShareNotFoundError, ShareService

__all__ = [
    "AIAnalysisService",
    "ComparisonLoadError",
    "ComparisonService",
    "DatasetNotFoundError",
    "DatasetService",
    "ExportResult",
    "GoalService",
    "SalesCSVFormatError",
    "SalesExportService",
    "SalesIngestionError",
    "SalesIngestionService",
    "SalesPersistenceError",
    "SalesRowValidationError",
    "ShareExpiredError",
    "ShareNotFoundError",
    "ShareService",
]
