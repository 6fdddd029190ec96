"""
app/api/dependencies.py

Shared FastAPI dependencies: request validation, caller identity and
per-request service construction.
"""

from __future__ import annotations

from fastapi import Depends, File, Header, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from analytics.models import FilterState
from app.services.ai_analysis_service import AIAnalysisService
from app.services.comparison_service import ComparisonService
from app.services.dataset_service import DatasetService, build_anomaly_detector
from app.services.goal_service import GoalService
from app.services.sales_export_service import SalesExportService
from app.services.sales_ingestion_service import SalesIngestionService
from app.services.share_service import ShareService
from db.session import get_db

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """
    Caller identity forwarded by the upstream identity provider.
    """

    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header.",
        )
    return user_id


def get_filter_state(
    date_from: str | None = Query(default=None, description="Inclusive ISO start date."),
    date_to: str | None = Query(default=None, description="Inclusive ISO end date."),
    category: str | None = Query(default=None, description="Exact category match."),
    product: str | None = Query(default=None, description="Exact product name match."),
) -> FilterState:
    return FilterState(date_from=date_from, date_to=date_to, category=category, product=product)


# ---------------------------------------------------------------------------
# Service factories
# ---------------------------------------------------------------------------


def get_sales_ingestion_service(db: Session = Depends(get_db)) -> SalesIngestionService:
    return SalesIngestionService(db)


def get_dataset_service(db: Session = Depends(get_db)) -> DatasetService:
    return DatasetService(db)


def get_comparison_service(db: Session = Depends(get_db)) -> ComparisonService:
    return ComparisonService(db)


def get_ai_analysis_service(db: Session = Depends(get_db)) -> AIAnalysisService:
    return AIAnalysisService(db)


def get_share_service(db: Session = Depends(get_db)) -> ShareService:
    return ShareService(db)


def get_goal_service(db: Session = Depends(get_db)) -> GoalService:
    return GoalService(db)


def get_sales_export_service() -> SalesExportService:
    return SalesExportService(detector=build_anomaly_detector())
