"""
app/api/routers/datasets.py

Dataset ingestion, listing and dashboard endpoints.
"""

from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from analytics.models import FilterState
from analytics.sample_data import generate_sample_data
from app.api.dependencies import (
    get_csv_upload,
    get_current_user_id,
    get_dataset_service,
    get_filter_state,
    get_sales_ingestion_service,
)
from app.config import get_sales_ingestion_settings
from app.schemas.sales import (
    AnomalyAlertSchema,
    AnomalyListResponse,
    DashboardResponse,
    DatasetDeleteResponse,
    DatasetInfoSchema,
    FilterOptionsResponse,
    ManualSalesRequest,
    SalesIngestionResponse,
    SalesRecordSchema,
    SampleDataRequest,
)
from app.services.dataset_service import DatasetNotFoundError, DatasetService
from app.services.sales_ingestion_service import (
    SalesCSVFormatError,
    SalesIngestionService,
    SalesPersistenceError,
    SalesRowValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/datasets", tags=["datasets"])


def _not_found(exc: DatasetNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _persistence_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Unable to save sales records.",
    )


def _upload_size(file: UploadFile) -> int:
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@router.post("/upload-csv", response_model=SalesIngestionResponse)
def upload_csv(
    file: UploadFile = Depends(get_csv_upload),
    dataset_name: str | None = Query(default=None, description="Dataset to create or replace"),
    user_id: str = Depends(get_current_user_id),
    service: SalesIngestionService = Depends(get_sales_ingestion_service),
) -> SalesIngestionResponse:
    """
    Ingest one CSV file as a named dataset. Any invalid row rejects the file.
    """

    try:
        max_bytes = get_sales_ingestion_settings().max_upload_bytes
        if _upload_size(file) > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"CSV file exceeds the {max_bytes} byte limit.",
            )
        result = service.ingest_csv(
            user_id=user_id,
            stream=file.file,
            dataset_name=dataset_name,
            file_name=file.filename,
        )
    except SalesRowValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except SalesCSVFormatError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except SalesPersistenceError as exc:
        raise _persistence_failed() from exc
    finally:
        file.file.close()

    return SalesIngestionResponse(dataset_name=result.dataset_name, records_saved=result.records_saved)


@router.post("/manual", response_model=SalesIngestionResponse)
def add_manual_rows(
    body: ManualSalesRequest,
    user_id: str = Depends(get_current_user_id),
    service: SalesIngestionService = Depends(get_sales_ingestion_service),
) -> SalesIngestionResponse:
    """
    Append manually entered rows to a dataset. Blank form lines are ignored.
    """

    rows = [{key: str(value) for key, value in row.model_dump().items()} for row in body.rows]
    try:
        result = service.ingest_manual(user_id=user_id, rows=rows, dataset_name=body.dataset_name)
    except SalesRowValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except SalesPersistenceError as exc:
        raise _persistence_failed() from exc

    return SalesIngestionResponse(dataset_name=result.dataset_name, records_saved=result.records_saved)


@router.post("/sample", response_model=SalesIngestionResponse)
def save_sample_data(
    body: SampleDataRequest,
    user_id: str = Depends(get_current_user_id),
    service: SalesIngestionService = Depends(get_sales_ingestion_service),
) -> SalesIngestionResponse:
    records = generate_sample_data(days=body.days, seed=body.seed)
    try:
        result = service.ingest_records(
            user_id=user_id,
            records=records,
            dataset_name=body.dataset_name,
            source="sample",
        )
    except SalesRowValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except SalesPersistenceError as exc:
        raise _persistence_failed() from exc

    return SalesIngestionResponse(dataset_name=result.dataset_name, records_saved=result.records_saved)


# ---------------------------------------------------------------------------
# Dataset management
# ---------------------------------------------------------------------------


@router.get("", response_model=list[DatasetInfoSchema])
def list_datasets(
    user_id: str = Depends(get_current_user_id),
    service: DatasetService = Depends(get_dataset_service),
) -> list[DatasetInfoSchema]:
    return [DatasetInfoSchema.model_validate(info) for info in service.list_datasets(user_id)]


@router.get("/{dataset_name}/records", response_model=list[SalesRecordSchema])
def get_records(
    dataset_name: str,
    filter_state: FilterState = Depends(get_filter_state),
    user_id: str = Depends(get_current_user_id),
    service: DatasetService = Depends(get_dataset_service),
) -> list[SalesRecordSchema]:
    try:
        records = service.load_filtered(user_id, dataset_name, filter_state)
    except DatasetNotFoundError as exc:
        raise _not_found(exc) from exc
    return [SalesRecordSchema.model_validate(record.to_dict()) for record in records]


@router.delete("/{dataset_name}", response_model=DatasetDeleteResponse)
def delete_dataset(
    dataset_name: str,
    user_id: str = Depends(get_current_user_id),
    service: DatasetService = Depends(get_dataset_service),
) -> DatasetDeleteResponse:
    try:
        deleted = service.delete_dataset(user_id, dataset_name)
    except DatasetNotFoundError as exc:
        raise _not_found(exc) from exc
    except SalesPersistenceError as exc:
        raise _persistence_failed() from exc
    return DatasetDeleteResponse(dataset_name=dataset_name, records_deleted=deleted)


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


@router.get("/{dataset_name}/dashboard", response_model=DashboardResponse)
def get_dashboard(
    dataset_name: str,
    filter_state: FilterState = Depends(get_filter_state),
    user_id: str = Depends(get_current_user_id),
    service: DatasetService = Depends(get_dataset_service),
) -> DashboardResponse:
    """
    Stats, product summaries, daily series and category rollups for the
    filtered dataset.
    """

    try:
        snapshot = service.dashboard(user_id, dataset_name, filter_state)
    except DatasetNotFoundError as exc:
        raise _not_found(exc) from exc
    return DashboardResponse.model_validate(snapshot.to_dict())


@router.get("/{dataset_name}/anomalies", response_model=AnomalyListResponse)
def get_anomalies(
    dataset_name: str,
    filter_state: FilterState = Depends(get_filter_state),
    user_id: str = Depends(get_current_user_id),
    service: DatasetService = Depends(get_dataset_service),
) -> AnomalyListResponse:
    try:
        alerts = service.anomalies(user_id, dataset_name, filter_state)
    except DatasetNotFoundError as exc:
        raise _not_found(exc) from exc
    return AnomalyListResponse(
        alerts=[
            AnomalyAlertSchema(
                kind=alert.kind,
                subject=alert.subject,
                value=alert.value,
                mean=alert.mean,
                message=alert.message,
            )
            for alert in alerts
        ]
    )


@router.get("/{dataset_name}/filters", response_model=FilterOptionsResponse)
def get_filter_options(
    dataset_name: str,
    user_id: str = Depends(get_current_user_id),
    service: DatasetService = Depends(get_dataset_service),
) -> FilterOptionsResponse:
    try:
        options = service.filter_options(user_id, dataset_name)
    except DatasetNotFoundError as exc:
        raise _not_found(exc) from exc
    return FilterOptionsResponse(**options)
