"""
app/api/routers/ai_reports.py

AI analysis and saved report endpoints.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_ai_analysis_service, get_current_user_id, get_dataset_service
from app.schemas.sales import AIReportCreateRequest, AIReportResponse, AnalysisRequest
from app.services.ai_analysis_service import AIAnalysisService
from app.services.dataset_service import DatasetNotFoundError, DatasetService
from app.services.sales_ingestion_service import SalesPersistenceError
from llm_synthesis.adapter import LLMServiceError
from llm_synthesis.schema import SalesAnalysis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ai"])


def _llm_failed(exc: LLMServiceError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


@router.post("/datasets/{dataset_name}/analysis", response_model=SalesAnalysis)
def analyze_dataset(
    dataset_name: str,
    body: AnalysisRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    datasets: DatasetService = Depends(get_dataset_service),
    service: AIAnalysisService = Depends(get_ai_analysis_service),
) -> SalesAnalysis:
    """
    Run an AI analysis of the dataset without saving it.
    """

    try:
        records = datasets.load_records(user_id, dataset_name)
        return service.analyze(records, (body or AnalysisRequest()).analysis_type)
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LLMServiceError as exc:
        raise _llm_failed(exc) from exc


@router.post("/reports", response_model=AIReportResponse, status_code=status.HTTP_201_CREATED)
def create_report(
    body: AIReportCreateRequest,
    user_id: str = Depends(get_current_user_id),
    datasets: DatasetService = Depends(get_dataset_service),
    service: AIAnalysisService = Depends(get_ai_analysis_service),
) -> AIReportResponse:
    """
    Generate and save an AI report with the dataset's anomaly alerts.
    """

    try:
        records = datasets.load_records(user_id, body.dataset_name)
        report = service.generate_report(
            user_id=user_id,
            dataset_name=body.dataset_name,
            records=records,
            report_type=body.report_type,
        )
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LLMServiceError as exc:
        raise _llm_failed(exc) from exc
    except SalesPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to save AI report.",
        ) from exc
    return AIReportResponse.model_validate(report)


@router.get("/reports", response_model=list[AIReportResponse])
def list_reports(
    user_id: str = Depends(get_current_user_id),
    service: AIAnalysisService = Depends(get_ai_analysis_service),
) -> list[AIReportResponse]:
    return [AIReportResponse.model_validate(report) for report in service.list_reports(user_id)]


@router.delete("/reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_report(
    report_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    service: AIAnalysisService = Depends(get_ai_analysis_service),
) -> None:
    try:
        deleted = service.delete_report(user_id, report_id)
    except SalesPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to delete AI report.",
        ) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found.")
