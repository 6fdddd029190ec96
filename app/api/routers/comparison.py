"""
app/api/routers/comparison.py

Side-by-side comparison endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from analytics.comparison import ComparisonNotReadyError
from app.api.dependencies import get_comparison_service, get_current_user_id
from app.domain.sales import DateWindow
from app.schemas.sales import (
    CompareDatasetsRequest,
    CompareDateRangeRequest,
    ComparisonResponse,
)
from app.services.comparison_service import ComparisonLoadError, ComparisonService

router = APIRouter(prefix="/compare", tags=["comparison"])


def _map_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ComparisonNotReadyError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "empty_sides": list(exc.empty_sides)},
        )
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post("/datasets", response_model=ComparisonResponse)
def compare_datasets(
    body: CompareDatasetsRequest,
    user_id: str = Depends(get_current_user_id),
    service: ComparisonService = Depends(get_comparison_service),
) -> ComparisonResponse:
    try:
        result = service.compare_datasets(user_id, body.dataset_a, body.dataset_b)
    except (ComparisonNotReadyError, ComparisonLoadError) as exc:
        raise _map_error(exc) from exc
    return ComparisonResponse.model_validate(result.to_dict())


@router.post("/date-range", response_model=ComparisonResponse)
def compare_date_range(
    body: CompareDateRangeRequest,
    user_id: str = Depends(get_current_user_id),
    service: ComparisonService = Depends(get_comparison_service),
) -> ComparisonResponse:
    """
    Compare two inclusive date windows of one dataset. Windows may overlap.
    """

    try:
        result = service.compare_date_windows(
            user_id,
            body.dataset_name,
            DateWindow(date_from=body.window_a.date_from, date_to=body.window_a.date_to),
            DateWindow(date_from=body.window_b.date_from, date_to=body.window_b.date_to),
        )
    except (ComparisonNotReadyError, ComparisonLoadError) as exc:
        raise _map_error(exc) from exc
    return ComparisonResponse.model_validate(result.to_dict())
