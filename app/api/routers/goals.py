"""
app/api/routers/goals.py

Goal endpoints. Progress is computed on the (optionally filtered) dataset.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from analytics.goals import GoalSpec
from analytics.models import FilterState
from app.api.dependencies import (
    get_current_user_id,
    get_dataset_service,
    get_filter_state,
    get_goal_service,
)
from app.schemas.sales import GoalCreateRequest, GoalResponse
from app.services.dataset_service import DatasetNotFoundError, DatasetService
from app.services.goal_service import (
    GoalNotFoundError,
    GoalService,
    GoalValidationError,
    GoalWithProgress,
)
from app.services.sales_ingestion_service import SalesPersistenceError

router = APIRouter(prefix="/goals", tags=["goals"])


def _to_response(item: GoalWithProgress) -> GoalResponse:
    goal = item.goal
    return GoalResponse(
        id=goal.id,
        dataset_name=goal.dataset_name,
        target_type=goal.target_type,
        target_scope=goal.target_scope,
        scope_value=goal.scope_value,
        target_value=goal.target_value,
        current=item.progress.current,
        percent=item.progress.percent,
    )


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    body: GoalCreateRequest,
    user_id: str = Depends(get_current_user_id),
    datasets: DatasetService = Depends(get_dataset_service),
    service: GoalService = Depends(get_goal_service),
) -> GoalResponse:
    spec = GoalSpec(
        target_type=body.target_type,
        target_scope=body.target_scope,
        target_value=body.target_value,
        scope_value=body.scope_value,
    )
    try:
        records = datasets.load_records(user_id, body.dataset_name)
        goal = service.create_goal(user_id=user_id, dataset_name=body.dataset_name, spec=spec)
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except GoalValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SalesPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to save goal.",
        ) from exc

    return _to_response(service.with_progress(goal, records))


@router.get("", response_model=list[GoalResponse])
def list_goals(
    dataset_name: str = Query(..., min_length=1),
    filter_state: FilterState = Depends(get_filter_state),
    user_id: str = Depends(get_current_user_id),
    datasets: DatasetService = Depends(get_dataset_service),
    service: GoalService = Depends(get_goal_service),
) -> list[GoalResponse]:
    try:
        records = datasets.load_filtered(user_id, dataset_name, filter_state)
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    items = service.list_with_progress(user_id=user_id, dataset_name=dataset_name, records=records)
    return [_to_response(item) for item in items]


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(
    goal_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    service: GoalService = Depends(get_goal_service),
) -> None:
    try:
        service.delete_goal(user_id=user_id, goal_id=goal_id)
    except GoalNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SalesPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to delete goal.",
        ) from exc
