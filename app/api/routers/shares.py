"""
app/api/routers/shares.py

Share link management and the public shared dashboard.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from analytics.aggregation import compute_dashboard
from app.api.dependencies import get_current_user_id, get_share_service
from app.schemas.sales import (
    DashboardResponse,
    SalesRecordSchema,
    ShareCreateRequest,
    ShareResponse,
    SharedDashboardResponse,
    ShareUpdateRequest,
)
from app.services.dataset_service import DatasetNotFoundError
from app.services.sales_ingestion_service import SalesPersistenceError
from app.services.share_service import ShareExpiredError, ShareNotFoundError, ShareService

router = APIRouter(tags=["shares"])


def _persistence_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Unable to update share links.",
    )


@router.post("/shares", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
def create_share(
    body: ShareCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: ShareService = Depends(get_share_service),
) -> ShareResponse:
    try:
        share = service.create_share(
            user_id=user_id,
            dataset_name=body.dataset_name,
            expires_in_days=body.expires_in_days,
        )
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SalesPersistenceError as exc:
        raise _persistence_failed() from exc
    return ShareResponse.model_validate(share)


@router.get("/shares", response_model=list[ShareResponse])
def list_shares(
    user_id: str = Depends(get_current_user_id),
    service: ShareService = Depends(get_share_service),
) -> list[ShareResponse]:
    return [ShareResponse.model_validate(share) for share in service.list_shares(user_id)]


@router.patch("/shares/{share_id}", response_model=ShareResponse)
def update_share(
    share_id: uuid.UUID,
    body: ShareUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: ShareService = Depends(get_share_service),
) -> ShareResponse:
    try:
        share = service.set_active(user_id=user_id, share_id=share_id, active=body.is_active)
    except ShareNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SalesPersistenceError as exc:
        raise _persistence_failed() from exc
    return ShareResponse.model_validate(share)


@router.delete("/shares/{share_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_share(
    share_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    service: ShareService = Depends(get_share_service),
) -> None:
    try:
        service.delete_share(user_id=user_id, share_id=share_id)
    except ShareNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SalesPersistenceError as exc:
        raise _persistence_failed() from exc


@router.get("/shared/{token}", response_model=SharedDashboardResponse)
def get_shared_dashboard(
    token: str,
    service: ShareService = Depends(get_share_service),
) -> SharedDashboardResponse:
    """
    Public read-only view of a shared dataset. No caller identity required.
    """

    try:
        view = service.resolve_shared_view(token)
    except ShareNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ShareExpiredError as exc:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(exc)) from exc

    return SharedDashboardResponse(
        dataset_name=view.dataset_name,
        records=[SalesRecordSchema.model_validate(record.to_dict()) for record in view.records],
        dashboard=DashboardResponse.model_validate(compute_dashboard(view.records).to_dict()),
    )
