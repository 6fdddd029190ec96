"""
app/repositories/shared_dashboard_repository.py

Persistence for dataset share links.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from db.models.shared_dashboard import SharedDashboard


class SharedDashboardRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(
        self,
        *,
        user_id: str,
        dataset_name: str,
        share_token: str,
        expires_at: datetime | None,
    ) -> SharedDashboard:
        share = SharedDashboard(
            user_id=user_id,
            dataset_name=dataset_name,
            share_token=share_token,
            is_active=True,
            expires_at=expires_at,
        )
        self._session.add(share)
        self._session.flush()
        return share

    def get_by_token(self, share_token: str) -> SharedDashboard | None:
        stmt = select(SharedDashboard).where(SharedDashboard.share_token == share_token)
        return self._session.scalars(stmt).first()

    def get_for_user(self, *, user_id: str, share_id: uuid.UUID) -> SharedDashboard | None:
        stmt = select(SharedDashboard).where(
            SharedDashboard.user_id == user_id,
            SharedDashboard.id == share_id,
        )
        return self._session.scalars(stmt).first()

    def list_for_user(self, *, user_id: str) -> list[SharedDashboard]:
        stmt = (
            select(SharedDashboard)
            .where(SharedDashboard.user_id == user_id)
            .order_by(SharedDashboard.created_at.desc())
        )
        return list(self._session.scalars(stmt).all())

    def delete(self, *, user_id: str, share_id: uuid.UUID) -> bool:
        result = self._session.execute(
            delete(SharedDashboard).where(
                SharedDashboard.user_id == user_id,
                SharedDashboard.id == share_id,
            )
        )
        return bool(result.rowcount)
