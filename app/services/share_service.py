"""
app/services/share_service.py

Share links: tokenized, read-only access to one dataset.

A link resolves only while it is active and unexpired. Resolution
materializes the dataset's records; dashboards are then derived with the
same aggregation functions used for the owner's view.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_share_settings
from app.domain.sales import SharedView
from app.repositories.sales_record_repository import SalesRecordRepository
from app.repositories.shared_dashboard_repository import SharedDashboardRepository
from app.services.dataset_service import DatasetNotFoundError
from app.services.sales_ingestion_service import SalesPersistenceError
from db.models.shared_dashboard import SharedDashboard

logger = logging.getLogger(__name__)

_TOKEN_BYTES = 24


class ShareNotFoundError(LookupError):
    def __init__(self) -> None:
        super().__init__("Invalid or inactive share link")


class ShareExpiredError(Exception):
    def __init__(self) -> None:
        super().__init__("Share link has expired")


def _as_aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


class ShareService:
    def __init__(
        self,
        session: Session,
        *,
        shares: SharedDashboardRepository | None = None,
        records: SalesRecordRepository | None = None,
    ) -> None:
        self._session = session
        self._shares = shares or SharedDashboardRepository(session)
        self._records = records or SalesRecordRepository(session)

    def create_share(
        self,
        *,
        user_id: str,
        dataset_name: str,
        expires_in_days: int | None = None,
        now: datetime | None = None,
    ) -> SharedDashboard:
        """
        Create an active share link for an existing dataset.

        Raises
        ------
        DatasetNotFoundError
            When the user has no dataset with that name.
        """

        if not self._records.dataset_exists(user_id=user_id, dataset_name=dataset_name):
            raise DatasetNotFoundError(dataset_name)

        days = expires_in_days if expires_in_days is not None else get_share_settings().default_expiry_days
        expires_at = None
        if days is not None and days > 0:
            expires_at = (now or datetime.now(timezone.utc)) + timedelta(days=days)

        try:
            share = self._shares.create(
                user_id=user_id,
                dataset_name=dataset_name,
                share_token=secrets.token_urlsafe(_TOKEN_BYTES),
                expires_at=expires_at,
            )
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesPersistenceError("Failed to create share link.") from exc

        logger.info("Created share link user=%r dataset=%r expires_at=%s", user_id, dataset_name, expires_at)
        return share

    def list_shares(self, user_id: str) -> list[SharedDashboard]:
        return self._shares.list_for_user(user_id=user_id)

    def set_active(self, *, user_id: str, share_id: uuid.UUID, active: bool) -> SharedDashboard:
        share = self._shares.get_for_user(user_id=user_id, share_id=share_id)
        if share is None:
            raise ShareNotFoundError()
        try:
            share.is_active = active
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesPersistenceError("Failed to update share link.") from exc
        return share

    def delete_share(self, *, user_id: str, share_id: uuid.UUID) -> None:
        try:
            deleted = self._shares.delete(user_id=user_id, share_id=share_id)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesPersistenceError("Failed to delete share link.") from exc
        if not deleted:
            raise ShareNotFoundError()

    def resolve_shared_view(self, token: str, now: datetime | None = None) -> SharedView:
        """
        Materialize the dataset behind *token*.

        Raises
        ------
        ShareNotFoundError
            Unknown or deactivated token.
        ShareExpiredError
            The link's expiry time has passed.
        """

        share = self._shares.get_by_token(token) if token else None
        if share is None or not share.is_active:
            raise ShareNotFoundError()

        current = _as_aware(now or datetime.now(timezone.utc))
        if share.expires_at is not None and _as_aware(share.expires_at) < current:
            raise ShareExpiredError()

        records = self._records.load_dataset(user_id=share.user_id, dataset_name=share.dataset_name)
        return SharedView(dataset_name=share.dataset_name, records=records)
