"""
app/repositories/ai_report_repository.py

Persistence for saved AI analysis reports.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from db.models.ai_report import AIReport


class AIReportRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(
        self,
        *,
        user_id: str,
        dataset_name: str,
        analysis: dict[str, Any],
        anomalies: list[str],
        report_type: str = "manual",
    ) -> AIReport:
        report = AIReport(
            user_id=user_id,
            dataset_name=dataset_name,
            report_type=report_type,
            analysis=analysis,
            anomalies=anomalies,
        )
        self._session.add(report)
        self._session.flush()
        return report

    def list_for_user(self, *, user_id: str, limit: int = 100) -> list[AIReport]:
        stmt = (
            select(AIReport)
            .where(AIReport.user_id == user_id)
            .order_by(AIReport.created_at.desc())
            .limit(limit)
        )
        return list(self._session.scalars(stmt).all())

    def delete(self, *, user_id: str, report_id: uuid.UUID) -> bool:
        result = self._session.execute(
            delete(AIReport).where(AIReport.user_id == user_id, AIReport.id == report_id)
        )
        return bool(result.rowcount)
