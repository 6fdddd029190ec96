"""
app/services/ai_analysis_service.py

AI insight collaborator.

Aggregates are summarised into a plain-text digest, sent to the language
model, and the reply is validated into a ``SalesAnalysis``. Replies that
never validate fall back to a summary-only analysis holding the raw text.
Transport failures surface as ``LLMServiceError`` with the HTTP status the
API should answer with.
"""

from __future__ import annotations

import logging
import uuid
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from analytics.anomaly import AnomalyDetector
from analytics.digest import digest_for_records
from analytics.models import SalesRecord
from app.config import get_llm_settings
from app.repositories.ai_report_repository import AIReportRepository
from app.services.dataset_service import build_anomaly_detector
from app.services.sales_ingestion_service import SalesPersistenceError
from db.models.ai_report import AIReport
from llm_synthesis.adapter import BaseLLMAdapter, build_adapter
from llm_synthesis.prompt_builder import SalesAnalysisPromptBuilder
from llm_synthesis.retry import LLMRetryExhaustedError, generate_with_retry
from llm_synthesis.schema import SalesAnalysis
from llm_synthesis.validator import LLMOutputValidationError

logger = logging.getLogger(__name__)


class AIAnalysisService:
    def __init__(
        self,
        session: Session | None = None,
        *,
        adapter: BaseLLMAdapter | None = None,
        repository: AIReportRepository | None = None,
        detector: AnomalyDetector | None = None,
        prompt_builder: SalesAnalysisPromptBuilder | None = None,
        max_retries: int | None = None,
    ) -> None:
        settings = get_llm_settings()
        self._session = session
        self._adapter = adapter or build_adapter(settings)
        self._repository = repository or (AIReportRepository(session) if session is not None else None)
        self._detector = detector or build_anomaly_detector()
        self._prompt_builder = prompt_builder or SalesAnalysisPromptBuilder()
        self._max_retries = settings.max_retries if max_retries is None else max_retries

    def analyze(self, records: Sequence[SalesRecord], analysis_type: str = "full") -> SalesAnalysis:
        """
        Request a narrative analysis of *records*.

        Raises
        ------
        LLMServiceError
            When the model provider call fails.
        """

        prompt = self._prompt_builder.build_prompt(digest_for_records(records), analysis_type)
        try:
            return generate_with_retry(
                self._adapter,
                prompt,
                max_retries=self._max_retries,
                system_prompt=self._prompt_builder.system_prompt,
            )
        except LLMRetryExhaustedError as exc:
            logger.warning(
                "AI analysis reply never validated after %d attempt(s); using raw text",
                exc.attempts,
            )
            return SalesAnalysis.from_text(exc.last_raw_response)
        except LLMOutputValidationError as exc:
            logger.warning("AI analysis reply rejected at stage %s; using raw text", exc.stage)
            return SalesAnalysis.from_text(exc.raw_response)

    def generate_report(
        self,
        *,
        user_id: str,
        dataset_name: str,
        records: Sequence[SalesRecord],
        report_type: str = "manual",
    ) -> AIReport:
        """
        Analyse *records*, detect anomalies and store both as a report.
        """

        analysis = self.analyze(records)
        anomalies = self._detector.detect(records)

        repository = self._require_repository()
        try:
            report = repository.create(
                user_id=user_id,
                dataset_name=dataset_name,
                analysis=analysis.model_dump(),
                anomalies=anomalies,
                report_type=report_type,
            )
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesPersistenceError("Failed to save AI report.") from exc

        logger.info(
            "Saved AI report user=%r dataset=%r anomalies=%d",
            user_id,
            dataset_name,
            len(anomalies),
        )
        return report

    def list_reports(self, user_id: str) -> list[AIReport]:
        return self._require_repository().list_for_user(user_id=user_id)

    def delete_report(self, user_id: str, report_id: uuid.UUID) -> bool:
        repository = self._require_repository()
        try:
            deleted = repository.delete(user_id=user_id, report_id=report_id)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesPersistenceError("Failed to delete AI report.") from exc
        return deleted

    def _require_repository(self) -> AIReportRepository:
        if self._repository is None or self._session is None:
            raise RuntimeError("AIAnalysisService needs a database session for reports.")
        return self._repository
