"""
tests/test_ai_analysis_service.py

Pytest unit tests for AIAnalysisService and the sales digest it sends to
the language model. Adapters are in-process doubles; no network calls.
"""

from __future__ import annotations

import json
import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from analytics.anomaly import AnomalyDetector
from analytics.digest import digest_for_records
from analytics.models import SalesRecord
from app.services.ai_analysis_service import AIAnalysisService
from app.services.sales_ingestion_service import SalesPersistenceError
from llm_synthesis.adapter import BaseLLMAdapter, LLMServiceError, MockLLMAdapter


RECORDS = [
    SalesRecord("1", "A", "X", "2024-01-01", 2, 20.0),
    SalesRecord("2", "A", "X", "2024-01-02", 3, 30.0),
    SalesRecord("3", "B", "Y", "2024-01-02", 1, 50.0),
]


class RecordingAdapter(BaseLLMAdapter):
    def __init__(self, reply: str | Exception) -> None:
        self._reply = reply
        self.prompts: list[str] = []
        self.system_prompts: list[str | None] = []

    def generate(self, prompt, system_prompt=None) -> str:
        self.prompts.append(prompt)
        self.system_prompts.append(system_prompt)
        if isinstance(self._reply, Exception):
            raise self._reply
        return self._reply


class FakeReportRepository:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.created: list[dict] = []
        self.deleted: list[uuid.UUID] = []

    def create(self, **kwargs):
        if self.fail:
            raise OperationalError("INSERT", {}, Exception("db down"))
        self.created.append(kwargs)
        return SimpleNamespace(id=uuid.uuid4(), **kwargs)

    def list_for_user(self, *, user_id: str):
        return [SimpleNamespace(**row) for row in self.created if row["user_id"] == user_id]

    def delete(self, *, user_id: str, report_id: uuid.UUID) -> bool:
        self.deleted.append(report_id)
        return True


# ---------------------------------------------------------------------------
# Digest
# ---------------------------------------------------------------------------


class TestDigest:
    def test_digest_lines(self) -> None:
        digest = digest_for_records(RECORDS)

        assert digest.startswith("Overall: 6 units sold, 100.00 total revenue, 2 products.")
        assert "Top product: A, Lowest: B." in digest
        assert "- A (X): 50.00, 5 units, growing" in digest
        assert "- Y: 50.00, 1 units, 1 products" in digest
        assert digest.endswith("Date range: 2024-01-01 to 2024-01-02")

    def test_empty_digest(self) -> None:
        digest = digest_for_records([])

        assert "Overall: 0 units sold, 0.00 total revenue, 0 products." in digest
        assert "Top product: -, Lowest: -." in digest
        assert digest.endswith("Date range: n/a")


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------


class TestAnalyze:
    def test_mock_adapter(self) -> None:
        service = AIAnalysisService(adapter=MockLLMAdapter(), detector=AnomalyDetector())

        analysis = service.analyze(RECORDS)

        assert analysis.summary == "Mock summary for testing purposes."

    def test_prompt_is_built_from_digest(self) -> None:
        adapter = RecordingAdapter(json.dumps({"summary": "ok"}))
        service = AIAnalysisService(adapter=adapter, detector=AnomalyDetector())

        service.analyze(RECORDS, analysis_type="trends")

        (prompt,) = adapter.prompts
        assert "Analysis type: trends" in prompt
        assert "Overall: 6 units sold" in prompt
        assert "2024-01-02" in prompt
        assert adapter.system_prompts[0]

    def test_unstructured_reply_falls_back_to_summary(self) -> None:
        adapter = RecordingAdapter("Sales look fine, nothing to report.")
        service = AIAnalysisService(adapter=adapter, detector=AnomalyDetector(), max_retries=1)

        analysis = service.analyze(RECORDS)

        assert len(adapter.prompts) == 2
        assert analysis.summary == "Sales look fine, nothing to report."
        assert analysis.trends == []

    def test_provider_failure_propagates(self) -> None:
        adapter = RecordingAdapter(LLMServiceError("AI credits exhausted. Please add credits.", 402))
        service = AIAnalysisService(adapter=adapter, detector=AnomalyDetector())

        with pytest.raises(LLMServiceError) as excinfo:
            service.analyze(RECORDS)

        assert excinfo.value.status_code == 402
        assert len(adapter.prompts) == 1


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class TestReports:
    def test_generate_report_stores_analysis_and_anomalies(self) -> None:
        session = MagicMock()
        repository = FakeReportRepository()
        service = AIAnalysisService(
            session,
            adapter=MockLLMAdapter(),
            repository=repository,
            detector=AnomalyDetector(),
        )

        report = service.generate_report(user_id="user-1", dataset_name="Q1", records=RECORDS)

        (created,) = repository.created
        assert created["dataset_name"] == "Q1"
        assert created["report_type"] == "manual"
        assert created["analysis"]["summary"] == "Mock summary for testing purposes."
        assert created["anomalies"] == []
        assert report.dataset_name == "Q1"
        session.commit.assert_called_once()

    def test_generate_report_rolls_back_on_database_error(self) -> None:
        session = MagicMock()
        service = AIAnalysisService(
            session,
            adapter=MockLLMAdapter(),
            repository=FakeReportRepository(fail=True),
            detector=AnomalyDetector(),
        )

        with pytest.raises(SalesPersistenceError):
            service.generate_report(user_id="user-1", dataset_name="Q1", records=RECORDS)

        session.rollback.assert_called_once()

    def test_reports_need_a_session(self) -> None:
        service = AIAnalysisService(adapter=MockLLMAdapter(), detector=AnomalyDetector())

        with pytest.raises(RuntimeError):
            service.list_reports("user-1")

    def test_delete_report(self) -> None:
        session = MagicMock()
        repository = FakeReportRepository()
        service = AIAnalysisService(session, adapter=MockLLMAdapter(), repository=repository)
        report_id = uuid.uuid4()

        assert service.delete_report("user-1", report_id) is True
        assert repository.deleted == [report_id]
        session.commit.assert_called_once()
