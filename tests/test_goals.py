"""
tests/test_goals.py

Pytest unit tests for goal progress and GoalService.
"""

from __future__ import annotations

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from analytics.goals import GoalScope, GoalSpec, GoalTargetType, compute_goal_progress
from analytics.models import SalesRecord
from app.services.goal_service import (
    GoalNotFoundError,
    GoalService,
    GoalValidationError,
    validate_goal_spec,
)

RECORDS = [
    SalesRecord("1", "Lamp", "Electronics", "2024-01-01", 2, 120.0),
    SalesRecord("2", "Tea", "Grocery", "2024-01-02", 10, 40.0),
    SalesRecord("3", "Lamp", "Electronics", "2024-01-03", 1, 60.0),
]


class FakeGoalRepository:
    def __init__(self) -> None:
        self.goals: list[SimpleNamespace] = []

    def create(self, *, user_id, dataset_name, spec):
        goal = SimpleNamespace(
            id=uuid.uuid4(),
            user_id=user_id,
            dataset_name=dataset_name,
            target_type=spec.target_type,
            target_scope=spec.target_scope,
            scope_value=spec.scope_value,
            target_value=spec.target_value,
        )
        self.goals.append(goal)
        return goal

    def list_for_dataset(self, *, user_id, dataset_name):
        return [g for g in self.goals if g.user_id == user_id and g.dataset_name == dataset_name]

    def delete(self, *, user_id, goal_id) -> bool:
        before = len(self.goals)
        self.goals = [g for g in self.goals if not (g.user_id == user_id and g.id == goal_id)]
        return len(self.goals) < before


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


class TestGoalProgress:
    def test_overall_revenue(self) -> None:
        progress = compute_goal_progress(
            RECORDS, GoalSpec(GoalTargetType.REVENUE, GoalScope.OVERALL, 440.0)
        )

        assert progress.current == pytest.approx(220.0)
        assert progress.percent == pytest.approx(50.0)

    def test_product_quantity(self) -> None:
        progress = compute_goal_progress(
            RECORDS, GoalSpec(GoalTargetType.QUANTITY, GoalScope.PRODUCT, 4, scope_value="Lamp")
        )

        assert progress.current == 3
        assert progress.percent == pytest.approx(75.0)

    def test_category_scope_caps_at_100(self) -> None:
        progress = compute_goal_progress(
            RECORDS, GoalSpec(GoalTargetType.REVENUE, GoalScope.CATEGORY, 100.0, scope_value="Electronics")
        )

        assert progress.current == pytest.approx(180.0)
        assert progress.percent == 100.0

    def test_non_positive_target(self) -> None:
        progress = compute_goal_progress(RECORDS, GoalSpec(GoalTargetType.REVENUE, GoalScope.OVERALL, 0))

        assert progress.percent == 0.0


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidateGoalSpec:
    @pytest.mark.parametrize(
        "spec",
        [
            GoalSpec("profit", GoalScope.OVERALL, 10.0),
            GoalSpec(GoalTargetType.REVENUE, "region", 10.0),
            GoalSpec(GoalTargetType.REVENUE, GoalScope.OVERALL, 0.0),
            GoalSpec(GoalTargetType.REVENUE, GoalScope.PRODUCT, 10.0, scope_value="  "),
        ],
    )
    def test_rejects(self, spec: GoalSpec) -> None:
        with pytest.raises(GoalValidationError):
            validate_goal_spec(spec)

    def test_overall_drops_scope_value(self) -> None:
        clean = validate_goal_spec(GoalSpec(GoalTargetType.REVENUE, GoalScope.OVERALL, 10.0, scope_value="Lamp"))

        assert clean.scope_value is None

    def test_scope_value_is_trimmed(self) -> None:
        clean = validate_goal_spec(GoalSpec(GoalTargetType.QUANTITY, GoalScope.CATEGORY, 5, scope_value=" Grocery "))

        assert clean.scope_value == "Grocery"


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TestGoalService:
    def test_create_and_list_with_progress(self) -> None:
        session = MagicMock()
        service = GoalService(session, repository=FakeGoalRepository())

        goal = service.create_goal(
            user_id="user-1",
            dataset_name="Q1",
            spec=GoalSpec(GoalTargetType.REVENUE, GoalScope.PRODUCT, 360.0, scope_value="Lamp"),
        )
        items = service.list_with_progress(user_id="user-1", dataset_name="Q1", records=RECORDS)

        session.commit.assert_called_once()
        assert [item.goal.id for item in items] == [goal.id]
        assert items[0].progress.current == pytest.approx(180.0)
        assert items[0].progress.percent == pytest.approx(50.0)

    def test_invalid_goal_is_not_saved(self) -> None:
        session = MagicMock()
        repository = FakeGoalRepository()
        service = GoalService(session, repository=repository)

        with pytest.raises(GoalValidationError):
            service.create_goal(
                user_id="user-1",
                dataset_name="Q1",
                spec=GoalSpec(GoalTargetType.REVENUE, GoalScope.CATEGORY, 10.0),
            )

        assert repository.goals == []
        session.commit.assert_not_called()

    def test_delete_unknown_goal(self) -> None:
        service = GoalService(MagicMock(), repository=FakeGoalRepository())

        with pytest.raises(GoalNotFoundError):
            service.delete_goal(user_id="user-1", goal_id=uuid.uuid4())
