"""
app/services/goal_service.py

Goal CRUD plus progress against the (optionally filtered) dataset.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from analytics.goals import (
    VALID_SCOPES,
    VALID_TARGET_TYPES,
    GoalProgress,
    GoalScope,
    GoalSpec,
    compute_goal_progress,
)
from analytics.models import SalesRecord
from app.repositories.goal_repository import GoalRepository
from app.services.sales_ingestion_service import SalesPersistenceError
from db.models.goal import Goal

logger = logging.getLogger(__name__)


class GoalValidationError(ValueError):
    pass


class GoalNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class GoalWithProgress:
    goal: Goal
    progress: GoalProgress


def validate_goal_spec(spec: GoalSpec) -> GoalSpec:
    if spec.target_type not in VALID_TARGET_TYPES:
        raise GoalValidationError(f"Unsupported target_type: {spec.target_type}")
    if spec.target_scope not in VALID_SCOPES:
        raise GoalValidationError(f"Unsupported target_scope: {spec.target_scope}")
    if spec.target_value <= 0:
        raise GoalValidationError("target_value must be greater than 0")

    scope_value = (spec.scope_value or "").strip() or None
    if spec.target_scope != GoalScope.OVERALL and scope_value is None:
        raise GoalValidationError(f"scope_value is required for {spec.target_scope} goals")
    if spec.target_scope == GoalScope.OVERALL:
        scope_value = None

    return GoalSpec(
        target_type=spec.target_type,
        target_scope=spec.target_scope,
        target_value=spec.target_value,
        scope_value=scope_value,
    )


def _spec_of(goal: Goal) -> GoalSpec:
    return GoalSpec(
        target_type=goal.target_type,
        target_scope=goal.target_scope,
        target_value=goal.target_value,
        scope_value=goal.scope_value,
    )


class GoalService:
    def __init__(self, session: Session, *, repository: GoalRepository | None = None) -> None:
        self._session = session
        self._repository = repository or GoalRepository(session)

    def create_goal(self, *, user_id: str, dataset_name: str, spec: GoalSpec) -> Goal:
        clean = validate_goal_spec(spec)
        try:
            goal = self._repository.create(user_id=user_id, dataset_name=dataset_name, spec=clean)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesPersistenceError("Failed to save goal.") from exc
        logger.info(
            "Created goal user=%r dataset=%r %s/%s",
            user_id,
            dataset_name,
            clean.target_type,
            clean.target_scope,
        )
        return goal

    def with_progress(self, goal: Goal, records: Sequence[SalesRecord]) -> GoalWithProgress:
        return GoalWithProgress(goal=goal, progress=compute_goal_progress(records, _spec_of(goal)))

    def list_with_progress(
        self,
        *,
        user_id: str,
        dataset_name: str,
        records: Sequence[SalesRecord],
    ) -> list[GoalWithProgress]:
        goals = self._repository.list_for_dataset(user_id=user_id, dataset_name=dataset_name)
        return [self.with_progress(goal, records) for goal in goals]

    def delete_goal(self, *, user_id: str, goal_id: uuid.UUID) -> None:
        try:
            deleted = self._repository.delete(user_id=user_id, goal_id=goal_id)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesPersistenceError("Failed to delete goal.") from exc
        if not deleted:
            raise GoalNotFoundError(f"Goal not found: {goal_id}")
