"""
app/repositories/goal_repository.py

Persistence for dataset goals.
"""

from __future__ import annotations

import uuid

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from analytics.goals import GoalSpec
from db.models.goal import Goal


class GoalRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, *, user_id: str, dataset_name: str, spec: GoalSpec) -> Goal:
        goal = Goal(
            user_id=user_id,
            dataset_name=dataset_name,
            target_type=spec.target_type,
            target_scope=spec.target_scope,
            scope_value=spec.scope_value,
            target_value=spec.target_value,
        )
        self._session.add(goal)
        self._session.flush()
        return goal

    def list_for_dataset(self, *, user_id: str, dataset_name: str) -> list[Goal]:
        stmt = (
            select(Goal)
            .where(Goal.user_id == user_id, Goal.dataset_name == dataset_name)
            .order_by(Goal.created_at.desc())
        )
        return list(self._session.scalars(stmt).all())

    def delete(self, *, user_id: str, goal_id: uuid.UUID) -> bool:
        result = self._session.execute(
            delete(Goal).where(Goal.user_id == user_id, Goal.id == goal_id)
        )
        return bool(result.rowcount)
