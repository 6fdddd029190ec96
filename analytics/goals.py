"""
analytics/goals.py

Progress of revenue / quantity targets against a record set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from analytics.models import SalesRecord


class GoalTargetType:
    REVENUE = "revenue"
    QUANTITY = "quantity"


class GoalScope:
    OVERALL = "overall"
    PRODUCT = "product"
    CATEGORY = "category"


VALID_TARGET_TYPES = frozenset({GoalTargetType.REVENUE, GoalTargetType.QUANTITY})
VALID_SCOPES = frozenset({GoalScope.OVERALL, GoalScope.PRODUCT, GoalScope.CATEGORY})


@dataclass(frozen=True)
class GoalSpec:
    target_type: str
    target_scope: str
    target_value: float
    scope_value: str | None = None


@dataclass(frozen=True)
class GoalProgress:
    current: float
    percent: float


def _in_scope(record: SalesRecord, goal: GoalSpec) -> bool:
    if goal.target_scope == GoalScope.PRODUCT:
        return record.product_name == goal.scope_value
    if goal.target_scope == GoalScope.CATEGORY:
        return record.category == goal.scope_value
    return True


def compute_goal_progress(records: Sequence[SalesRecord], goal: GoalSpec) -> GoalProgress:
    """
    Sum revenue or quantity over the records in the goal's scope.

    ``percent`` is capped at 100 and is 0 for a non-positive target.
    """
    current: float = 0
    for record in records:
        if not _in_scope(record, goal):
            continue
        if goal.target_type == GoalTargetType.REVENUE:
            current += record.revenue
        else:
            current += record.quantity_sold

    percent = min(current / goal.target_value * 100, 100.0) if goal.target_value > 0 else 0.0
    return GoalProgress(current=current, percent=percent)
