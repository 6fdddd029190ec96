"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.ai_report import AIReport
from db.models.goal import Goal
from db.models.sales_record import SalesRecordRow
from db.models.shared_dashboard import SharedDashboard

__all__ = [
    "AIReport",
    "Goal",
    "SalesRecordRow",
    "SharedDashboard",
]
