"""
app/repositories package marker.
"""

from app.repositories.ai_report_repository import AIReportRepository
from app.repositories.goal_repository import GoalRepository
from app.repositories.sales_record_repository import SalesRecordRepository
from app.repositories.shared_dashboard_repository import SharedDashboardRepository

__all__ = [
    "AIReportRepository",
    "GoalRepository",
    "SalesRecordRepository",
    "SharedDashboardRepository",
]
