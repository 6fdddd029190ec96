"""
app/api/routers package marker.
"""

from app.api.routers.ai_reports import router as ai_reports_router
from app.api.routers.comparison import router as comparison_router
from app.api.routers.datasets import router as datasets_router
from app.api.routers.export import router as export_router
from app.api.routers.goals import router as goals_router
from app.api.routers.shares import router as shares_router

__all__ = [
    "ai_reports_router",
    "comparison_router",
    "datasets_router",
    "export_router",
    "goals_router",
    "shares_router",
]
