"""
API V1 Endpoints

FastAPI routers for all API endpoints.
"""

from .health import router as health_router
from .integrations import router as integrations_router
from .settings import router as settings_router
from .venue import router as venue_router
from .execute import router as execute_router
from .meetings import router as meetings_router

__all__ = [
    "health_router",
    "integrations_router",
    "settings_router",
    "venue_router",
    "execute_router",
    "meetings_router",
]
