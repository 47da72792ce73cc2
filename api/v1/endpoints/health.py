"""
Health Check Endpoints

Liveness of the backend itself. Integration endpoint health lives in
integrations.py.

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP GET), Load Balancers --- {HTTP requests to /v1/health}
Processing: health_check() --- {1 job: liveness_reporting}
Outgoing: api/dependencies.py, Frontend (HTTP) --- {SimpleHealthResponse}
"""

import time

from fastapi import APIRouter, Depends

from api.dependencies import get_coordination_service, get_settings
from api.v1.schemas.health import SimpleHealthResponse
from config.settings import Settings
from core.coordination.service import CoordinationService

router = APIRouter(tags=["health"])

# Track startup time
START_TIME = time.time()


@router.get(
    "/health",
    response_model=SimpleHealthResponse,
    summary="Simple health check",
    description="Quick health check endpoint for load balancers and monitoring"
)
async def health_check(
    settings: Settings = Depends(get_settings),
    service: CoordinationService = Depends(get_coordination_service),
) -> SimpleHealthResponse:
    """Basic status, uptime and venue connection status."""
    return SimpleHealthResponse(
        status="ok",
        timestamp=time.time(),
        uptime_seconds=time.time() - START_TIME,
        version=settings.app_version,
        venue_status=service.connection_state.status.value,
    )
