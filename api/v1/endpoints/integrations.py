"""
Integration Registry & Health Endpoints

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP GET/POST) --- {HTTP requests to /v1/integrations, /v1/integrations/health, /v1/integrations/health/recheck}
Processing: list_integrations(), get_integration_health(), recheck_integration_health() --- {3 jobs: registry_listing, health_reporting, recheck_triggering}
Outgoing: core/coordination/service.py, Frontend (HTTP) --- {RegistryResponse, IntegrationHealthResponse}
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_coordination_service
from api.v1.schemas.health import IntegrationHealthResponse
from api.v1.schemas.integrations import RegistryResponse
from core.coordination.service import CoordinationService
from monitoring import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["integrations"])


@router.get(
    "/integrations",
    response_model=RegistryResponse,
    summary="List integrations",
    description="Integration registry in dispatch order, with category definitions"
)
async def list_integrations(
    service: CoordinationService = Depends(get_coordination_service),
) -> RegistryResponse:
    registry = service.registry
    return RegistryResponse(
        categories=list(registry.categories),
        integrations=list(registry.integrations),
    )


@router.get(
    "/integrations/health",
    response_model=IntegrationHealthResponse,
    summary="Integration endpoint health",
    description="Last known reachability of every configured integration endpoint"
)
async def get_integration_health(
    service: CoordinationService = Depends(get_coordination_service),
) -> IntegrationHealthResponse:
    return IntegrationHealthResponse(
        connected=service.monitor.connected,
        health=dict(service.health),
    )


@router.post(
    "/integrations/health/recheck",
    response_model=IntegrationHealthResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Re-check integration health",
    description="Start a health round now. Ignored while disconnected from the venue."
)
async def recheck_integration_health(
    service: CoordinationService = Depends(get_coordination_service),
) -> IntegrationHealthResponse:
    service.recheck_health()
    logger.info("Integration health recheck requested", connected=service.monitor.connected)
    return IntegrationHealthResponse(
        connected=service.monitor.connected,
        health=dict(service.health),
    )
