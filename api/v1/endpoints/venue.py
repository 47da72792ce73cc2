"""
Venue Connection Endpoints

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP GET/POST) --- {HTTP requests to /v1/venue/connect, /v1/venue/disconnect, /v1/venue/status, /v1/venue/assets}
Processing: connect_venue(), disconnect_venue(), get_venue_status(), list_deployed_assets() --- {4 jobs: connection_lifecycle, status_reporting, asset_listing, error_propagation}
Outgoing: core/coordination/service.py, Frontend (HTTP) --- {ConnectionStatusResponse, DeployedAssetsResponse}
"""

from typing import Optional

from fastapi import APIRouter, Depends

from api.dependencies import get_coordination_service
from api.v1.schemas.common import VENUE_ERROR_RESPONSES
from api.v1.schemas.venue import (
    ConnectRequest,
    ConnectionStatusResponse,
    DeployedAssetsResponse,
)
from core.coordination.service import CoordinationService
from monitoring import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/venue", tags=["venue"])


@router.post(
    "/connect",
    response_model=ConnectionStatusResponse,
    responses=VENUE_ERROR_RESPONSES,
    summary="Connect to venue",
    description="Connect, deploy operation definitions and start integration health monitoring"
)
async def connect_venue(
    request: Optional[ConnectRequest] = None,
    service: CoordinationService = Depends(get_coordination_service),
) -> ConnectionStatusResponse:
    url = request.url if request else None
    state = await service.connect(url)
    logger.info("Venue connected", venue_id=state.venue_id, operations=state.operations)
    return ConnectionStatusResponse.from_state(state)


@router.post(
    "/disconnect",
    response_model=ConnectionStatusResponse,
    summary="Disconnect from venue"
)
async def disconnect_venue(
    service: CoordinationService = Depends(get_coordination_service),
) -> ConnectionStatusResponse:
    return ConnectionStatusResponse.from_state(await service.disconnect())


@router.get(
    "/status",
    response_model=ConnectionStatusResponse,
    summary="Venue connection status"
)
async def get_venue_status(
    service: CoordinationService = Depends(get_coordination_service),
) -> ConnectionStatusResponse:
    return ConnectionStatusResponse.from_state(service.connection_state)


@router.get(
    "/assets",
    response_model=DeployedAssetsResponse,
    responses=VENUE_ERROR_RESPONSES,
    summary="List deployed operations",
    description="Names of the operations in the backend's namespace on the connected venue"
)
async def list_deployed_assets(
    service: CoordinationService = Depends(get_coordination_service),
) -> DeployedAssetsResponse:
    return DeployedAssetsResponse(assets=await service.get_deployed_assets())
