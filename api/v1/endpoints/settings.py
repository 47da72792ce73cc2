"""
Integration Settings Endpoints

Read and replace the in-memory integration configuration.

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP GET/PUT) --- {HTTP requests to /v1/settings, SettingsUpdateRequest JSON payloads}
Processing: get_integration_settings(), update_integration_settings() --- {2 jobs: settings_retrieval, settings_replacement}
Outgoing: core/coordination/service.py, Frontend (HTTP) --- {Configuration snapshot, SettingsResponse}
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_coordination_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.settings import SettingsResponse, SettingsUpdateRequest
from core.coordination.service import CoordinationService
from core.integrations.registry import Configuration
from monitoring import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["settings"])


def _to_response(service: CoordinationService, configuration: Configuration) -> SettingsResponse:
    return SettingsResponse(
        values=dict(configuration),
        configured=[d.id for d in service.registry.checkable(configuration)],
    )


@router.get(
    "/settings",
    response_model=SettingsResponse,
    summary="Get integration settings",
    description="Every configuration key of the registry; unset keys are empty strings"
)
async def get_integration_settings(
    service: CoordinationService = Depends(get_coordination_service),
) -> SettingsResponse:
    return _to_response(service, service.configuration)


@router.put(
    "/settings",
    response_model=SettingsResponse,
    responses={400: {"model": ErrorResponse, "description": "Unknown configuration keys"}},
    summary="Replace integration settings",
    description="Replace the configuration; integration health is re-checked after a short debounce"
)
async def update_integration_settings(
    request: SettingsUpdateRequest,
    service: CoordinationService = Depends(get_coordination_service),
) -> SettingsResponse:
    configuration = service.update_configuration(request.values)
    logger.info("Integration settings updated", keys=len(request.values))
    return _to_response(service, configuration)
