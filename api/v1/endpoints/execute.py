"""
Execution Endpoints

Dispatch action items to every configured integration, or run the
venue-side end-to-end workflow.

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP POST) --- {HTTP requests to /v1/execute, /v1/workflow, ExecuteRequest/WorkflowRequest JSON payloads}
Processing: execute_actions(), run_full_workflow() --- {2 jobs: batch_dispatch, workflow_execution}
Outgoing: core/coordination/service.py, Frontend (HTTP) --- {ExecutionState with per-integration steps, WorkflowResponse}
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_coordination_service
from api.v1.schemas.common import VENUE_ERROR_RESPONSES
from api.v1.schemas.execution import ExecuteRequest, WorkflowRequest, WorkflowResponse
from core.coordination.service import CoordinationService
from core.dispatch.models import ExecutionState
from monitoring import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["execution"])


@router.post(
    "/execute",
    response_model=ExecutionState,
    responses=VENUE_ERROR_RESPONSES,
    summary="Execute action items",
    description=(
        "Dispatch action items to each integration in registry order. "
        "A failing integration does not stop the others; the result lists one step per integration."
    )
)
async def execute_actions(
    request: ExecuteRequest,
    service: CoordinationService = Depends(get_coordination_service),
) -> ExecutionState:
    logger.info("Execution requested", actions=len(request.actions))
    return await service.execute(request.actions, notes=request.notes)


@router.post(
    "/workflow",
    response_model=WorkflowResponse,
    responses=VENUE_ERROR_RESPONSES,
    summary="Run full workflow",
    description="Analyse notes and fan out on the venue in a single operation"
)
async def run_full_workflow(
    request: WorkflowRequest,
    service: CoordinationService = Depends(get_coordination_service),
) -> WorkflowResponse:
    return WorkflowResponse(result=await service.execute_full_workflow(request.notes))
