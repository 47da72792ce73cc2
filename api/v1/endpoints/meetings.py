"""
Meeting Endpoints

Transcript retrieval from meeting tools and structured meeting analysis.

@.architecture
Incoming: api/v1/router.py, Frontend (HTTP POST) --- {HTTP requests to /v1/transcripts/fetch, /v1/analyze}
Processing: fetch_transcript(), analyze_meeting() --- {2 jobs: transcript_fetching, meeting_analysis}
Outgoing: core/coordination/service.py, Frontend (HTTP) --- {TranscriptResponse, MeetingAnalysis}
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_coordination_service
from api.v1.schemas.common import VENUE_ERROR_RESPONSES
from api.v1.schemas.execution import AnalyzeRequest, TranscriptRequest, TranscriptResponse
from core.coordination.service import CoordinationService
from core.venue.client import MeetingAnalysis
from monitoring import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["meetings"])


@router.post(
    "/transcripts/fetch",
    response_model=TranscriptResponse,
    responses=VENUE_ERROR_RESPONSES,
    summary="Fetch meeting transcript",
    description="Fetch a transcript from a configured meeting tool through the venue"
)
async def fetch_transcript(
    request: TranscriptRequest,
    service: CoordinationService = Depends(get_coordination_service),
) -> TranscriptResponse:
    transcript = await service.fetch_transcript(request.source, request.call_ref)
    logger.info("Transcript fetched", source=request.source, length=len(transcript))
    return TranscriptResponse(source=request.source, transcript=transcript)


@router.post(
    "/analyze",
    response_model=MeetingAnalysis,
    response_model_by_alias=True,
    responses=VENUE_ERROR_RESPONSES,
    summary="Analyse meeting notes",
    description="Extract action items, blockers and decisions from meeting notes"
)
async def analyze_meeting(
    request: AnalyzeRequest,
    service: CoordinationService = Depends(get_coordination_service),
) -> MeetingAnalysis:
    return await service.analyze_meeting(request.notes, request.meeting_type)
