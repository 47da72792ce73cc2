"""
Execution & Meeting Schemas

Request models for dispatching action items, fetching transcripts and
analysing meeting notes. Responses reuse the core models directly.

@.architecture
Incoming: api/v1/endpoints/execute.py, api/v1/endpoints/meetings.py, Frontend (HTTP POST) --- {JSON request payloads}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/execute.py, api/v1/endpoints/meetings.py --- {ExecuteRequest, WorkflowRequest, TranscriptRequest, AnalyzeRequest validated models}
"""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from core.dispatch.models import ActionItem
from core.venue.client import MeetingType


class ExecuteRequest(BaseModel):
    actions: List[ActionItem] = Field(default_factory=list)
    notes: str = ""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "notes": "Sprint planning, 3 Nov",
                "actions": [
                    {"target": "jira", "description": "Fix login timeout", "priority": "high", "type": "create_issue"},
                    {"target": "slack", "description": "Announce release freeze", "priority": "medium"},
                ],
            }
        }
    )


class WorkflowRequest(BaseModel):
    notes: str = Field(..., min_length=1)


class WorkflowResponse(BaseModel):
    result: Any = None


class TranscriptRequest(BaseModel):
    source: str = Field(..., description="Meeting tool integration id, e.g. 'granola'")
    call_ref: str = Field(..., min_length=1)


class TranscriptResponse(BaseModel):
    source: str
    transcript: str


class AnalyzeRequest(BaseModel):
    notes: str = Field(..., min_length=1)
    meeting_type: MeetingType = "ad_hoc"
