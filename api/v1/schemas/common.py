"""
Common Schemas

Shared Pydantic models used across API endpoints.

@.architecture
Incoming: api/v1/endpoints/*.py, api/middleware/error_handler.py --- {error bodies produced by the error handler}
Processing: OpenAPI documentation of error responses --- {1 job: error_documentation}
Outgoing: api/v1/endpoints/*.py --- {ErrorResponse model, VENUE_ERROR_RESPONSES}
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: int
    message: str
    type: str
    hint: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body returned by the error handler middleware."""
    error: ErrorDetail


# Error responses shared by every endpoint that talks to the venue
VENUE_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    404: {"model": ErrorResponse, "description": "Operation not deployed on the connected venue"},
    409: {"model": ErrorResponse, "description": "Not connected to a venue"},
    502: {"model": ErrorResponse, "description": "Venue or integration endpoint failure"},
}
