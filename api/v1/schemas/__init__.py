"""
API V1 Schemas

Pydantic models for request/response validation.
"""

from .common import (
    ErrorDetail,
    ErrorResponse,
    VENUE_ERROR_RESPONSES,
)

from .health import (
    SimpleHealthResponse,
    IntegrationHealthResponse,
)

from .integrations import (
    RegistryResponse,
)

from .settings import (
    SettingsResponse,
    SettingsUpdateRequest,
)

from .venue import (
    ConnectRequest,
    ConnectionStatusResponse,
    DeployedAssetsResponse,
)

from .execution import (
    ExecuteRequest,
    WorkflowRequest,
    WorkflowResponse,
    TranscriptRequest,
    TranscriptResponse,
    AnalyzeRequest,
)

__all__ = [
    # Common
    'ErrorDetail',
    'ErrorResponse',
    'VENUE_ERROR_RESPONSES',

    # Health
    'SimpleHealthResponse',
    'IntegrationHealthResponse',

    # Registry
    'RegistryResponse',

    # Settings
    'SettingsResponse',
    'SettingsUpdateRequest',

    # Venue
    'ConnectRequest',
    'ConnectionStatusResponse',
    'DeployedAssetsResponse',

    # Execution & meetings
    'ExecuteRequest',
    'WorkflowRequest',
    'WorkflowResponse',
    'TranscriptRequest',
    'TranscriptResponse',
    'AnalyzeRequest',
]
