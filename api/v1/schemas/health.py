"""
Health Schemas

Pydantic models for service liveness and integration endpoint health.

@.architecture
Incoming: api/v1/endpoints/health.py, api/v1/endpoints/integrations.py, core/health/monitor.py --- {uptime, HealthMap snapshots}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/health.py, api/v1/endpoints/integrations.py --- {SimpleHealthResponse, IntegrationHealthResponse validated models}
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.health.monitor import HealthStatus


class SimpleHealthResponse(BaseModel):
    """Liveness of the backend itself."""
    status: str = "ok"
    timestamp: float
    uptime_seconds: float
    version: Optional[str] = None
    venue_status: Optional[str] = None


class IntegrationHealthResponse(BaseModel):
    """Reachability of every checked integration endpoint."""
    connected: bool
    health: Dict[str, HealthStatus] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "connected": True,
                "health": {"jira": "ok", "slack": "unreachable", "github": "checking"},
            }
        }
    )
