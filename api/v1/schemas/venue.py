"""
Venue Schemas

@.architecture
Incoming: api/v1/endpoints/venue.py, core/coordination/service.py --- {ConnectionState, deployed asset names}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/venue.py --- {ConnectRequest, ConnectionStatusResponse, DeployedAssetsResponse validated models}
"""

from typing import List, Optional

from pydantic import BaseModel

from core.coordination.service import ConnectionState, ConnectionStatus


class ConnectRequest(BaseModel):
    """Venue to connect to; the configured default is used when url is omitted."""
    url: Optional[str] = None


class ConnectionStatusResponse(BaseModel):
    status: ConnectionStatus
    url: Optional[str] = None
    venue_id: Optional[str] = None
    error: Optional[str] = None
    operations: int = 0

    @classmethod
    def from_state(cls, state: ConnectionState) -> "ConnectionStatusResponse":
        return cls(
            status=state.status,
            url=state.url,
            venue_id=state.venue_id,
            error=state.error,
            operations=state.operations,
        )


class DeployedAssetsResponse(BaseModel):
    assets: List[str]
