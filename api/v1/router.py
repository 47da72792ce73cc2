"""
API V1 Router

Aggregates all v1 endpoint routers into a single versioned API.

@.architecture
Incoming: app.py, api/v1/endpoints/*.py --- {app.include_router() call, 6 endpoint router instances}
Processing: api_v1_router.include_router() for 6 endpoints --- {1 job: router_aggregation}
Outgoing: app.py, api/v1/endpoints/*.py --- {APIRouter with /v1 prefix, HTTP request routing to endpoints}
"""

from fastapi import APIRouter

from .endpoints import (
    health_router,
    integrations_router,
    settings_router,
    venue_router,
    execute_router,
    meetings_router,
)

# Create v1 router
api_v1_router = APIRouter(prefix="/v1")

# Health
api_v1_router.include_router(health_router)

# Integration registry and endpoint health
api_v1_router.include_router(integrations_router)

# Integration settings
api_v1_router.include_router(settings_router)

# Venue connection (has /venue prefix)
api_v1_router.include_router(venue_router)

# Execution and full workflow
api_v1_router.include_router(execute_router)

# Transcripts and meeting analysis
api_v1_router.include_router(meetings_router)
