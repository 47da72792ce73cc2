"""
API Dependencies

FastAPI dependency injection functions for:
- Settings management
- Coordination service access

@.architecture
Incoming: app.py (lifespan), api/v1/endpoints/*.py --- {set_coordination_service calls, Depends() injections from endpoints}
Processing: get_settings(), set_coordination_service(), get_coordination_service() --- {2 jobs: dependency_injection, resource_management}
Outgoing: api/v1/endpoints/*.py, app.py --- {Settings instance, CoordinationService instance}
"""

from typing import Optional

from fastapi import HTTPException

from config.settings import Settings, get_settings as load_settings
from core.coordination.service import CoordinationService
from monitoring import get_logger

logger = get_logger(__name__)


# =============================================================================
# Settings Dependencies
# =============================================================================

def get_settings() -> Settings:
    """
    Get application settings (cached by the settings loader).

    Returns:
        Settings: Application configuration
    """
    return load_settings()


# =============================================================================
# Coordination Service Dependencies
# =============================================================================

_coordination_service: Optional[CoordinationService] = None


def set_coordination_service(service: Optional[CoordinationService]) -> None:
    """Set (or clear, with None) the global coordination service instance."""
    global _coordination_service
    _coordination_service = service


def get_coordination_service() -> CoordinationService:
    """
    Get the coordination service instance.

    The service owns the venue connection, the integration configuration,
    execution dispatch and health monitoring.

    Returns:
        CoordinationService: The service instance

    Raises:
        HTTPException: If the service is not initialized
    """
    if _coordination_service is None:
        logger.error("Coordination service not initialized")
        raise HTTPException(
            status_code=503,
            detail="Coordination service not initialized. Server is starting up."
        )
    return _coordination_service
