"""
FastAPI Application Factory

Creates and configures the FastAPI application with:
- API versioning
- Middleware (CORS, error handling)
- Dependency injection setup
- Lifecycle management (lifespan)

@.architecture
Incoming: main.py, config/settings.py, api/v1/router.py, api/middleware/*.py, core/coordination/service.py --- {Settings object, APIRouter instances, middleware constructors, CoordinationService}
Processing: create_app(), lifespan() --- {6 jobs: application_creation, logging_configuration, middleware_registration, routing_registration, dependency_injection, lifecycle_management}
Outgoing: main.py, Frontend (HTTP) --- {FastAPI application instance, HTTP responses}
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import set_coordination_service
from api.middleware import create_error_handler_middleware
from api.v1.router import api_v1_router
from config.settings import get_settings
from core.coordination.service import CoordinationService
from monitoring import configure_from_preset, get_logger

logger = get_logger(__name__)

# Track startup time for uptime calculation
START_TIME = time.time()

LOGGING_PRESET_BY_ENVIRONMENT = {
    "production": "production",
    "test": "testing",
    "development": "development",
}


def create_app(service: Optional[CoordinationService] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        service: Pre-built coordination service (built from settings at
            startup when None)

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    configure_from_preset(
        LOGGING_PRESET_BY_ENVIRONMENT[settings.environment],
        level=settings.monitoring.log_level,
        format_type=settings.monitoring.log_format,
    )
    logger.info(f"Creating Delegate Backend application (environment: {settings.environment})")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=== Application Startup ===")
        coordination = service or CoordinationService.from_settings(settings)
        set_coordination_service(coordination)
        logger.info(
            f"Coordination service ready ({len(coordination.registry)} integrations, "
            f"default venue {coordination.default_venue_url})"
        )
        try:
            yield
        finally:
            logger.info("=== Application Shutdown ===")
            await coordination.close()
            set_coordination_service(None)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Delegate Backend - integration dispatch and health coordination API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        redirect_slashes=False,
        lifespan=lifespan,
    )

    # ==========================================================================
    # Middleware Configuration
    # ==========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.allowed_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=settings.security.cors_allow_headers,
    )

    middleware_class, middleware_kwargs = create_error_handler_middleware(
        development=settings.environment == "development"
    )
    app.add_middleware(middleware_class, **middleware_kwargs)

    # ==========================================================================
    # API Routers
    # ==========================================================================

    app.include_router(api_v1_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return JSONResponse({
            "status": "ok",
            "message": "Delegate Backend API",
            "version": settings.app_version,
            "environment": settings.environment,
            "docs": "/docs"
        })

    # Root-level health endpoint for quick connectivity checks
    @app.get("/health")
    async def health_check():
        return JSONResponse({
            "status": "ok",
            "timestamp": time.time(),
            "uptime_seconds": time.time() - START_TIME,
            "version": settings.app_version
        })

    return app
