"""
Global Error Handler Middleware - API Layer

Turns exceptions escaping the endpoints into a uniform JSON error body.
Venue and registry errors map to the status codes API callers act on; every
request gets a request ID for log correlation.

@.architecture
Incoming: app.py (middleware registration), api/v1/endpoints/*.py, core/venue/errors.py, core/integrations/registry.py --- {FastAPI Request objects, VenueError/RegistryError and other exceptions}
Processing: dispatch(), _handle_error(), _classify_error(), _build_error_response(), _log_error() --- {6 jobs: request_id_assignment, exception_catching, error_classification, response_formatting, sanitization, logging}
Outgoing: monitoring/logging.py, Frontend (HTTP) --- {structured error logs, JSONResponse with standardized error format: code/message/type}
"""

import logging
import traceback
import uuid
from typing import Callable, Optional, Dict, Any
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.integrations.registry import RegistryError
from core.venue.errors import (
    NotConnectedError,
    OperationUnavailableError,
    VenueError,
)
from monitoring.logging import clear_request_context, set_request_context

logger = logging.getLogger(__name__)


class ErrorHandlerConfig:
    """Configuration for error handler."""
    
    def __init__(
        self,
        include_traceback: bool = False,
        sanitize_errors: bool = True,
        log_errors: bool = True,
        custom_error_messages: Optional[Dict[int, str]] = None
    ):
        """
        Initialize error handler configuration.
        
        Args:
            include_traceback: Include traceback in response (dev only)
            sanitize_errors: Sanitize error messages before sending
            log_errors: Log errors to logger
            custom_error_messages: Custom messages for HTTP status codes
        """
        self.include_traceback = include_traceback
        self.sanitize_errors = sanitize_errors
        self.log_errors = log_errors
        self.custom_error_messages = custom_error_messages or self._default_messages()
    
    @staticmethod
    def _default_messages() -> Dict[int, str]:
        """Default error messages for common status codes."""
        return {
            400: "Check the request body against the integration registry",
            404: "The operation is not deployed on the connected venue",
            409: "Connect to a venue first (POST /v1/venue/connect)",
            422: "Validation error",
            500: "Internal server error",
            502: "The venue or an integration endpoint failed",
            503: "Service is starting up",
        }


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware for global error handling.
    
    Features:
    - Assigns or propagates X-Request-ID
    - Catches and formats all exceptions
    - Maps venue errors to 404/409/502
    - Sanitizes unexpected error messages
    - Logs errors with context
    """
    
    def __init__(
        self,
        app: ASGIApp,
        config: Optional[ErrorHandlerConfig] = None
    ):
        """
        Initialize error handler middleware.
        
        Args:
            app: ASGI application
            config: Error handler configuration
        """
        super().__init__(app)
        self.config = config or ErrorHandlerConfig()
        logger.info("Error handler middleware initialized")
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with error handling.
        
        Args:
            request: Incoming request
            call_next: Next middleware/handler
            
        Returns:
            Response (or error response if exception caught)
        """
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        set_request_context(request_id)
        try:
            response = await call_next(request)
        except Exception as e:
            response = await self._handle_error(request, e)
        finally:
            clear_request_context()

        response.headers["X-Request-ID"] = request_id
        return response
    
    async def _handle_error(self, request: Request, error: Exception) -> JSONResponse:
        """
        Handle exception and return formatted error response.
        
        Args:
            request: Request that caused the error
            error: Exception that was raised
            
        Returns:
            JSONResponse with error details
        """
        # Determine status code and message
        status_code, error_message, error_type = self._classify_error(error)
        
        # Log error
        if self.config.log_errors:
            self._log_error(request, error, status_code)
        
        # Build error response
        error_response = self._build_error_response(
            status_code=status_code,
            error_message=error_message,
            error_type=error_type,
            error=error if self.config.include_traceback else None
        )
        
        return JSONResponse(
            status_code=status_code,
            content=error_response
        )
    
    def _classify_error(self, error: Exception) -> tuple[int, str, str]:
        """
        Classify error and determine status code and message.

        Args:
            error: Exception to classify

        Returns:
            Tuple of (status_code, message, error_type)
        """
        error_type = type(error).__name__

        if isinstance(error, NotConnectedError):
            return 409, str(error), error_type
        elif isinstance(error, OperationUnavailableError):
            return 404, str(error), error_type
        elif isinstance(error, VenueError):
            # Connection, invocation and analysis failures are upstream errors
            return 502, str(error), error_type
        elif isinstance(error, RegistryError):
            return 400, str(error), error_type
        elif isinstance(getattr(error, 'status_code', None), int):
            # HTTPException or similar
            return error.status_code, str(error), error_type
        else:
            # Generic server error
            if self.config.sanitize_errors:
                message = "An error occurred processing your request"
            else:
                message = str(error)
            return 500, message, error_type

    
    def _build_error_response(
        self,
        status_code: int,
        error_message: str,
        error_type: str,
        error: Optional[Exception] = None
    ) -> Dict[str, Any]:
        """
        Build formatted error response.
        
        Args:
            status_code: HTTP status code
            error_message: Error message
            error_type: Error type name
            error: Original exception (if including traceback)
            
        Returns:
            Error response dictionary
        """
        response = {
            "error": {
                "code": status_code,
                "message": error_message,
                "type": error_type
            }
        }
        
        # Add custom message if available
        if status_code in self.config.custom_error_messages:
            response["error"]["hint"] = self.config.custom_error_messages[status_code]
        
        # Add traceback if configured (dev only)
        if self.config.include_traceback and error:
            response["error"]["traceback"] = traceback.format_exception(
                type(error), error, error.__traceback__
            )
        
        return response
    
    def _log_error(
        self,
        request: Request,
        error: Exception,
        status_code: int
    ) -> None:
        """
        Log error with request context.
        
        Args:
            request: Request that caused error
            error: Exception that was raised
            status_code: HTTP status code
        """
        # Build context
        context = {
            "method": request.method,
            "path": str(request.url.path),
            "status_code": status_code,
            "error_type": type(error).__name__,
            "client": request.client.host if request.client else "unknown"
        }
        
        # Log with appropriate level
        if status_code >= 500:
            logger.error(
                f"Server error: {error}",
                extra=context,
                exc_info=True
            )
        elif status_code >= 400:
            logger.warning(
                f"Client error: {error}",
                extra=context
            )
        else:
            logger.info(
                f"Request error: {error}",
                extra=context
            )


def create_error_handler_middleware(
    development: bool = False
):
    """
    Create error handler middleware factory with environment-appropriate config.
    
    Args:
        development: Whether running in development mode
        
    Returns:
        Middleware class and kwargs for FastAPI
    """
    if development:
        # Development configuration - more verbose
        config = ErrorHandlerConfig(
            include_traceback=True,
            sanitize_errors=False,
            log_errors=True
        )
    else:
        # Production configuration - sanitized
        config = ErrorHandlerConfig(
            include_traceback=False,
            sanitize_errors=True,
            log_errors=True
        )
    
    return (ErrorHandlerMiddleware, {"config": config})

