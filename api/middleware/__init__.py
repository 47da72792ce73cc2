"""
API Middleware Layer

Error handling and request correlation for the HTTP API. CORS is configured
directly through FastAPI in app.py.
"""

from .error_handler import (
    ErrorHandlerMiddleware,
    ErrorHandlerConfig,
    create_error_handler_middleware,
)

__all__ = [
    'ErrorHandlerMiddleware',
    'ErrorHandlerConfig',
    'create_error_handler_middleware',
]
