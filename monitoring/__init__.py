"""
Monitoring & Observability Layer

Structured logging for the Delegate backend:
- JSON and text formatting
- Request ID and connected venue ID injection
- Environment presets
"""

from .logging import (
    JSONFormatter,
    ContextFilter,
    StructuredLogger,
    configure_logging,
    configure_from_preset,
    get_logger,
    set_request_context,
    clear_request_context,
    get_request_id,
    set_venue_context,
    get_venue_id,
    LOGGING_PRESETS,
)

__all__ = [
    'JSONFormatter',
    'ContextFilter',
    'StructuredLogger',
    'configure_logging',
    'configure_from_preset',
    'get_logger',
    'set_request_context',
    'clear_request_context',
    'get_request_id',
    'set_venue_context',
    'get_venue_id',
    'LOGGING_PRESETS',
]
