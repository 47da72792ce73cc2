"""
Structured Logging - Monitoring Layer

Provides structured logging with:
- JSON formatting for log aggregation
- Context injection (request ID, connected venue ID)
- Configurable log levels per module

@.architecture
Incoming: app.py, api/middleware/error_handler.py, core/coordination/service.py, All modules via get_logger() --- {str log_level, str format_type, Dict[str, str] module_levels, str request_id, str venue_id}
Processing: configure_logging(), configure_from_preset(), JSONFormatter.format(), ContextFilter.filter(), set_request_context(), set_venue_context(), StructuredLogger._log_with_context() --- {4 jobs: context_injection, formatting, log_configuration, structured_logging}
Outgoing: sys.stdout, Log files, All modules --- {StructuredLogger instances, JSON formatted logs, context variables}
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Request-scoped context
request_id_ctx: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

# Process-wide: the venue the backend is currently connected to
_venue_id: Optional[str] = None


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs one JSON object per record for log aggregation systems.
    """

    def __init__(
        self,
        include_traceback: bool = True,
        include_context: bool = True
    ):
        """
        Initialize JSON formatter.

        Args:
            include_traceback: Include exception traceback in output
            include_context: Include request and venue context
        """
        super().__init__()
        self.include_traceback = include_traceback
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if self.include_context:
            request_id = request_id_ctx.get()
            if request_id:
                log_data['request_id'] = request_id
            if _venue_id:
                log_data['venue_id'] = _venue_id

        if record.exc_info and self.include_traceback:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        if hasattr(record, 'extra_fields'):
            log_data['extra'] = record.extra_fields

        return json.dumps(log_data, default=str)


class ContextFilter(logging.Filter):
    """
    Logging filter that adds context variables to log records.

    Used by the text formatter, which references %(request_id)s and %(venue_id)s.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or '-'
        record.venue_id = _venue_id or '-'
        return True


class StructuredLogger:
    """
    Wrapper for Python logger with structured logging support.

    Keyword arguments passed to any level method are attached to the record
    as extra fields.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log_with_context(
        self,
        level: int,
        message: str,
        exc_info: bool = False,
        **kwargs: Any
    ) -> None:
        extra = {'extra_fields': kwargs} if kwargs else {}
        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log_with_context(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._log_with_context(logging.ERROR, message, exc_info=True, **kwargs)


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[Path] = None,
    enable_console: bool = True,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Output format ("json" or "text")
        log_file: Optional file path for log output
        enable_console: Enable console (stdout) logging
        module_levels: Per-module log levels (e.g. {"httpx": "WARNING"})
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s | %(levelname)-8s | %(name)-30s | [%(request_id)s] [%(venue_id)s] | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handlers = []

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(ContextFilter())
        handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(ContextFilter())
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []
    for handler in handlers:
        root_logger.addHandler(handler)

    if module_levels:
        for module_name, module_level in module_levels.items():
            module_log_level = getattr(logging, module_level.upper(), logging.INFO)
            logging.getLogger(module_name).setLevel(module_log_level)

    # Silence noisy libraries
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get structured logger for module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)


def set_request_context(request_id: Optional[str] = None) -> None:
    """Set the request ID for the current request."""
    if request_id:
        request_id_ctx.set(request_id)


def clear_request_context() -> None:
    request_id_ctx.set(None)


def get_request_id() -> Optional[str]:
    """Get current request ID from context."""
    return request_id_ctx.get()


def set_venue_context(venue_id: Optional[str]) -> None:
    """Record the connected venue for every subsequent log line (None clears it)."""
    global _venue_id
    _venue_id = venue_id


def get_venue_id() -> Optional[str]:
    return _venue_id


# Default configuration presets
LOGGING_PRESETS = {
    'development': {
        'level': 'INFO',
        'format_type': 'text',
        'enable_console': True,
        'module_levels': {
            'httpx': 'WARNING',
            'httpcore': 'WARNING',
            'asyncio': 'WARNING',
        }
    },
    'production': {
        'level': 'INFO',
        'format_type': 'json',
        'enable_console': True,
        'module_levels': {
            'httpx': 'WARNING',
            'httpcore': 'WARNING',
            'uvicorn.access': 'WARNING',
            'asyncio': 'WARNING',
        }
    },
    'testing': {
        'level': 'WARNING',
        'format_type': 'text',
        'enable_console': True,
        'module_levels': {
            'tenacity': 'ERROR',
        }
    }
}


def configure_from_preset(preset: str = 'development', **overrides: Any) -> None:
    """
    Configure logging from preset.

    Args:
        preset: Preset name ('development', 'production', or 'testing')
        **overrides: Override preset values
    """
    if preset not in LOGGING_PRESETS:
        raise ValueError(f"Unknown preset: {preset}. Available: {list(LOGGING_PRESETS.keys())}")

    config = LOGGING_PRESETS[preset].copy()
    config.update(overrides)

    configure_logging(**config)
