"""
Venue error taxonomy.

@.architecture
Incoming: core/venue/connection.py, core/venue/resolver.py, core/venue/client.py, core/dispatch/dispatcher.py --- {venue failures, missing connection, unresolvable operations}
Processing: VenueError hierarchy --- {1 job: error_classification}
Outgoing: api/middleware/error_handler.py --- {typed exceptions mapped to HTTP status codes}
"""

from typing import Optional


class VenueError(Exception):
    """Base error for anything that goes wrong talking to the venue."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotConnectedError(VenueError):
    """An operation needing a venue connection was called without one."""

    def __init__(self, message: str = "Not connected to venue"):
        super().__init__(message)


class ConnectionFailedError(VenueError):
    """The venue could not be reached or refused the handshake."""


class AssetConflictError(VenueError):
    """The venue already holds an asset with the same content."""

    def __init__(self, message: str = "Asset already exists"):
        super().__init__(message, status_code=409)


class OperationUnavailableError(VenueError):
    """A logical operation name has no identifier on the connected venue."""

    def __init__(self, operation: str):
        super().__init__(f"Operation not available on venue: {operation}")
        self.operation = operation


class AnalysisParseError(VenueError):
    """The meeting analysis response was not valid JSON."""
