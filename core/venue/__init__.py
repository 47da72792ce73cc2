"""
Venue Core System

Connection to the remote execution venue, idempotent operation deployment and
single-operation calls.
"""

from core.venue.errors import (
    VenueError,
    NotConnectedError,
    ConnectionFailedError,
    AssetConflictError,
    OperationUnavailableError,
    AnalysisParseError,
)
from core.venue.connection import VenueConnection, HttpVenueConnection, open_connection
from core.venue.resolver import AssetRegistryResolver, is_conflict, load_operation_definitions
from core.venue.client import VenueClient, MeetingAnalysis, parse_analysis_response

__all__ = [
    # Errors
    "VenueError",
    "NotConnectedError",
    "ConnectionFailedError",
    "AssetConflictError",
    "OperationUnavailableError",
    "AnalysisParseError",
    # Connection
    "VenueConnection",
    "HttpVenueConnection",
    "open_connection",
    # Resolver
    "AssetRegistryResolver",
    "is_conflict",
    "load_operation_definitions",
    # Client
    "VenueClient",
    "MeetingAnalysis",
    "parse_analysis_response",
]
