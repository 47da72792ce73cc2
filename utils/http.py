"""
HTTP Client Utilities - shared httpx client construction and retry policy.

Builds pooled async clients with explicit timeouts, and the tenacity retry
policy used for idempotent venue requests.

@.architecture
Incoming: core/venue/connection.py, core/health/probe.py, config/settings.py --- {HTTPClientConfig, base URL, optional httpx transport}
Processing: create_async_client(), retrying(), HTTPClientConfig.from_settings() --- {3 jobs: client_construction, timeout_management, request_retry}
Outgoing: core/venue/connection.py, core/health/probe.py --- {httpx.AsyncClient, tenacity.AsyncRetrying}
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# Failures worth retrying on an idempotent request
RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class HTTPClientConfig:
    """HTTP client configuration."""

    # Timeouts
    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    write_timeout: float = 30.0
    pool_timeout: float = 5.0

    # Retry configuration
    max_retries: int = 3
    retry_min_wait: float = 0.5
    retry_max_wait: float = 5.0

    # Connection pooling
    max_connections: int = 20
    max_keepalive_connections: int = 10
    keepalive_expiry: float = 5.0

    max_redirects: int = 5

    @classmethod
    def from_settings(cls) -> "HTTPClientConfig":
        """Create config from the venue section of application settings."""
        # Lazy import to avoid circular dependency
        from config.settings import get_settings

        venue = get_settings().venue
        return cls(
            read_timeout=venue.request_timeout_seconds,
            write_timeout=venue.request_timeout_seconds,
            max_retries=venue.max_retries,
        )


# =============================================================================
# Builders
# =============================================================================

def create_async_client(
    config: Optional[HTTPClientConfig] = None,
    base_url: str = "",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create an httpx client with pooled connections and explicit timeouts.

    Args:
        config: Client configuration (uses defaults if None)
        base_url: Prefix for relative request URLs
        transport: Optional transport override (used by tests)

    Returns:
        httpx.AsyncClient owned by the caller
    """
    config = config or HTTPClientConfig()
    timeout = httpx.Timeout(
        connect=config.connect_timeout,
        read=config.read_timeout,
        write=config.write_timeout,
        pool=config.pool_timeout,
    )
    limits = httpx.Limits(
        max_connections=config.max_connections,
        max_keepalive_connections=config.max_keepalive_connections,
        keepalive_expiry=config.keepalive_expiry,
    )
    client = httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        limits=limits,
        max_redirects=config.max_redirects,
        follow_redirects=True,
        transport=transport,
    )
    logger.debug(f"Created HTTP client for {base_url or 'absolute URLs'}")
    return client


def retrying(config: Optional[HTTPClientConfig] = None) -> AsyncRetrying:
    """
    Retry policy for idempotent requests.

    Usage:
        async for attempt in retrying(config):
            with attempt:
                response = await client.get(url)

    The last exception is re-raised once attempts are exhausted.
    """
    config = config or HTTPClientConfig()
    return AsyncRetrying(
        stop=stop_after_attempt(config.max_retries),
        wait=wait_exponential(min=config.retry_min_wait, max=config.retry_max_wait),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
