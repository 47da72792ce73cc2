"""
Endpoint reachability probe.

@.architecture
Incoming: core/health/monitor.py --- {str endpoint URL, float timeout}
Processing: ping_server() --- {1 job: reachability_check}
Outgoing: Integration endpoints (HTTP HEAD) --- {bool reachable}
"""

import asyncio
import logging
from typing import Optional

import httpx

from utils.http import HTTPClientConfig, create_async_client

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0


async def ping_server(
    url: str,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bool:
    """
    Check whether an endpoint answers at all.

    Any HTTP response, including 4xx and 5xx, means the server is reachable.
    Network errors and timeouts mean it is not. Never raises.

    Args:
        url: Endpoint URL
        timeout: Seconds before the endpoint counts as unreachable
        transport: Optional httpx transport override

    Returns:
        True if the endpoint responded
    """
    config = HTTPClientConfig(
        connect_timeout=timeout,
        read_timeout=timeout,
        write_timeout=timeout,
        pool_timeout=timeout,
        max_connections=1,
        max_keepalive_connections=0,
    )
    try:
        async with create_async_client(config, transport=transport) as client:
            response = await asyncio.wait_for(client.head(url), timeout=timeout)
        logger.debug(f"Probe {url}: HTTP {response.status_code}")
        return True
    except Exception as e:
        logger.debug(f"Probe {url} failed: {e}")
        return False
