"""
Venue Connection - RPC channel to the remote execution venue

Abstract contract used by the resolver, dispatcher and client, plus the
httpx-backed implementation that talks to a venue's REST API.

@.architecture
Incoming: core/venue/client.py, core/venue/resolver.py, core/dispatch/dispatcher.py, utils/http.py --- {str venue URL, Dict operation definitions, str operation id, Dict invocation input}
Processing: open(), deploy(), list_operations(), invoke(), _wait_for_job(), close() --- {6 jobs: handshake, asset_deployment, inventory_listing, invocation, job_polling, cleanup}
Outgoing: Venue REST API, core/venue/errors.py --- {HTTP requests, Dict asset records, Any operation output, VenueError subclasses}
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from core.venue.errors import (
    AssetConflictError,
    ConnectionFailedError,
    VenueError,
)
from utils.http import HTTPClientConfig, create_async_client, retrying

logger = logging.getLogger(__name__)

TERMINAL_JOB_STATES = ("COMPLETE", "FAILED", "CANCELLED")


class VenueConnection(ABC):
    """
    Abstract base for a live venue connection.

    Implementations:
    - HttpVenueConnection: REST over httpx
    """

    @property
    @abstractmethod
    def venue_id(self) -> str:
        """Identifier the venue reported during the handshake."""

    @abstractmethod
    async def deploy(self, definition: Dict[str, Any]) -> Optional[str]:
        """
        Publish an operation definition.

        Returns:
            Asset id when the venue reports one

        Raises:
            AssetConflictError: If an identical asset already exists
            VenueError: For any other failure
        """

    @abstractmethod
    async def list_operations(self) -> List[Dict[str, str]]:
        """Return every named asset on the venue as {"id", "name"} records."""

    @abstractmethod
    async def invoke(self, operation_id: str, input: Dict[str, Any]) -> Any:
        """Run an operation and return its output."""

    @abstractmethod
    async def close(self) -> None:
        """Release the connection."""


def _error_message(response: httpx.Response) -> str:
    """Best-effort human message from a venue error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error") or body.get("message")
        if isinstance(error, dict):
            error = error.get("message")
        if error:
            return f"{response.status_code}: {error}"
    text = response.text.strip()
    return f"{response.status_code}: {text or response.reason_phrase}"


def _job_body(response: httpx.Response, what: str) -> Dict[str, Any]:
    """Decode a job document, raising VenueError for anything but a JSON object."""
    try:
        body = response.json()
    except ValueError as e:
        raise VenueError(f"Invalid job response from {what}: body is not JSON") from e
    if not isinstance(body, dict):
        raise VenueError(f"Invalid job response from {what}: expected an object, got {type(body).__name__}")
    return body


class HttpVenueConnection(VenueConnection):
    """
    Venue connection over the venue REST API.

    Endpoints:
    - GET  /api/v1/status       handshake, reports the venue id
    - POST /api/v1/assets       deploy a definition
    - GET  /api/v1/assets       asset inventory
    - POST /api/v1/invoke       start an operation, returns a job
    - GET  /api/v1/jobs/{id}    poll a job until it reaches a terminal state

    Reads and deploys retry transient network errors; invocations never do.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        venue_id: str,
        config: Optional[HTTPClientConfig] = None,
        invoke_timeout: float = 120.0,
        poll_interval: float = 1.0,
    ):
        self._client = client
        self._venue_id = venue_id
        self._config = config or HTTPClientConfig()
        self._invoke_timeout = invoke_timeout
        self._poll_interval = poll_interval

    @classmethod
    async def open(
        cls,
        url: str,
        config: Optional[HTTPClientConfig] = None,
        invoke_timeout: float = 120.0,
        poll_interval: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "HttpVenueConnection":
        """
        Connect to a venue and perform the status handshake.

        Args:
            url: Venue base URL
            config: HTTP client configuration
            invoke_timeout: Upper bound for a single invocation, in seconds
            poll_interval: Delay between job polls, in seconds
            transport: Optional httpx transport override

        Returns:
            Connected HttpVenueConnection

        Raises:
            ConnectionFailedError: If the venue is unreachable or rejects the handshake
        """
        config = config or HTTPClientConfig()
        client = create_async_client(config, base_url=url.rstrip("/"), transport=transport)
        try:
            async for attempt in retrying(config):
                with attempt:
                    response = await client.get("/api/v1/status")
        except httpx.HTTPError as e:
            await client.aclose()
            raise ConnectionFailedError(f"Failed to connect to venue at {url}: {e}") from e

        if response.status_code >= 400:
            await client.aclose()
            raise ConnectionFailedError(
                f"Venue at {url} rejected connection: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            status = response.json()
        except ValueError:
            status = {}
        venue_id = (status.get("venueId") if isinstance(status, dict) else None) or url
        logger.info(f"Connected to venue {venue_id} at {url}")
        return cls(client, venue_id, config, invoke_timeout, poll_interval)

    @property
    def venue_id(self) -> str:
        return self._venue_id

    async def _get(self, path: str) -> httpx.Response:
        try:
            async for attempt in retrying(self._config):
                with attempt:
                    response = await self._client.get(path)
        except httpx.HTTPError as e:
            raise VenueError(f"GET {path} failed: {e}") from e
        if response.status_code >= 400:
            raise VenueError(_error_message(response), status_code=response.status_code)
        return response

    async def deploy(self, definition: Dict[str, Any]) -> Optional[str]:
        try:
            async for attempt in retrying(self._config):
                with attempt:
                    response = await self._client.post("/api/v1/assets", json=definition)
        except httpx.HTTPError as e:
            raise VenueError(f"Asset deployment failed: {e}") from e

        if response.status_code == 409:
            raise AssetConflictError(_error_message(response))
        if response.status_code >= 400:
            raise VenueError(_error_message(response), status_code=response.status_code)

        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("id") if isinstance(body, dict) else None

    async def list_operations(self) -> List[Dict[str, str]]:
        body = (await self._get("/api/v1/assets")).json()
        assets = body.get("items", []) if isinstance(body, dict) else body

        operations = []
        for asset in assets or []:
            name = (asset.get("metadata") or {}).get("name")
            if name and asset.get("id"):
                operations.append({"id": asset["id"], "name": name})
        return operations

    async def invoke(self, operation_id: str, input: Dict[str, Any]) -> Any:
        try:
            response = await self._client.post(
                "/api/v1/invoke",
                json={"operation": operation_id, "input": input},
            )
        except httpx.HTTPError as e:
            raise VenueError(f"Invocation of {operation_id} failed: {e}") from e
        if response.status_code >= 400:
            raise VenueError(_error_message(response), status_code=response.status_code)

        job = _job_body(response, f"invocation of {operation_id}")
        try:
            return await asyncio.wait_for(self._wait_for_job(job), timeout=self._invoke_timeout)
        except asyncio.TimeoutError as e:
            raise VenueError(
                f"Operation {operation_id} did not finish within {self._invoke_timeout}s"
            ) from e

    async def _wait_for_job(self, job: Dict[str, Any]) -> Any:
        """Poll a job until it completes, fails or is cancelled."""
        while True:
            status = str(job.get("status", "")).upper()
            if status == "COMPLETE":
                return job.get("output")
            if status in TERMINAL_JOB_STATES:
                error = job.get("error") or f"Job {job.get('id')} {status.lower()}"
                raise VenueError(str(error))

            job_id = job.get("id")
            if not job_id:
                raise VenueError(f"Venue returned a job without an id in state {status or 'unknown'}")

            await asyncio.sleep(self._poll_interval)
            job = _job_body(await self._get(f"/api/v1/jobs/{job_id}"), f"job {job_id}")

    async def close(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()
            logger.debug(f"Closed venue connection {self._venue_id}")


async def open_connection(url: str) -> VenueConnection:
    """Default connection factory: HTTP connection configured from settings."""
    # Lazy import to avoid circular dependency
    from config.settings import get_settings

    venue = get_settings().venue
    return await HttpVenueConnection.open(
        url,
        config=HTTPClientConfig.from_settings(),
        invoke_timeout=venue.invoke_timeout_seconds,
        poll_interval=venue.poll_interval_seconds,
    )
