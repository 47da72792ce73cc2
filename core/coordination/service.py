"""
Coordination Service

Wires the integration registry, the configuration snapshot, the venue client,
the execution dispatcher and the health monitor into the single object the
HTTP API talks to.

@.architecture
Incoming: app.py, api/v1/endpoints/*.py, config/settings.py --- {Settings, raw configuration values, venue URLs, action item batches, meeting notes}
Processing: from_settings(), connect(), disconnect(), update_configuration(), execute(), fetch_transcript(), analyze_meeting(), execute_full_workflow(), get_deployed_assets(), close() --- {6 jobs: component_wiring, connection_status_tracking, configuration_propagation, batch_execution, health_coordination, shutdown}
Outgoing: core/venue/client.py, core/dispatch/dispatcher.py, core/health/monitor.py --- {ConnectionState, ExecutionState, HealthMap, MeetingAnalysis, str transcript}
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional

from config.settings import Settings
from core.dispatch.dispatcher import ExecutionDispatcher
from core.dispatch.models import ActionItem, ExecutionState, ExecutionTracker
from core.health.monitor import HealthMap, HealthMonitor, Probe
from core.health.scheduler import Scheduler
from core.integrations.registry import (
    Configuration,
    IntegrationRegistry,
    load_registry,
    snapshot_configuration,
)
from core.venue.client import ConnectionFactory, MeetingAnalysis, MeetingType, VenueClient
from core.venue.resolver import load_operation_definitions
from monitoring.logging import set_venue_context

logger = logging.getLogger(__name__)


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class ConnectionState:
    """Venue connection as seen by API callers."""
    status: ConnectionStatus
    url: Optional[str] = None
    venue_id: Optional[str] = None
    error: Optional[str] = None
    operations: int = 0


class CoordinationService:
    """
    Single entry point for venue, dispatch and health operations.

    Connection changes are serialised with a lock; the health monitor follows
    the connection and every configuration change.
    """

    def __init__(
        self,
        registry: IntegrationRegistry,
        client: VenueClient,
        monitor: HealthMonitor,
        dispatcher: Optional[ExecutionDispatcher] = None,
        default_venue_url: Optional[str] = None,
    ):
        self.registry = registry
        self.client = client
        self.monitor = monitor
        self.dispatcher = dispatcher or ExecutionDispatcher(registry)
        self.default_venue_url = default_venue_url

        self._configuration: Configuration = snapshot_configuration(registry)
        self._state = ConnectionState(status=ConnectionStatus.DISCONNECTED)
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        registry: Optional[IntegrationRegistry] = None,
        connection_factory: Optional[ConnectionFactory] = None,
        probe: Optional[Probe] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> "CoordinationService":
        """
        Build the service and its components from application settings.

        Args:
            settings: Application settings
            registry: Pre-loaded registry (loaded from settings when None)
            connection_factory: Venue connection factory override
            probe: Reachability probe override
            scheduler: Timer source override
        """
        registry = registry or load_registry(settings.registry.integrations_path)
        definitions = load_operation_definitions(settings.registry.operations_path)

        client = VenueClient(
            registry,
            definitions,
            connection_factory=connection_factory,
            namespace=settings.venue.operation_namespace,
        )
        monitor = HealthMonitor(
            registry,
            probe=probe,
            scheduler=scheduler,
            debounce_seconds=settings.health.debounce_seconds,
            probe_timeout=settings.health.probe_timeout_seconds,
        )
        return cls(registry, client, monitor, default_venue_url=settings.venue.url)

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def update_configuration(self, values: Mapping[str, Any]) -> Configuration:
        """
        Replace the configuration snapshot.

        Missing keys become empty. The health monitor re-checks after its
        debounce window.

        Raises:
            RegistryError: If values contain unknown keys
        """
        self._configuration = snapshot_configuration(self.registry, values)
        self.monitor.update_configuration(self._configuration)
        configured = [d.id for d in self.registry.checkable(self._configuration)]
        logger.info(f"Configuration updated; configured integrations: {configured}")
        return self._configuration

    # =========================================================================
    # Connection
    # =========================================================================

    @property
    def connection_state(self) -> ConnectionState:
        return self._state

    async def connect(self, url: Optional[str] = None) -> ConnectionState:
        """
        Connect to a venue (the configured default when url is None).

        On failure the state becomes ERROR with the message and the error
        propagates.
        """
        url = url or self.default_venue_url
        async with self._lock:
            if self.client.is_connected and self.client.url == url:
                logger.debug(f"Already connected to {url}")
                return self._state

            self._state = ConnectionState(status=ConnectionStatus.CONNECTING, url=url)
            if self.client.is_connected:
                self.monitor.set_connected(False)
            try:
                asset_map = await self.client.connect(url)
            except Exception as e:
                logger.error(f"Failed to connect to venue at {url}: {e}")
                self._state = ConnectionState(
                    status=ConnectionStatus.ERROR, url=url, error=str(e)
                )
                set_venue_context(None)
                raise

            self._state = ConnectionState(
                status=ConnectionStatus.CONNECTED,
                url=url,
                venue_id=self.client.venue_id,
                operations=len(asset_map),
            )
            set_venue_context(self.client.venue_id)
            self.monitor.set_connected(True)
            return self._state

    async def disconnect(self) -> ConnectionState:
        async with self._lock:
            self.monitor.set_connected(False)
            await self.client.disconnect()
            self._state = ConnectionState(status=ConnectionStatus.DISCONNECTED)
            set_venue_context(None)
            return self._state

    # =========================================================================
    # Execution
    # =========================================================================

    async def execute(self, batch: List[ActionItem], notes: str = "") -> ExecutionState:
        """
        Dispatch a batch to every integration and return the final state.

        Raises:
            NotConnectedError: If not connected; nothing is dispatched
        """
        tracker = ExecutionTracker(self.registry)
        await self.dispatcher.execute(
            self.client.connection,
            self.client.asset_map,
            batch,
            self._configuration,
            tracker,
            notes=notes,
        )
        state = tracker.finish()
        logger.info(f"Execution finished with status {state.status}")
        return state

    async def fetch_transcript(self, source: str, call_ref: str) -> str:
        return await self.client.fetch_transcript(source, call_ref, self._configuration)

    async def analyze_meeting(
        self,
        notes: str,
        meeting_type: MeetingType = "ad_hoc",
    ) -> MeetingAnalysis:
        return await self.client.analyze_meeting(notes, meeting_type)

    async def execute_full_workflow(self, notes: str) -> Any:
        return await self.client.execute_full_workflow(notes, self._configuration)

    async def get_deployed_assets(self) -> List[str]:
        return await self.client.get_deployed_assets()

    # =========================================================================
    # Health
    # =========================================================================

    @property
    def health(self) -> HealthMap:
        return self.monitor.health

    def recheck_health(self) -> None:
        self.monitor.recheck()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Stop health monitoring and drop the venue connection."""
        await self.monitor.close()
        await self.client.disconnect()
        self._state = ConnectionState(status=ConnectionStatus.DISCONNECTED)
        logger.info("Coordination service closed")
