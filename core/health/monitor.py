"""
Integration Health Monitor

Debounced, session-guarded reachability polling of every configured,
non-hidden integration endpoint while a venue connection is active.

@.architecture
Incoming: core/coordination/service.py, core/health/probe.py, core/health/scheduler.py, core/integrations/registry.py --- {connection state changes, Configuration snapshots, recheck requests}
Processing: set_connected(), update_configuration(), recheck(), _start_round(), _check(), status_of(), wait_idle(), close() --- {6 jobs: debouncing, round_scheduling, concurrent_probing, stale_result_discarding, map_publication, cleanup}
Outgoing: api/v1/endpoints/integrations.py, subscribed observers --- {read-only Mapping[str, HealthStatus] snapshots}
"""

import asyncio
import logging
from enum import Enum
from functools import partial
from types import MappingProxyType
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Set

from core.health.probe import DEFAULT_PROBE_TIMEOUT, ping_server
from core.health.scheduler import AsyncioScheduler, ScheduledCall, Scheduler
from core.integrations.registry import (
    Configuration,
    IntegrationRegistry,
    snapshot_configuration,
)

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Reachability of one integration endpoint."""
    UNCHECKED = "unchecked"
    CHECKING = "checking"
    OK = "ok"
    UNREACHABLE = "unreachable"


HealthMap = Mapping[str, HealthStatus]
Probe = Callable[[str], Awaitable[bool]]
Observer = Callable[[HealthMap], None]

DEFAULT_DEBOUNCE_SECONDS = 0.5


class HealthMonitor:
    """
    Polls integration endpoints under a debounced, cancellable regime.

    Owns the health map. A round replaces the whole map at once with every
    checkable integration set to CHECKING, then each probe result updates only
    its own entry. Results from a previous session (before a disconnect) or a
    superseded round are dropped.

    All timers go through the injected scheduler; no round ever runs inside
    the call that requested it.
    """

    def __init__(
        self,
        registry: IntegrationRegistry,
        probe: Optional[Probe] = None,
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    ):
        """
        Initialize health monitor.

        Args:
            registry: Integration registry
            probe: Async reachability check (defaults to ping_server)
            scheduler: Timer source (defaults to the running event loop)
            debounce_seconds: Quiet period after a configuration change
            probe_timeout: Per-endpoint timeout for the default probe
        """
        self.registry = registry
        self.debounce_seconds = debounce_seconds
        self._probe: Probe = probe or partial(ping_server, timeout=probe_timeout)
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()

        self._configuration: Configuration = snapshot_configuration(registry)
        self._connected = False
        self._session = 0
        self._round = 0
        self._pending: Optional[ScheduledCall] = None
        self._tasks: Set[asyncio.Task] = set()
        self._health: HealthMap = MappingProxyType({})
        self._observers: List[Observer] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def health(self) -> HealthMap:
        """Current health map snapshot."""
        return self._health

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def status_of(self, integration_id: str) -> Optional[HealthStatus]:
        """
        Health of one integration.

        Returns:
            The map entry, UNCHECKED for a checkable integration without an
            entry yet, or None when the integration is not checkable
        """
        if integration_id in self._health:
            return self._health[integration_id]
        descriptor = self.registry.get(integration_id)
        if descriptor and not descriptor.hidden and descriptor.is_configured(self._configuration):
            return HealthStatus.UNCHECKED
        return None

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register an observer called with every new map snapshot.

        Returns:
            Function that removes the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # =========================================================================
    # Inputs
    # =========================================================================

    def set_connected(self, connected: bool) -> None:
        """Start polling on connect; stop and clear on disconnect."""
        if connected == self._connected:
            return

        self._connected = connected
        self._session += 1

        if connected:
            logger.info("Health monitoring started")
            self._schedule(0, self._start_round)
        else:
            logger.info("Health monitoring stopped")
            self._schedule(0, self._clear)

    def update_configuration(self, configuration: Configuration) -> None:
        """Store a new configuration and debounce a round while connected."""
        self._configuration = configuration
        if self._connected:
            self._schedule(self.debounce_seconds, self._start_round)

    def recheck(self) -> None:
        """Run a round now. No-op while disconnected."""
        if not self._connected:
            return
        self._cancel_pending()
        self._start_round(self._session)

    # =========================================================================
    # Rounds
    # =========================================================================

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule(self, delay: float, action: Callable[[int], None]) -> None:
        self._cancel_pending()
        self._pending = self._scheduler.call_later(delay, partial(action, self._session))

    def _clear(self, session: int) -> None:
        if session != self._session:
            return
        self._pending = None
        self._publish({})

    def _start_round(self, session: int) -> None:
        if session != self._session or not self._connected:
            return
        self._pending = None
        self._round += 1
        round_id = self._round

        targets = self.registry.checkable(self._configuration)
        if not targets:
            self._publish({})
            return

        self._publish({d.id: HealthStatus.CHECKING for d in targets})
        logger.debug(f"Health round {round_id}: probing {len(targets)} endpoint(s)")

        endpoints = {d.id: self._configuration[d.server_field] for d in targets}
        task = asyncio.create_task(self._run_round(session, round_id, endpoints))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_round(self, session: int, round_id: int, endpoints: Dict[str, str]) -> None:
        await asyncio.gather(
            *(self._check(session, round_id, target, url) for target, url in endpoints.items())
        )

    async def _check(self, session: int, round_id: int, target: str, url: str) -> None:
        try:
            reachable = await self._probe(url)
        except Exception as e:
            logger.warning(f"Probe for {target} raised: {e}")
            reachable = False

        if session != self._session or round_id != self._round:
            logger.debug(f"Discarding stale probe result for {target}")
            return

        updated: Dict[str, HealthStatus] = dict(self._health)
        updated[target] = HealthStatus.OK if reachable else HealthStatus.UNREACHABLE
        self._publish(updated)

    def _publish(self, health: Dict[str, HealthStatus]) -> None:
        self._health = MappingProxyType(dict(health))
        for observer in list(self._observers):
            try:
                observer(self._health)
            except Exception as e:
                logger.error(f"Health observer failed: {e}")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def wait_idle(self) -> None:
        """Wait for every in-flight round to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def close(self) -> None:
        """Cancel pending timers and in-flight probes."""
        self._connected = False
        self._session += 1
        self._cancel_pending()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.debug("Health monitor closed")
