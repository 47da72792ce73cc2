"""
Execution Dispatcher

Fans a batch of action items out to every integration in registry order,
one target at a time, isolating failures to the target that raised them.

@.architecture
Incoming: core/coordination/service.py, core/venue/resolver.py, core/integrations/registry.py --- {VenueConnection, ResolvedAssetMap, List[ActionItem], Configuration, update sink}
Processing: execute(), _skip_reason() --- {3 jobs: eligibility_check, sequential_invocation, failure_isolation}
Outgoing: core/venue/connection.py, caller update sink (ExecutionTracker) --- {invoke calls, StepUpdate events}
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from core.dispatch.models import (
    ActionItem,
    StepFailed,
    StepRunning,
    StepSkipped,
    StepSucceeded,
    StepUpdate,
    group_by_target,
)
from core.integrations.registry import (
    Configuration,
    IntegrationDescriptor,
    IntegrationRegistry,
)
from core.venue.connection import VenueConnection
from core.venue.errors import NotConnectedError
from core.venue.resolver import ResolvedAssetMap

logger = logging.getLogger(__name__)

UpdateSink = Callable[[StepUpdate], None]


class ExecutionDispatcher:
    """
    Sequential, failure-isolated dispatcher.

    Every descriptor in the registry receives exactly one terminal update per
    call: success, error or skipped. No aggregate status is computed here.
    """

    def __init__(self, registry: IntegrationRegistry):
        self.registry = registry

    @staticmethod
    def _skip_reason(
        descriptor: IntegrationDescriptor,
        items: List[ActionItem],
        asset_map: ResolvedAssetMap,
        configuration: Configuration,
    ) -> Optional[str]:
        if descriptor.hidden or not descriptor.is_configured(configuration):
            return "no_endpoint"
        if not items:
            return "no_actions"
        if not descriptor.operation or descriptor.operation not in asset_map:
            return "no_operation"
        return None

    async def execute(
        self,
        connection: Optional[VenueConnection],
        asset_map: ResolvedAssetMap,
        batch: List[ActionItem],
        configuration: Configuration,
        on_update: UpdateSink,
        notes: str = "",
    ) -> None:
        """
        Dispatch a batch of action items.

        Args:
            connection: Live venue connection (None when disconnected)
            asset_map: Resolved operation identifiers
            batch: Action items for any number of targets
            configuration: Configuration snapshot
            on_update: Sink receiving one running update before each call and
                one terminal update per descriptor
            notes: Meeting notes passed along with each target's actions

        Raises:
            NotConnectedError: If there is no connection; nothing is dispatched
        """
        if connection is None:
            raise NotConnectedError()

        groups = group_by_target(batch)
        known = {d.id for d in self.registry}
        for target in groups:
            if target not in known:
                logger.warning(f"Dropping action items for unknown target: {target}")

        for descriptor in self.registry:
            items = groups.get(descriptor.id, [])
            reason = self._skip_reason(descriptor, items, asset_map, configuration)
            if reason is not None:
                logger.debug(f"Skipping {descriptor.id}: {reason}")
                on_update(StepSkipped(target=descriptor.id, reason=reason))
                continue

            on_update(StepRunning(target=descriptor.id))

            payload: Dict[str, Any] = {
                "notes": notes,
                "actions": [item.model_dump() for item in items],
                **descriptor.invocation_params(configuration),
            }

            try:
                result = await connection.invoke(asset_map[descriptor.operation], payload)
            except Exception as e:
                logger.warning(f"Execution failed for {descriptor.id}: {e}")
                on_update(StepFailed(target=descriptor.id, error=str(e)))
                continue

            logger.info(f"Executed {len(items)} action(s) on {descriptor.id}")
            on_update(StepSucceeded(target=descriptor.id, result=result))
