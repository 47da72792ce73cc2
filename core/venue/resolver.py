"""
Asset Registry Resolver

Publishes the operation definitions to a venue once per connection and maps
each logical operation name to the identifier the venue assigned it.

@.architecture
Incoming: core/venue/client.py, config/operations.yaml, core/venue/connection.py --- {VenueConnection, List[Dict] operation definitions}
Processing: deploy_and_resolve(), reset(), is_conflict(), load_operation_definitions() --- {4 jobs: idempotent_deployment, conflict_detection, inventory_resolution, per_connection_caching}
Outgoing: core/venue/client.py, core/dispatch/dispatcher.py --- {read-only Mapping[str, str] name -> operation id}
"""

import asyncio
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from core.venue.connection import VenueConnection
from core.venue.errors import AssetConflictError, VenueError

logger = logging.getLogger(__name__)

ResolvedAssetMap = Mapping[str, str]

EMPTY_ASSET_MAP: ResolvedAssetMap = MappingProxyType({})

_CONFLICT_MARKERS = ("409", "already exists")


def is_conflict(error: BaseException) -> bool:
    """
    Whether a deploy failure means the asset is already present.

    The structured signal wins; message matching covers venues that only
    report the conflict in text.
    """
    if isinstance(error, AssetConflictError):
        return True
    if isinstance(error, VenueError) and error.status_code is not None:
        return error.status_code == 409
    message = str(error).lower()
    return any(marker in message for marker in _CONFLICT_MARKERS)


def load_operation_definitions(path: Path) -> List[Dict[str, Any]]:
    """
    Load the operation definitions shipped with the backend.

    Args:
        path: Location of operations.yaml

    Returns:
        List of definition dicts in file order (empty if the file is missing)
    """
    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error(f"Operation definitions not found: {path}")
        return []

    definitions = raw.get("operations", []) if isinstance(raw, dict) else raw
    logger.info(f"Loaded {len(definitions)} operation definitions from {path}")
    return list(definitions)


class AssetRegistryResolver:
    """
    Deploys operation definitions and resolves their identifiers.

    Owns the resolved asset map. Deployment runs at most once per
    connection; later calls with the same connection return the cached map.
    """

    def __init__(self, namespace: str = "pm:"):
        self.namespace = namespace
        self._connection: Optional[VenueConnection] = None
        self._asset_map: ResolvedAssetMap = EMPTY_ASSET_MAP
        self._lock = asyncio.Lock()

    @property
    def asset_map(self) -> ResolvedAssetMap:
        return self._asset_map

    def is_resolved_for(self, connection: VenueConnection) -> bool:
        return self._connection is connection

    async def deploy_and_resolve(
        self,
        connection: VenueConnection,
        definitions: List[Dict[str, Any]],
    ) -> ResolvedAssetMap:
        """
        Deploy every definition, then resolve names to identifiers.

        Args:
            connection: Live venue connection
            definitions: Operation definitions to publish

        Returns:
            Read-only map of namespaced operation name to identifier
        """
        async with self._lock:
            if self._connection is connection:
                return self._asset_map

            failed = set()
            for definition in definitions:
                name = definition.get("name")
                if not name:
                    logger.warning(f"Operation definition missing name, skipping: {definition}")
                    continue

                try:
                    await connection.deploy(definition)
                    logger.info(f"Asset {name} deployed")
                except Exception as e:
                    if is_conflict(e):
                        logger.info(f"Asset {name} already exists")
                    else:
                        logger.warning(f"Asset {name} deployment failed: {e}")
                        failed.add(name)

            resolved: Dict[str, str] = {}
            for operation in await connection.list_operations():
                name = operation.get("name") or ""
                if name.startswith(self.namespace) and name not in failed:
                    resolved[name] = operation["id"]

            self._asset_map = MappingProxyType(resolved)
            self._connection = connection
            logger.info(
                f"Resolved {len(resolved)} operations on venue {connection.venue_id}"
            )
            return self._asset_map

    def reset(self) -> None:
        """Forget the resolved map; the next connection deploys again."""
        self._connection = None
        self._asset_map = EMPTY_ASSET_MAP
