"""
Integration Registry - YAML-driven catalogue of dispatch and health targets

Loads the ordered, immutable list of integration descriptors and their category
definitions from integrations_registry.yaml. The registry is a value: it is built
once at startup and passed explicitly to every component that needs it.

@.architecture
Incoming: config/integrations_registry.yaml, config/settings.py, core/coordination/service.py --- {Dict YAML config, Path registry location, raw configuration values}
Processing: load_registry(), IntegrationRegistry.get(), checkable(), snapshot_configuration() --- {4 jobs: yaml_parsing, descriptor_validation, configured_set_derivation, configuration_snapshotting}
Outgoing: core/dispatch/dispatcher.py, core/health/monitor.py, core/venue/client.py, api/v1/endpoints/integrations.py --- {IntegrationRegistry, IntegrationDescriptor, Configuration mapping}
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

logger = logging.getLogger(__name__)

Configuration = Mapping[str, str]


class RegistryError(ValueError):
    """Raised when the integration registry cannot be loaded or is inconsistent."""


# =============================================================================
# Descriptor Models
# =============================================================================

class CategoryDef(BaseModel):
    """Grouping used to present integrations."""
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    group: Literal["execution", "intelligence"]


class IntegrationField(BaseModel):
    """One configurable attribute of an integration."""
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    type: Literal["url", "text", "token"]
    placeholder: str = ""
    param: str


class IntegrationDescriptor(BaseModel):
    """Static description of one integration target."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category: str
    icon: str = ""
    icon_color: str = ""
    server_field: str
    fields: Tuple[IntegrationField, ...]
    operation: Optional[str] = None
    transcript_operation: Optional[str] = None
    hidden: bool = False

    @model_validator(mode="after")
    def _server_field_is_declared(self) -> "IntegrationDescriptor":
        if self.server_field not in {f.key for f in self.fields}:
            raise ValueError(
                f"server_field '{self.server_field}' is not one of the fields of '{self.id}'"
            )
        return self

    def is_configured(self, configuration: Configuration) -> bool:
        """True when the endpoint URL for this integration is set."""
        return bool(configuration.get(self.server_field, ""))

    def invocation_params(self, configuration: Configuration) -> Dict[str, str]:
        """Map each field's configured value to its remote parameter name."""
        return {f.param: configuration.get(f.key, "") for f in self.fields}


# =============================================================================
# Registry
# =============================================================================

class IntegrationRegistry:
    """
    Ordered, immutable collection of integration descriptors.

    Iteration order is the order of the registry file, which is also the
    dispatch order.
    """

    def __init__(
        self,
        integrations: List[IntegrationDescriptor],
        categories: Optional[List[CategoryDef]] = None,
    ):
        self._integrations: Tuple[IntegrationDescriptor, ...] = tuple(integrations)
        self._categories: Tuple[CategoryDef, ...] = tuple(categories or ())
        self._by_id: Dict[str, IntegrationDescriptor] = {}

        for descriptor in self._integrations:
            if descriptor.id in self._by_id:
                raise RegistryError(f"Duplicate integration id: {descriptor.id}")
            self._by_id[descriptor.id] = descriptor

        if self._categories:
            known = {c.id for c in self._categories}
            for descriptor in self._integrations:
                if descriptor.category not in known:
                    raise RegistryError(
                        f"Integration '{descriptor.id}' uses unknown category '{descriptor.category}'"
                    )

        keys: Dict[str, str] = {}
        for descriptor in self._integrations:
            for field in descriptor.fields:
                owner = keys.setdefault(field.key, descriptor.id)
                if owner != descriptor.id:
                    raise RegistryError(
                        f"Field key '{field.key}' is declared by both '{owner}' and '{descriptor.id}'"
                    )
        self._field_keys: Tuple[str, ...] = tuple(keys)

    def __iter__(self) -> Iterator[IntegrationDescriptor]:
        return iter(self._integrations)

    def __len__(self) -> int:
        return len(self._integrations)

    def __contains__(self, integration_id: object) -> bool:
        return integration_id in self._by_id

    @property
    def integrations(self) -> Tuple[IntegrationDescriptor, ...]:
        return self._integrations

    @property
    def categories(self) -> Tuple[CategoryDef, ...]:
        return self._categories

    @property
    def field_keys(self) -> Tuple[str, ...]:
        """Every configuration key declared by any descriptor."""
        return self._field_keys

    def get(self, integration_id: str) -> Optional[IntegrationDescriptor]:
        return self._by_id.get(integration_id)

    def by_category(self, category_id: str) -> List[IntegrationDescriptor]:
        return [d for d in self._integrations if d.category == category_id]

    def checkable(self, configuration: Configuration) -> List[IntegrationDescriptor]:
        """
        Descriptors that take part in health checks.

        Args:
            configuration: Current configuration snapshot

        Returns:
            Non-hidden descriptors whose server field is non-empty, in registry order
        """
        return [
            d for d in self._integrations
            if not d.hidden and d.is_configured(configuration)
        ]


def snapshot_configuration(
    registry: IntegrationRegistry,
    values: Optional[Mapping[str, Any]] = None,
) -> Configuration:
    """
    Build an immutable configuration object for a registry.

    Every field key of the registry is present; missing keys become "".

    Raises:
        RegistryError: If values contain keys no descriptor declares
    """
    values = values or {}
    unknown = sorted(set(values) - set(registry.field_keys))
    if unknown:
        raise RegistryError(f"Unknown configuration keys: {', '.join(unknown)}")

    snapshot = {}
    for key in registry.field_keys:
        value = values.get(key)
        snapshot[key] = "" if value is None else str(value)
    return MappingProxyType(snapshot)


def load_registry(path: Path) -> IntegrationRegistry:
    """
    Load the integration registry from YAML.

    Args:
        path: Location of integrations_registry.yaml

    Returns:
        IntegrationRegistry in file order

    Raises:
        RegistryError: If the file is missing, unparsable, or inconsistent
    """
    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise RegistryError(f"Registry not found: {path}") from e
    except yaml.YAMLError as e:
        raise RegistryError(f"Failed to parse registry {path}: {e}") from e

    try:
        categories = [CategoryDef(**c) for c in raw.get("categories", [])]
        integrations = [IntegrationDescriptor(**i) for i in raw.get("integrations", [])]
    except (TypeError, ValidationError) as e:
        raise RegistryError(f"Invalid registry entry in {path}: {e}") from e

    registry = IntegrationRegistry(integrations, categories)
    logger.info(f"Loaded integration registry: {path} ({len(registry)} integrations)")
    return registry
