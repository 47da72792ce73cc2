"""
Integration registry: descriptors, categories and configuration snapshots.
"""

from core.integrations.registry import (
    CategoryDef,
    Configuration,
    IntegrationDescriptor,
    IntegrationField,
    IntegrationRegistry,
    RegistryError,
    load_registry,
    snapshot_configuration,
)

__all__ = [
    "CategoryDef",
    "Configuration",
    "IntegrationDescriptor",
    "IntegrationField",
    "IntegrationRegistry",
    "RegistryError",
    "load_registry",
    "snapshot_configuration",
]
