"""
Settings Management

Pydantic-based settings schema with environment variable support.
Integrates with the TOML config and provides type-safe access.

@.architecture
Incoming: utils/config.py, Environment variables, config/delegate.toml, api/dependencies.py --- {Dict from load_toml_config, str from os.getenv, get_settings calls}
Processing: get_settings(), reload_settings(), Settings validation, field_validator() --- {4 jobs: configuration_loading, environment_variable_merging, schema_validation, caching}
Outgoing: app.py, api/dependencies.py, core/coordination/service.py --- {Settings Pydantic model with typed config sections}
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

from utils.config import load_config as load_toml_config

CONFIG_DIR = Path(__file__).parent


# =============================================================================
# Settings Schemas
# =============================================================================

class VenueSettings(BaseModel):
    """Remote execution venue settings."""
    url: str = "http://localhost:8080"
    operation_namespace: str = "pm:"
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    invoke_timeout_seconds: float = Field(default=120.0, gt=0)
    poll_interval_seconds: float = Field(default=1.0, gt=0)
    max_retries: int = Field(default=3, ge=1)


class HealthSettings(BaseModel):
    """Integration endpoint health monitoring settings."""
    debounce_seconds: float = Field(default=0.5, ge=0)
    probe_timeout_seconds: float = Field(default=5.0, gt=0)


class MonitoringSettings(BaseModel):
    """Logging configuration."""
    log_level: str = "INFO"
    log_format: str = "text"  # json|text

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v


class SecuritySettings(BaseModel):
    """HTTP binding and CORS configuration."""
    bind_host: str = "127.0.0.1"
    bind_port: int = 8765
    allowed_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://127.0.0.1",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class RegistrySettings(BaseModel):
    """Locations of the static integration and operation data."""
    integrations_path: Path = Field(
        default_factory=lambda: CONFIG_DIR / "integrations_registry.yaml"
    )
    operations_path: Path = Field(
        default_factory=lambda: CONFIG_DIR / "operations.yaml"
    )


class Settings(BaseModel):
    """
    Main application settings.

    Loads configuration from:
    1. TOML config file (delegate.toml)
    2. Environment variables
    3. Defaults defined in schemas

    Priority: Environment variables > TOML config > Defaults
    """

    app_name: str = "Delegate Backend"
    app_version: str = "1.0.0"
    environment: str = "development"  # development|production|test

    venue: VenueSettings = Field(default_factory=VenueSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["development", "production", "test"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v


# =============================================================================
# Settings Loader
# =============================================================================

def _lower_keys(section: Dict[str, Any]) -> Dict[str, Any]:
    return {key.lower(): value for key, value in section.items()}


@lru_cache()
def get_settings() -> Settings:
    """
    Load and return application settings (cached).

    Merges configuration from:
    1. TOML config file (via utils.config)
    2. Environment variables
    3. Default values

    Returns:
        Settings: Complete application settings
    """
    toml_config = load_toml_config()

    settings_dict: Dict[str, Any] = {
        "environment": os.getenv("DELEGATE_ENVIRONMENT", "development"),
        "venue": _lower_keys(toml_config.get("VENUE", {})),
        "health": _lower_keys(toml_config.get("HEALTH", {})),
        "monitoring": _lower_keys(toml_config.get("MONITORING", {})),
    }

    # Override with environment variables if present
    if venue_url := os.getenv("VENUE_URL"):
        settings_dict["venue"]["url"] = venue_url

    if namespace := os.getenv("VENUE_OPERATION_NAMESPACE"):
        settings_dict["venue"]["operation_namespace"] = namespace

    if debounce := os.getenv("HEALTH_DEBOUNCE_SECONDS"):
        settings_dict["health"]["debounce_seconds"] = float(debounce)

    if probe_timeout := os.getenv("HEALTH_PROBE_TIMEOUT"):
        settings_dict["health"]["probe_timeout_seconds"] = float(probe_timeout)

    if log_level := os.getenv("MONITORING_LOG_LEVEL"):
        settings_dict["monitoring"]["log_level"] = log_level

    if log_format := os.getenv("MONITORING_LOG_FORMAT"):
        settings_dict["monitoring"]["log_format"] = log_format

    security: Dict[str, Any] = {}
    if bind_host := os.getenv("SECURITY_BIND_HOST"):
        security["bind_host"] = bind_host
    if bind_port := os.getenv("SECURITY_BIND_PORT"):
        security["bind_port"] = int(bind_port)
    if security:
        settings_dict["security"] = security

    registry: Dict[str, Any] = {}
    if integrations_path := os.getenv("DELEGATE_INTEGRATIONS_FILE"):
        registry["integrations_path"] = Path(integrations_path)
    if operations_path := os.getenv("DELEGATE_OPERATIONS_FILE"):
        registry["operations_path"] = Path(operations_path)
    if registry:
        settings_dict["registry"] = registry

    return Settings(**settings_dict)


def reload_settings() -> Settings:
    """
    Reload settings (clears cache).

    Use this when settings need to be refreshed (e.g., after config file changes).

    Returns:
        Settings: Reloaded application settings
    """
    get_settings.cache_clear()
    return get_settings()

