"""
Config file loader for backend components.
Reads the centralized TOML config, falling back to built-in defaults.

@.architecture
Incoming: config/delegate.toml, config/settings.py --- {TOML file, load_config calls}
Processing: load_config(), get_fallback_config() --- {2 jobs: config_loading, fallback_generation}
Outgoing: config/settings.py --- {Dict[str, Any] config data}
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parent.parent / "config" / "delegate.toml"


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from the centralized TOML file."""
    config_file = path or Path(os.getenv("DELEGATE_CONFIG_FILE", str(DEFAULT_CONFIG_FILE)))
    try:
        with open(config_file, "r") as f:
            return toml.load(f)
    except FileNotFoundError:
        logger.debug(f"Config file not found, using fallback config: {config_file}")
        return get_fallback_config()
    except toml.TomlDecodeError as e:
        logger.warning(f"Failed to parse config file {config_file}: {e}")
        return get_fallback_config()


def get_fallback_config() -> Dict[str, Any]:
    """Fallback configuration if TOML file can't be loaded."""
    return {
        "VENUE": {
            "url": "http://localhost:8080",
            "operation_namespace": "pm:",
        },
        "HEALTH": {
            "debounce_seconds": 0.5,
            "probe_timeout_seconds": 5.0,
        },
        "MONITORING": {
            "log_level": "INFO",
            "log_format": "text",
        },
    }
