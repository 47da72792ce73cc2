"""
Utilities Package - helper modules.

- http: httpx client construction and tenacity retry policy
- config: TOML configuration loading
"""

from .http import (
    HTTPClientConfig,
    RETRYABLE_EXCEPTIONS,
    create_async_client,
    retrying,
)

from .config import (
    load_config,
    get_fallback_config,
)

__all__ = [
    # HTTP
    'HTTPClientConfig',
    'RETRYABLE_EXCEPTIONS',
    'create_async_client',
    'retrying',

    # Config
    'load_config',
    'get_fallback_config',
]
