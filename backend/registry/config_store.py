"""
Process-wide registry configuration.

There is exactly one active RegistryConfig. It lives only in memory and is
replaced wholesale on update. Readers take no lock: each request snapshots
the (immutable) config object once, so a concurrent replace is seen either
entirely or not at all by that request.
"""

import logging
from typing import Optional

from config.settings import AppConfig
from registry.types import RegistryConfig

logger = logging.getLogger(__name__)

_registry_config: Optional[RegistryConfig] = None


def default_registry_config() -> RegistryConfig:
    """Initial config seeded from K3S_SUITE_REGISTRY_* environment variables"""
    return RegistryConfig(
        endpoint=AppConfig.REGISTRY_URL,
        username=AppConfig.REGISTRY_USERNAME or "",
        password=AppConfig.REGISTRY_PASSWORD or "",
        secure_transport=AppConfig.REGISTRY_SECURE,
        timezone=AppConfig.REGISTRY_TIMEZONE or "UTC",
    )


def get_registry_config() -> RegistryConfig:
    """Get the active registry configuration, creating the default on first use"""
    global _registry_config
    if _registry_config is None:
        _registry_config = default_registry_config()
    return _registry_config


def replace_registry_config(config: RegistryConfig) -> RegistryConfig:
    """Replace the active registry configuration (full replace, no merge)"""
    global _registry_config
    _registry_config = config
    logger.info(
        f"Registry configuration updated: endpoint={config.endpoint}, "
        f"secure={config.secure_transport}, type={config.registry_type}, "
        f"auth={'basic' if config.has_credentials else 'none'}"
    )
    return config


def reset_registry_config():
    """Drop the active config so the next read re-seeds from the environment"""
    global _registry_config
    _registry_config = None
