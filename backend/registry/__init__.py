"""
Registry Module

Browsing an OCI / Docker Distribution v2 registry.

Architecture:
- RegistryClient: Authenticated GET transport with per-client TLS policy
- TagResolver: Tag → manifest → config blob → creation time
- service: Catalog listing and bounded fan-out tag aggregation
- config_store: The single in-memory RegistryConfig
"""

from registry.client import RegistryClient
from registry.config_store import get_registry_config, replace_registry_config
from registry.errors import (
    BlobFetchError,
    CatalogError,
    CatalogErrorType,
    ManifestFetchError,
    RegistryConnectionError,
    RegistryError,
    RegistryHTTPError,
    RegistryNotConfiguredError,
    RegistryTimeoutError,
)
from registry.service import get_repo_with_tags, list_repositories
from registry.tag_resolver import TagResolver
from registry.types import EPOCH, RegistryConfig, RepositoryTags, Tag

__all__ = [
    'RegistryClient',
    'TagResolver',
    'get_registry_config',
    'replace_registry_config',
    'get_repo_with_tags',
    'list_repositories',
    'RegistryConfig',
    'RepositoryTags',
    'Tag',
    'EPOCH',
    'RegistryError',
    'RegistryHTTPError',
    'RegistryConnectionError',
    'RegistryTimeoutError',
    'RegistryNotConfiguredError',
    'ManifestFetchError',
    'BlobFetchError',
    'CatalogError',
    'CatalogErrorType',
]
