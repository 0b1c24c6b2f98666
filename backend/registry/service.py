"""
Registry aggregation service.

Entry points used by the HTTP layer:
- list_repositories(): catalog listing with classified errors
- get_repo_with_tags(): bounded fan-out over all tags of a repository
"""

import asyncio
import logging
from typing import List, Optional

from config.settings import AppConfig
from registry.client import RegistryClient
from registry.errors import (
    CatalogErrorType,
    RegistryConnectionError,
    RegistryError,
    RegistryHTTPError,
    RegistryNotConfiguredError,
    classify_catalog_error,
)
from registry.tag_resolver import TagResolver
from registry.types import RegistryConfig, RepositoryTags, Tag

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5


def _require_configured(config: RegistryConfig):
    if not config.is_configured:
        raise RegistryNotConfiguredError()


def _batches(items: List[str], size: int) -> List[List[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


async def check_v2_support(client: RegistryClient) -> bool:
    """
    Probe GET /v2/.

    200 means V2 with anonymous access, 401 means V2 with auth required;
    both count as supported.

    Raises:
        RegistryConnectionError: Registry unreachable
        RegistryTimeoutError: Probe timed out
    """
    try:
        await client.request("/v2/")
        return True
    except RegistryHTTPError as e:
        if e.status == 401:
            return True
        logger.debug(f"V2 probe at {client.base_url} returned {e.status}")
        return False


async def list_repositories(
    config: RegistryConfig,
    timeout: Optional[float] = None,
    client: Optional[RegistryClient] = None,
) -> List[str]:
    """
    List repository names from the registry catalog.

    Args:
        config: Active registry configuration
        timeout: Per-call timeout override (seconds)
        client: Pre-built client (tests); a new one is created otherwise

    Returns:
        Repository names (empty if the registry reports none)

    Raises:
        RegistryNotConfiguredError: No endpoint configured
        CatalogError: Classified as CONNECTION_REFUSED, CATALOG_DISABLED or FETCH_ERROR
    """
    _require_configured(config)

    async with (client or RegistryClient(config, timeout=timeout)) as registry:
        logger.debug(f"Checking V2 support at {registry.base_url}/v2/")
        try:
            if not await check_v2_support(registry):
                logger.warning(f"{registry.base_url} did not answer the V2 probe as expected, trying catalog anyway")
        except RegistryConnectionError as e:
            if e.refused:
                raise classify_catalog_error(e, config.endpoint) from e
            logger.warning(f"V2 probe failed for {registry.base_url}: {e}")
        except RegistryError as e:
            logger.warning(f"V2 probe failed for {registry.base_url}: {e}")

        logger.debug(f"Fetching catalog from {registry.base_url}/v2/_catalog")
        try:
            data = await registry.get_json("/v2/_catalog")
        except RegistryError as e:
            catalog_error = classify_catalog_error(e, config.endpoint)
            if catalog_error.error_type == CatalogErrorType.CATALOG_DISABLED:
                logger.warning("Registry returned 404 for _catalog. Repository listing is disabled.")
            else:
                logger.error(f"Error fetching repositories from {registry.base_url}: {e}")
            raise catalog_error from e

    if not isinstance(data, dict):
        return []
    repositories = data.get("repositories") or []
    return [str(name) for name in repositories]


async def get_repo_with_tags(
    config: RegistryConfig,
    repo_name: str,
    batch_size: Optional[int] = None,
    timeout: Optional[float] = None,
    client: Optional[RegistryClient] = None,
) -> RepositoryTags:
    """
    List a repository's tags with creation times, newest first.

    Tags are resolved in consecutive batches; a batch starts only once the
    previous one has fully finished, so at most ``batch_size`` manifest/blob
    chains are in flight. Tags whose metadata cannot be resolved are kept
    with the EPOCH sentinel, so the output always has one entry per tag.

    Args:
        config: Active registry configuration
        repo_name: Repository name, e.g. "team/app"
        batch_size: Concurrent tag resolutions (default AppConfig.TAG_BATCH_SIZE)
        timeout: Per-call timeout override (seconds)
        client: Pre-built client (tests); a new one is created otherwise

    Raises:
        RegistryNotConfiguredError: No endpoint configured
    """
    _require_configured(config)

    size = batch_size or AppConfig.TAG_BATCH_SIZE or DEFAULT_BATCH_SIZE

    async with (client or RegistryClient(config, timeout=timeout)) as registry:
        resolver = TagResolver(registry)

        tag_names = await resolver.list_tags(repo_name)
        if not tag_names:
            return RepositoryTags(name=repo_name, tags=[])

        resolved: List[Tag] = []
        for batch in _batches(tag_names, size):
            results = await asyncio.gather(
                *(resolver.resolve_tag(repo_name, tag) for tag in batch)
            )
            resolved.extend(results)

    # Stable sort: tags with equal timestamps keep their listed order
    ordered = sorted(resolved, key=lambda tag: tag.created, reverse=True)

    logger.info(f"Resolved {len(ordered)} tags for {repo_name}")
    return RepositoryTags(name=repo_name, tags=ordered)
