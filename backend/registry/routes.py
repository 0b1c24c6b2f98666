"""
Registry API routes for K3s Suite

Provides REST endpoints for:
- Reading and replacing the registry configuration
- Listing repositories from the registry catalog
- Listing a repository's tags with creation times
"""

import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from models.registry_models import (
    RegistryConfigResponse,
    RegistryConfigUpdate,
    RegistryConfigUpdateResponse,
    RepositoryTagsResponse,
)
from registry.config_store import get_registry_config, replace_registry_config
from registry.errors import CatalogError, RegistryNotConfiguredError
from registry.service import get_repo_with_tags, list_repositories

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["registry"])


def _error(status_code: int, error: str, details=None) -> JSONResponse:
    content = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@router.get("/config/registry", response_model=RegistryConfigResponse)
async def get_config():
    """Get the active registry configuration"""
    return RegistryConfigResponse.from_config(get_registry_config())


@router.post("/config/registry", response_model=RegistryConfigUpdateResponse)
async def update_config(update: RegistryConfigUpdate):
    """Replace the registry configuration (absent fields reset to defaults)"""
    if not update.url or not update.url.strip():
        return _error(400, "URL is required")

    config = replace_registry_config(update.to_config())
    return RegistryConfigUpdateResponse(
        message="Registry configuration updated",
        config=RegistryConfigResponse.from_config(config),
    )


@router.get("/repositories", response_model=List[str])
async def get_repositories():
    """List repositories from the registry catalog"""
    config = get_registry_config()
    try:
        return await list_repositories(config)
    except RegistryNotConfiguredError as e:
        return _error(400, e.message)
    except CatalogError as e:
        return _error(500, "Failed to get repositories", e.to_dict())


@router.get("/repositories/{name:path}/tags", response_model=RepositoryTagsResponse)
async def get_tags(name: str):
    """List a repository's tags, newest first"""
    config = get_registry_config()
    try:
        result = await get_repo_with_tags(config, name)
    except RegistryNotConfiguredError as e:
        return _error(400, e.message)
    except Exception as e:
        logger.error(f"Error fetching tags for {name}: {e}", exc_info=True)
        return _error(500, "Failed to fetch tags", str(e))

    return RepositoryTagsResponse.from_result(result)
