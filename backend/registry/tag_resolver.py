"""
Tag Resolver

Turns a repository tag into a Tag record with its image creation time:

    tags/list → manifests/{tag} → (index? manifests/{first child}) → blobs/{config}

Manifest and blob failures propagate as ManifestFetchError / BlobFetchError so
callers can decide the fallback; resolve_tag() is the one entry point that
never raises and degrades to the EPOCH sentinel instead.
"""

import logging
from typing import Any, Dict, List, Optional

from registry.client import RegistryClient
from registry.errors import BlobFetchError, ManifestFetchError, RegistryError
from registry.manifests import (
    MANIFEST_ACCEPT,
    Manifest,
    ManifestIndex,
    SingleManifest,
    extract_created,
    parse_manifest,
)
from registry.types import EPOCH, Tag

logger = logging.getLogger(__name__)


class TagResolver:
    """Resolves tags of one registry through a shared RegistryClient."""

    def __init__(self, client: RegistryClient):
        self.client = client

    async def list_tags(self, repository: str) -> List[str]:
        """
        List tag names for a repository.

        Any failure returns an empty list: one unreadable repository must
        not break a larger catalog view.
        """
        try:
            data = await self.client.get_json(f"/v2/{repository}/tags/list")
        except RegistryError as e:
            logger.warning(f"Error fetching tags for {repository}: {e}")
            return []

        if not isinstance(data, dict):
            logger.warning(f"Unexpected tags/list body for {repository}: {type(data).__name__}")
            return []

        tags = data.get("tags") or []
        if not isinstance(tags, list):
            logger.warning(f"Unexpected tags field for {repository}: {type(tags).__name__}")
            return []
        return [str(tag) for tag in tags]

    async def resolve_manifest(self, repository: str, reference: str) -> Manifest:
        """
        Fetch and parse a manifest by tag or digest.

        Raises:
            ManifestFetchError: Transport, HTTP or decode failure
        """
        try:
            data = await self.client.get_json(
                f"/v2/{repository}/manifests/{reference}",
                headers={"Accept": MANIFEST_ACCEPT},
            )
            manifest = parse_manifest(data)
        except (RegistryError, ValueError) as e:
            raise ManifestFetchError(repository, reference, e) from e

        logger.debug(f"Fetched manifest {repository}:{reference} ({type(manifest).__name__}, mediaType={manifest.media_type})")
        return manifest

    async def resolve_config_digest(self, repository: str, manifest: Manifest) -> Optional[str]:
        """
        Get the config blob digest for a manifest.

        For an index the first listed platform is taken as representative;
        there is no architecture matching. Returns None when no config
        digest is available.

        Raises:
            ManifestFetchError: Child manifest of an index could not be fetched
        """
        if isinstance(manifest, ManifestIndex):
            child_digest = manifest.first_digest
            if not child_digest:
                logger.debug(f"Index for {repository} has no digest on its first entry")
                return None

            child = await self.resolve_manifest(repository, child_digest)
            if not isinstance(child, SingleManifest):
                logger.debug(f"Nested index at {repository}@{child_digest}, no config available")
                return None
            return child.config_digest

        return manifest.config_digest

    async def fetch_config_blob(self, repository: str, digest: str) -> Dict[str, Any]:
        """
        Fetch an image config blob.

        Raises:
            BlobFetchError: Transport/HTTP failure or the body is not a JSON object
        """
        try:
            config = await self.client.get_json(f"/v2/{repository}/blobs/{digest}")
        except RegistryError as e:
            raise BlobFetchError(repository, digest, e) from e

        if not isinstance(config, dict):
            raise BlobFetchError(
                repository, digest,
                ValueError(f"config is {type(config).__name__}, expected object")
            )
        return config

    async def resolve_tag(self, repository: str, tag: str) -> Tag:
        """
        Resolve a tag to a Tag record with its creation time.

        Never raises: any failure along the chain yields EPOCH.
        """
        try:
            manifest = await self.resolve_manifest(repository, tag)

            config_digest = await self.resolve_config_digest(repository, manifest)
            if not config_digest:
                return Tag(name=tag, created=EPOCH)

            config = await self.fetch_config_blob(repository, config_digest)
            return Tag(name=tag, created=extract_created(config))

        except Exception as e:
            logger.error(f"Failed to fetch metadata for {repository}:{tag}: {e}")
            return Tag(name=tag, created=EPOCH)
