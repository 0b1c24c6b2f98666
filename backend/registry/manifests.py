"""
Manifest parsing and image creation-time extraction.

A manifest fetched from /v2/{repo}/manifests/{ref} is either a
single-platform image manifest (carrying a config descriptor) or a
multi-platform index / manifest list (carrying child manifest descriptors).
The variant is decided once here, by the presence of a non-empty
``manifests`` array. ``mediaType`` is kept only as a hint for logging:
registries are inconsistent about setting it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

import dateutil.parser

from registry.types import EPOCH

logger = logging.getLogger(__name__)

DOCKER_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
DOCKER_MANIFEST_LIST = "application/vnd.docker.distribution.manifest.list.v2+json"
OCI_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
OCI_INDEX = "application/vnd.oci.image.index.v1+json"

# Preference order matters: single-platform manifests first, then indexes
MANIFEST_ACCEPT = ", ".join([
    DOCKER_MANIFEST_V2,
    OCI_MANIFEST,
    OCI_INDEX,
    DOCKER_MANIFEST_LIST,
])


@dataclass(frozen=True)
class SingleManifest:
    """Image manifest for one platform."""
    config_digest: Optional[str]
    media_type: Optional[str] = None


@dataclass(frozen=True)
class ManifestIndex:
    """Multi-platform index or manifest list; children in listed order."""
    child_digests: Tuple[str, ...]
    media_type: Optional[str] = None

    @property
    def first_digest(self) -> Optional[str]:
        return self.child_digests[0] if self.child_digests else None


Manifest = Union[SingleManifest, ManifestIndex]


def parse_manifest(data: Dict[str, Any]) -> Manifest:
    """
    Decide the manifest variant from its JSON body.

    Args:
        data: Decoded manifest JSON

    Returns:
        ManifestIndex if ``manifests`` is a non-empty list, else SingleManifest

    Raises:
        ValueError: If the body is not a JSON object
    """
    if not isinstance(data, dict):
        raise ValueError(f"Manifest is not a JSON object: {type(data).__name__}")

    media_type = data.get("mediaType")
    children = data.get("manifests")

    if isinstance(children, list) and children:
        # Entries without a digest are kept as empty strings so that
        # "first entry" still means the first listed platform
        digests = tuple(
            (entry.get("digest") or "") if isinstance(entry, dict) else ""
            for entry in children
        )
        return ManifestIndex(child_digests=digests, media_type=media_type)

    config = data.get("config")
    config_digest = config.get("digest") if isinstance(config, dict) else None
    return SingleManifest(config_digest=config_digest or None, media_type=media_type)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp from an image config.

    Go tooling writes RFC 3339 with nanoseconds and trims trailing zeros, so
    fractions of any length appear; they are truncated to microseconds.

    Examples:
        "2024-01-01T00:00:00Z" → 2024-01-01 00:00:00+00:00
        "2024-01-15T10:20:30.5Z" → 2024-01-15 10:20:30.500000+00:00
        "2023-05-02T10:11:12.123456789Z" → 2023-05-02 10:11:12.123456+00:00
        "not a date" → None
    """
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = dateutil.parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        logger.debug(f"Unparseable timestamp in image config: {value!r}")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def extract_created(config: Dict[str, Any]) -> datetime:
    """
    Extract the image creation time from a config blob.

    Precedence:
    1. top-level ``created``
    2. first ``history`` entry (oldest first) with a ``created`` value
    3. EPOCH sentinel when neither is available

    Unparseable values are skipped as if absent.
    """
    if not isinstance(config, dict):
        return EPOCH

    created = parse_timestamp(config.get("created"))
    if created is not None:
        return created

    history = config.get("history")
    if isinstance(history, list):
        for entry in history:
            if not isinstance(entry, dict):
                continue
            created = parse_timestamp(entry.get("created"))
            if created is not None:
                return created

    return EPOCH
