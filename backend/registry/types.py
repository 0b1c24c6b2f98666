"""
Shared types for the registry client, tag resolver and aggregation service.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List


# Sentinel for "creation time unknown"; sorts last when ordering newest first
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class RegistryConfig:
    """
    Connection settings for the one registry the dashboard talks to.

    Frozen so that a request that captured a config keeps a consistent view
    even if the operator replaces the active config mid-flight.
    """
    endpoint: str  # host[:port], optionally with scheme
    username: str = ""
    password: str = ""
    secure_transport: bool = False
    timezone: str = "UTC"  # display only
    registry_type: str = "generic"  # 'generic' or 'harbor'

    @property
    def has_credentials(self) -> bool:
        """True when Basic auth should be sent."""
        return bool(self.username) and bool(self.password)

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.endpoint.strip())


@dataclass
class Tag:
    """A repository tag and its image creation time (EPOCH when unknown)."""
    name: str
    created: datetime = EPOCH


@dataclass
class RepositoryTags:
    """A repository with its tags sorted newest first."""
    name: str
    tags: List[Tag] = field(default_factory=list)
