"""
Registry Models for K3s Suite API
Pydantic models for registry configuration and tag listing endpoints
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from registry.types import RegistryConfig, RepositoryTags


REGISTRY_TYPES = {'generic', 'harbor'}


class RegistryConfigUpdate(BaseModel):
    """
    Request model for POST /api/config/registry.

    Every field is optional at the schema level so that a missing URL can be
    answered with 400 rather than a validation error. The update is a full
    replace: omitted fields fall back to defaults, not to previous values.
    """
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = Field(None, max_length=500)
    username: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, max_length=1000)
    is_secure: Optional[bool] = Field(None, alias='isSecure')
    timezone: Optional[str] = Field(None, max_length=64)
    type: Optional[str] = None

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: Optional[str]) -> Optional[str]:
        """Validate registry type"""
        if v is None or v == '':
            return None
        if v not in REGISTRY_TYPES:
            raise ValueError(f'Invalid registry type. Must be one of: {sorted(REGISTRY_TYPES)}')
        return v

    def to_config(self) -> RegistryConfig:
        """Build the replacement RegistryConfig, applying defaults for absent fields"""
        return RegistryConfig(
            endpoint=(self.url or '').strip(),
            username=self.username or '',
            password=self.password or '',
            secure_transport=bool(self.is_secure) if self.is_secure is not None else False,
            timezone=self.timezone or 'UTC',
            registry_type=self.type or 'generic',
        )


class RegistryConfigResponse(BaseModel):
    """
    Registry configuration as shown to the UI.

    The password is returned so the settings form can be edited and posted
    back as a whole; an update is a full replace and would otherwise drop it.
    """
    model_config = ConfigDict(populate_by_name=True)

    url: str
    username: str
    password: str
    is_secure: bool = Field(..., alias='isSecure')
    timezone: str
    type: str
    has_password: bool = Field(..., alias='hasPassword')

    @classmethod
    def from_config(cls, config: RegistryConfig) -> 'RegistryConfigResponse':
        return cls(
            url=config.endpoint,
            username=config.username,
            password=config.password,
            is_secure=config.secure_transport,
            timezone=config.timezone,
            type=config.registry_type,
            has_password=bool(config.password),
        )


class RegistryConfigUpdateResponse(BaseModel):
    message: str
    config: RegistryConfigResponse


class TagResponse(BaseModel):
    """A tag with its image creation time (1970-01-01T00:00:00Z when unknown)"""
    name: str
    created: datetime


class RepositoryTagsResponse(BaseModel):
    """Response for GET /api/repositories/{name}/tags"""
    name: str
    tags: List[TagResponse]

    @classmethod
    def from_result(cls, result: RepositoryTags) -> 'RepositoryTagsResponse':
        return cls(
            name=result.name,
            tags=[TagResponse(name=tag.name, created=tag.created) for tag in result.tags],
        )
