"""
Registry error taxonomy.

Transport-level failures (HTTP status, connection, timeout, bad body) are
raised by RegistryClient. The tag resolver wraps them into ManifestFetchError
or BlobFetchError, and the catalog lister classifies them into CatalogError
so the UI can show an actionable message.
"""

from enum import Enum
from typing import Dict, Optional


class CatalogErrorType(str, Enum):
    """User-facing categories for repository catalog failures."""
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    CATALOG_DISABLED = "CATALOG_DISABLED"
    FETCH_ERROR = "FETCH_ERROR"


class RegistryError(Exception):
    """Base class for all registry failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RegistryHTTPError(RegistryError):
    """Registry answered with a non-2xx status."""

    def __init__(self, status: int, reason: str = "", url: str = ""):
        super().__init__(f"Registry request failed: {status} {reason}".rstrip())
        self.status = status
        self.reason = reason
        self.url = url


class RegistryConnectionError(RegistryError):
    """Registry could not be reached at the network level."""

    def __init__(self, message: str, refused: bool = False):
        super().__init__(message)
        self.refused = refused


class RegistryTimeoutError(RegistryError):
    """Upstream call exceeded the configured per-call timeout."""
    pass


class RegistryResponseError(RegistryError):
    """Registry answered 2xx but the body was not what we expected."""
    pass


class RegistryNotConfiguredError(RegistryError):
    """No registry endpoint has been configured yet."""

    def __init__(self, message: str = "Registry URL is not configured"):
        super().__init__(message)


class ManifestFetchError(RegistryError):
    """Manifest for a tag or digest could not be fetched or decoded."""

    def __init__(self, repository: str, reference: str, cause: Optional[Exception] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to fetch manifest {repository}:{reference}{detail}")
        self.repository = repository
        self.reference = reference


class BlobFetchError(RegistryError):
    """Config blob could not be fetched or was not a JSON object."""

    def __init__(self, repository: str, digest: str, cause: Optional[Exception] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to fetch blob {repository}@{digest}{detail}")
        self.repository = repository
        self.digest = digest


class CatalogError(RegistryError):
    """Classified repository catalog failure."""

    def __init__(self, error_type: CatalogErrorType, message: str):
        super().__init__(message)
        self.error_type = error_type

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.error_type.value, "message": self.message}


def classify_catalog_error(error: Exception, endpoint: str) -> CatalogError:
    """
    Map a catalog failure onto a user-facing category.

    Args:
        error: Exception raised while probing or listing the catalog
        endpoint: Registry host[:port], used in the message

    Returns:
        CatalogError with CONNECTION_REFUSED, CATALOG_DISABLED or FETCH_ERROR
    """
    if isinstance(error, CatalogError):
        return error

    if isinstance(error, RegistryConnectionError) and error.refused:
        return CatalogError(
            CatalogErrorType.CONNECTION_REFUSED,
            f"Could not connect to registry at {endpoint}. Is it running?"
        )

    if isinstance(error, RegistryHTTPError) and error.status == 404:
        return CatalogError(
            CatalogErrorType.CATALOG_DISABLED,
            "Registry Connected. Repository listing is disabled/unsupported on this registry."
        )

    return CatalogError(CatalogErrorType.FETCH_ERROR, f"Failed to fetch: {error}")
