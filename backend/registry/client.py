"""
Registry Transport

Authenticated GET requests against an OCI / Docker Distribution v2 endpoint.

Each RegistryClient carries its own TLS verification policy and passes it on
every request, so an insecure registry config only ever affects the calls
made through that client. Nothing here touches process-wide SSL state.
"""

import asyncio
import base64
import errno
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from config.settings import AppConfig
from registry.errors import (
    RegistryConnectionError,
    RegistryHTTPError,
    RegistryResponseError,
    RegistryTimeoutError,
)
from registry.types import RegistryConfig

logger = logging.getLogger(__name__)

USER_AGENT = "k3s-suite/1.0"


@dataclass
class RegistryResponse:
    """Body of a successful registry response and the URL it came from."""
    url: str
    body: bytes

    def json(self) -> Any:
        """
        Decode the body as JSON.

        Config blobs are served as application/octet-stream, so the
        content type is deliberately not checked.
        """
        try:
            return json.loads(self.body)
        except (ValueError, UnicodeDecodeError) as e:
            raise RegistryResponseError(f"Invalid JSON from {self.url}: {e}") from e


def _is_connection_refused(error: aiohttp.ClientConnectorError) -> bool:
    os_error = getattr(error, "os_error", None)
    if isinstance(os_error, ConnectionRefusedError):
        return True
    return getattr(os_error, "errno", None) == errno.ECONNREFUSED


class RegistryClient:
    """
    HTTP client for the Registry v2 API bound to one RegistryConfig.

    Usage:
        async with RegistryClient(config) as client:
            data = await client.get_json("/v2/_catalog")

    The aiohttp session lives for the duration of the ``async with`` block,
    which is one dashboard request.
    """

    def __init__(
        self,
        config: RegistryConfig,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config
        self.timeout = timeout if timeout is not None else AppConfig.REGISTRY_TIMEOUT
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": USER_AGENT},
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    @property
    def base_url(self) -> str:
        """
        Registry base URL.

        Examples:
            ("localhost:5000", secure=False) → "http://localhost:5000"
            ("registry.example.com", secure=True) → "https://registry.example.com"
            ("https://host:443/", secure=False) → "https://host:443"
        """
        endpoint = self.config.endpoint.strip().rstrip("/")
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        scheme = "https" if self.config.secure_transport else "http"
        return f"{scheme}://{endpoint}"

    def _request_kwargs(self) -> Dict[str, Any]:
        """Per-request options carrying this client's TLS policy and timeout."""
        kwargs: Dict[str, Any] = {
            "timeout": aiohttp.ClientTimeout(total=self.timeout),
        }
        if not self.config.secure_transport:
            # Self-signed local registries; scoped to this request only
            kwargs["ssl"] = False
        return kwargs

    def _build_headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        merged = dict(headers or {})
        if self.config.has_credentials:
            credentials = f"{self.config.username}:{self.config.password}"
            encoded = base64.b64encode(credentials.encode()).decode()
            merged["Authorization"] = f"Basic {encoded}"
        return merged

    async def request(self, path: str, headers: Optional[Dict[str, str]] = None) -> RegistryResponse:
        """
        GET a registry path.

        Args:
            path: API path starting with /v2/
            headers: Extra request headers (e.g. Accept)

        Returns:
            RegistryResponse for a 2xx answer

        Raises:
            RegistryHTTPError: Non-2xx status
            RegistryConnectionError: Host unreachable / connection refused
            RegistryTimeoutError: Call exceeded the per-call timeout
        """
        if self._session is None:
            raise RuntimeError("RegistryClient must be used as an async context manager")

        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url}")

        try:
            async with self._session.get(
                url,
                headers=self._build_headers(headers),
                **self._request_kwargs()
            ) as response:
                if response.status < 200 or response.status >= 300:
                    raise RegistryHTTPError(response.status, response.reason or "", url)
                body = await response.read()
                return RegistryResponse(url=url, body=body)
        except asyncio.TimeoutError as e:
            raise RegistryTimeoutError(f"Timeout after {self.timeout}s fetching {url}") from e
        except aiohttp.ClientConnectorError as e:
            raise RegistryConnectionError(
                f"Could not connect to {self.base_url}: {e}",
                refused=_is_connection_refused(e),
            ) from e
        except aiohttp.ClientError as e:
            raise RegistryConnectionError(f"Error fetching {url}: {e}") from e

    async def get_json(self, path: str, headers: Optional[Dict[str, str]] = None) -> Any:
        """GET a registry path and decode the body as JSON."""
        response = await self.request(path, headers=headers)
        return response.json()
