"""
Shared pytest fixtures for K3s Suite tests.

Fixtures provided:
- registry_config: RegistryConfig pointing at a fake endpoint
- fake_registry: Factory for scripted in-memory registry clients
- reset_registry_store: Clears the process-wide registry config around a test

Note: Nothing here opens sockets. FakeRegistryClient answers registry paths
from a dict, and records every call so tests can assert on fan-out.
"""

import asyncio
import hashlib
import json
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from registry.errors import RegistryHTTPError
from registry.types import RegistryConfig


def digest_of(payload: Any) -> str:
    """Content digest the way a registry would compute it"""
    return "sha256:" + hashlib.sha256(json.dumps(payload, sort_keys=True).encode()).hexdigest()


class FakeRegistryClient:
    """
    Stand-in for RegistryClient.

    routes maps an API path (e.g. "/v2/demo/app/tags/list") to either a JSON
    value to return or an exception instance to raise. Unknown paths raise
    RegistryHTTPError(404).
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None, delay: float = 0.0):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.delay = delay
        self.base_url = "http://registry.test:5000"
        self.calls: List[Tuple[str, Dict[str, str]]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.entered = 0
        self.exited = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.exited += 1
        return False

    async def request(self, path: str, headers: Optional[Dict[str, str]] = None):
        self.calls.append((path, dict(headers or {})))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Yield to the event loop so concurrent callers actually overlap
            await asyncio.sleep(self.delay)
            outcome = self.routes.get(path)
            if outcome is None:
                raise RegistryHTTPError(404, "Not Found", path)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1

    async def get_json(self, path: str, headers: Optional[Dict[str, str]] = None):
        return await self.request(path, headers=headers)

    # ---- scripting helpers ----

    def paths_called(self) -> List[str]:
        return [path for path, _ in self.calls]

    def set_tags(self, repo: str, tags: List[str]):
        self.routes[f"/v2/{repo}/tags/list"] = {"name": repo, "tags": tags}

    def add_image(self, repo: str, tag: str, config: Dict[str, Any]) -> str:
        """Register a single-platform manifest for tag whose config blob is `config`"""
        config_digest = digest_of(config)
        manifest = {
            "schemaVersion": 2,
            "mediaType": "application/vnd.oci.image.manifest.v1+json",
            "config": {
                "mediaType": "application/vnd.oci.image.config.v1+json",
                "digest": config_digest,
                "size": 1234,
            },
            "layers": [],
        }
        self.routes[f"/v2/{repo}/manifests/{tag}"] = manifest
        self.routes[f"/v2/{repo}/blobs/{config_digest}"] = config
        return config_digest

    def add_index(self, repo: str, tag: str, platform_configs: List[Dict[str, Any]]) -> List[str]:
        """
        Register a multi-platform index for tag.

        Each entry of platform_configs becomes one child manifest with its own
        config blob. Returns the child manifest digests in listed order.
        """
        children = []
        child_digests = []
        for i, config in enumerate(platform_configs):
            config_digest = digest_of(config)
            child_manifest = {
                "schemaVersion": 2,
                "mediaType": "application/vnd.oci.image.manifest.v1+json",
                "config": {"digest": config_digest},
                "layers": [],
            }
            child_digest = digest_of({"child": i, "tag": tag, "manifest": child_manifest})
            self.routes[f"/v2/{repo}/manifests/{child_digest}"] = child_manifest
            self.routes[f"/v2/{repo}/blobs/{config_digest}"] = config
            children.append({
                "mediaType": "application/vnd.oci.image.manifest.v1+json",
                "digest": child_digest,
                "platform": {"architecture": ["amd64", "arm64", "s390x"][i % 3], "os": "linux"},
            })
            child_digests.append(child_digest)

        self.routes[f"/v2/{repo}/manifests/{tag}"] = {
            "schemaVersion": 2,
            "mediaType": "application/vnd.oci.image.index.v1+json",
            "manifests": children,
        }
        return child_digests


@pytest.fixture
def registry_config():
    """Insecure registry with Basic auth credentials"""
    return RegistryConfig(
        endpoint="registry.test:5000",
        username="admin",
        password="s3cret",
        secure_transport=False,
    )


@pytest.fixture
def fake_registry():
    """Factory for FakeRegistryClient instances"""
    def _make(routes: Optional[Dict[str, Any]] = None, delay: float = 0.0) -> FakeRegistryClient:
        return FakeRegistryClient(routes=routes, delay=delay)
    return _make


@pytest.fixture
def reset_registry_store():
    """Start and end each test with no active registry config"""
    from registry.config_store import reset_registry_config

    reset_registry_config()
    yield
    reset_registry_config()
