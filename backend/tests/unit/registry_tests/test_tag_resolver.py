"""
Unit tests for TagResolver.

Tests verify:
- Tag listing degrades to [] on any failure
- Manifest fetch sends the four-type Accept header and wraps failures
- Index resolution follows the FIRST child only
- Blob fetch failures and non-object blobs raise BlobFetchError
- resolve_tag never raises and falls back to EPOCH
"""

from datetime import datetime, timezone

import pytest

from registry.errors import (
    BlobFetchError,
    ManifestFetchError,
    RegistryConnectionError,
    RegistryHTTPError,
    RegistryResponseError,
    RegistryTimeoutError,
)
from registry.manifests import MANIFEST_ACCEPT, ManifestIndex, SingleManifest
from registry.tag_resolver import TagResolver
from registry.types import EPOCH, Tag


REPO = "team/app"


class TestListTags:
    """Test tag listing"""

    @pytest.mark.asyncio
    async def test_returns_tags(self, fake_registry):
        client = fake_registry()
        client.set_tags(REPO, ["latest", "v1"])

        tags = await TagResolver(client).list_tags(REPO)

        assert tags == ["latest", "v1"]
        assert client.paths_called() == [f"/v2/{REPO}/tags/list"]

    @pytest.mark.asyncio
    async def test_null_tags_field_is_empty(self, fake_registry):
        """Registries return tags: null for a repository with every tag deleted"""
        client = fake_registry({f"/v2/{REPO}/tags/list": {"name": REPO, "tags": None}})

        assert await TagResolver(client).list_tags(REPO) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failure", [
        RegistryHTTPError(404, "Not Found"),
        RegistryHTTPError(401, "Unauthorized"),
        RegistryConnectionError("unreachable", refused=True),
        RegistryTimeoutError("slow"),
        RegistryResponseError("bad json"),
    ])
    async def test_failures_become_empty_list(self, fake_registry, failure):
        client = fake_registry({f"/v2/{REPO}/tags/list": failure})

        assert await TagResolver(client).list_tags(REPO) == []

    @pytest.mark.asyncio
    async def test_unexpected_body_is_empty(self, fake_registry):
        client = fake_registry({f"/v2/{REPO}/tags/list": ["v1", "v2"]})

        assert await TagResolver(client).list_tags(REPO) == []


class TestResolveManifest:
    """Test manifest fetching"""

    @pytest.mark.asyncio
    async def test_sends_accept_header(self, fake_registry):
        client = fake_registry()
        client.add_image(REPO, "v1", {"created": "2024-01-01T00:00:00Z"})

        manifest = await TagResolver(client).resolve_manifest(REPO, "v1")

        assert isinstance(manifest, SingleManifest)
        path, headers = client.calls[0]
        assert path == f"/v2/{REPO}/manifests/v1"
        assert headers["Accept"] == MANIFEST_ACCEPT

    @pytest.mark.asyncio
    async def test_http_failure_raises_manifest_fetch_error(self, fake_registry):
        client = fake_registry({f"/v2/{REPO}/manifests/v1": RegistryHTTPError(500, "Internal Server Error")})

        with pytest.raises(ManifestFetchError) as exc_info:
            await TagResolver(client).resolve_manifest(REPO, "v1")

        assert exc_info.value.reference == "v1"
        assert isinstance(exc_info.value.__cause__, RegistryHTTPError)

    @pytest.mark.asyncio
    async def test_non_object_manifest_raises_manifest_fetch_error(self, fake_registry):
        client = fake_registry({f"/v2/{REPO}/manifests/v1": "plain text"})

        with pytest.raises(ManifestFetchError):
            await TagResolver(client).resolve_manifest(REPO, "v1")


class TestResolveConfigDigest:
    """Test config digest resolution through indexes"""

    @pytest.mark.asyncio
    async def test_single_manifest_digest_returned_directly(self, fake_registry):
        client = fake_registry()
        resolver = TagResolver(client)

        digest = await resolver.resolve_config_digest(REPO, SingleManifest(config_digest="sha256:cfg"))

        assert digest == "sha256:cfg"
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_index_uses_first_child_only(self, fake_registry):
        client = fake_registry()
        first_config = {"created": "2024-01-01T00:00:00Z", "architecture": "amd64"}
        second_config = {"created": "2025-01-01T00:00:00Z", "architecture": "arm64"}
        child_digests = client.add_index(REPO, "multi", [first_config, second_config])
        resolver = TagResolver(client)

        index = await resolver.resolve_manifest(REPO, "multi")
        digest = await resolver.resolve_config_digest(REPO, index)

        first_child = client.routes[f"/v2/{REPO}/manifests/{child_digests[0]}"]
        assert isinstance(index, ManifestIndex)
        assert digest == first_child["config"]["digest"]
        assert f"/v2/{REPO}/manifests/{child_digests[1]}" not in client.paths_called()

    @pytest.mark.asyncio
    async def test_nested_index_has_no_config(self, fake_registry):
        client = fake_registry({
            f"/v2/{REPO}/manifests/sha256:child": {"manifests": [{"digest": "sha256:grandchild"}]},
        })

        digest = await TagResolver(client).resolve_config_digest(
            REPO, ManifestIndex(child_digests=("sha256:child",))
        )

        assert digest is None

    @pytest.mark.asyncio
    async def test_index_child_failure_propagates(self, fake_registry):
        client = fake_registry()  # child manifest path unknown → 404

        with pytest.raises(ManifestFetchError):
            await TagResolver(client).resolve_config_digest(
                REPO, ManifestIndex(child_digests=("sha256:missing",))
            )


class TestFetchConfigBlob:
    """Test config blob fetching"""

    @pytest.mark.asyncio
    async def test_returns_config(self, fake_registry):
        client = fake_registry({f"/v2/{REPO}/blobs/sha256:cfg": {"created": "2024-01-01T00:00:00Z"}})

        config = await TagResolver(client).fetch_config_blob(REPO, "sha256:cfg")

        assert config == {"created": "2024-01-01T00:00:00Z"}

    @pytest.mark.asyncio
    async def test_missing_blob_raises(self, fake_registry):
        client = fake_registry()

        with pytest.raises(BlobFetchError) as exc_info:
            await TagResolver(client).fetch_config_blob(REPO, "sha256:gone")

        assert exc_info.value.digest == "sha256:gone"

    @pytest.mark.asyncio
    async def test_non_object_blob_raises(self, fake_registry):
        client = fake_registry({f"/v2/{REPO}/blobs/sha256:cfg": [1, 2, 3]})

        with pytest.raises(BlobFetchError):
            await TagResolver(client).fetch_config_blob(REPO, "sha256:cfg")


class TestResolveTag:
    """Test the full per-tag chain"""

    @pytest.mark.asyncio
    async def test_single_platform_image(self, fake_registry):
        client = fake_registry()
        client.add_image(REPO, "v1", {"created": "2024-01-01T00:00:00Z"})

        tag = await TagResolver(client).resolve_tag(REPO, "v1")

        assert tag == Tag(name="v1", created=datetime(2024, 1, 1, tzinfo=timezone.utc))

    @pytest.mark.asyncio
    async def test_multi_platform_image_uses_first_platform(self, fake_registry):
        client = fake_registry()
        client.add_index(REPO, "v2", [
            {"created": "2024-02-01T00:00:00Z"},
            {"created": "2030-01-01T00:00:00Z"},
        ])

        tag = await TagResolver(client).resolve_tag(REPO, "v2")

        assert tag.created == datetime(2024, 2, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_manifest_without_config_is_epoch(self, fake_registry):
        client = fake_registry({f"/v2/{REPO}/manifests/v1": {"schemaVersion": 2, "layers": []}})

        tag = await TagResolver(client).resolve_tag(REPO, "v1")

        assert tag == Tag(name="v1", created=EPOCH)
        assert client.paths_called() == [f"/v2/{REPO}/manifests/v1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("broken_path,failure", [
        ("manifest", RegistryHTTPError(404, "Not Found")),
        ("manifest", RegistryTimeoutError("slow")),
        ("blob", RegistryHTTPError(500, "Internal Server Error")),
        ("blob", RegistryResponseError("not json")),
    ])
    async def test_failures_degrade_to_epoch(self, fake_registry, broken_path, failure):
        client = fake_registry()
        config_digest = client.add_image(REPO, "v1", {"created": "2024-01-01T00:00:00Z"})
        if broken_path == "manifest":
            client.routes[f"/v2/{REPO}/manifests/v1"] = failure
        else:
            client.routes[f"/v2/{REPO}/blobs/{config_digest}"] = failure

        tag = await TagResolver(client).resolve_tag(REPO, "v1")

        assert tag == Tag(name="v1", created=EPOCH)
