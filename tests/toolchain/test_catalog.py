"""
Unit tests for remote catalogs, the catalog cache and version matching.
"""

import json

import pytest
import responses

from golta.core.config import GoltaConfig
from golta.core.exceptions import (
    FetchError,
    NoStableVersionError,
    VersionNotFoundError,
)
from golta.toolchain.catalog import (
    CatalogCache,
    GoReleaseFetcher,
    ProxyVersionFetcher,
    RemoteCatalog,
    RemoteVersionInfo,
    catalog_for_tool,
    escape_module_path,
    match_version,
    resolve_latest_module_version,
)
from tests.mocks import FakeFetcher, catalog

INDEX_URL = "https://go.dev/dl/?mode=json&include=all"
PROXY_URL = "https://proxy.golang.org"

GO_CATALOG = catalog(
    ("go1.23rc1", False),
    ("go1.22.3", True),
    ("go1.22.2", True),
    ("go1.21.10", True),
    ("go1.21.9", True),
    ("go1.20.14", True),
)


# ============================================================================
# Fetchers
# ============================================================================


class TestGoReleaseFetcher:
    """Tests for the Go download index fetcher."""

    @responses.activate
    def test_fetch(self):
        """Test entries are read from the JSON index, extra fields ignored."""
        responses.add(
            responses.GET,
            INDEX_URL,
            json=[
                {"version": "go1.22.3", "stable": True, "files": []},
                {"version": "go1.23rc1", "stable": False, "files": []},
            ],
        )

        versions = GoReleaseFetcher(INDEX_URL).fetch()

        assert versions == catalog(("go1.22.3", True), ("go1.23rc1", False))

    @responses.activate
    def test_http_error(self):
        """Test HTTP failures become FetchError."""
        responses.add(responses.GET, INDEX_URL, status=503)

        with pytest.raises(FetchError, match="Failed to fetch"):
            GoReleaseFetcher(INDEX_URL).fetch()

    @responses.activate
    def test_invalid_payload(self):
        """Test malformed JSON becomes FetchError."""
        responses.add(responses.GET, INDEX_URL, json={"version": "go1.22.3"})

        with pytest.raises(FetchError, match="Invalid release index"):
            GoReleaseFetcher(INDEX_URL).fetch()


class TestModuleProxy:
    """Tests for module proxy lookups."""

    def test_escape_module_path(self):
        """Test uppercase letters are escaped."""
        assert escape_module_path("github.com/BurntSushi/toml") == (
            "github.com/!burnt!sushi/toml"
        )
        assert escape_module_path("golang.org/x/tools/gopls") == (
            "golang.org/x/tools/gopls"
        )

    @responses.activate
    def test_list_newest_first(self):
        """Test the proxy list is reversed and blank lines dropped."""
        responses.add(
            responses.GET,
            f"{PROXY_URL}/golang.org/x/tools/gopls/@v/list",
            body="v0.15.2\nv0.15.3\nv0.16.0-pre.1\n\n",
        )
        fetcher = ProxyVersionFetcher("golang.org/x/tools/gopls", PROXY_URL + "/")

        versions = fetcher.fetch()

        assert [v.version for v in versions] == ["v0.16.0-pre.1", "v0.15.3", "v0.15.2"]
        assert all(v.stable for v in versions[1:])

    @responses.activate
    def test_rc_marked_unstable(self):
        """Test rc/beta/alpha versions are unstable."""
        responses.add(
            responses.GET,
            f"{PROXY_URL}/github.com/go-delve/delve/@v/list",
            body="v1.22.0\nv1.23.0-rc.1\n",
        )

        versions = ProxyVersionFetcher("github.com/go-delve/delve", PROXY_URL).fetch()

        assert versions[0] == RemoteVersionInfo("v1.23.0-rc.1", False)

    @responses.activate
    def test_resolve_latest(self):
        """Test @latest returns the reported Version."""
        responses.add(
            responses.GET,
            f"{PROXY_URL}/github.com/air-verse/air/@latest",
            json={"Version": "v1.52.0", "Time": "2024-05-01T00:00:00Z"},
        )

        assert (
            resolve_latest_module_version("github.com/air-verse/air", PROXY_URL)
            == "v1.52.0"
        )

    @responses.activate
    def test_resolve_latest_without_version(self):
        """Test a response without Version is an error."""
        responses.add(
            responses.GET,
            f"{PROXY_URL}/github.com/air-verse/air/@latest",
            json={},
        )

        with pytest.raises(FetchError, match="No version reported"):
            resolve_latest_module_version("github.com/air-verse/air", PROXY_URL)


# ============================================================================
# Cache
# ============================================================================


class TestCatalogCache:
    """Tests for CatalogCache."""

    def test_round_trip(self, tmp_path):
        """Test write then read."""
        cache = CatalogCache(tmp_path / "cache" / "remote_versions.json")
        cache.write(GO_CATALOG)

        assert cache.read() == GO_CATALOG

    def test_missing(self, tmp_path):
        """Test a missing cache reads as None."""
        assert CatalogCache(tmp_path / "none.json").read() is None

    def test_corrupt_cache_ignored(self, tmp_path, caplog):
        """Test a corrupt cache is a warning, not an error."""
        cache_file = tmp_path / "remote_versions.json"
        cache_file.write_text('[{"version": 1}]')

        assert CatalogCache(cache_file).read() is None
        assert "Ignoring unreadable catalog cache" in caplog.text


class TestRemoteCatalog:
    """Tests for the cache policy of RemoteCatalog."""

    def _catalog(self, tmp_path, fetcher):
        cache = CatalogCache(tmp_path / "remote_versions.json")
        return RemoteCatalog("go", fetcher, cache), cache

    def test_fresh_fetch_written_to_cache(self, tmp_path):
        """Test a new catalog replaces the cache."""
        remote, cache = self._catalog(tmp_path, FakeFetcher(GO_CATALOG))

        result = remote.fetch()

        assert result.versions == GO_CATALOG
        assert not result.from_cache
        assert result.warning is None
        assert cache.read() == GO_CATALOG

    def test_unchanged_head_reuses_cache(self, tmp_path):
        """Test the cached copy is returned when the newest entry is unchanged."""
        remote, cache = self._catalog(tmp_path, FakeFetcher(GO_CATALOG[:2]))
        cache.write(GO_CATALOG)
        mtime = cache.cache_file.stat().st_mtime_ns

        result = remote.fetch()

        assert result.from_cache
        assert not result.stale
        assert result.versions == GO_CATALOG
        assert cache.cache_file.stat().st_mtime_ns == mtime

    def test_changed_head_rewrites_cache(self, tmp_path):
        """Test a new newest entry replaces the cache."""
        newer = catalog(("go1.23.0", True)) + GO_CATALOG
        remote, cache = self._catalog(tmp_path, FakeFetcher(newer))
        cache.write(GO_CATALOG)

        result = remote.fetch()

        assert not result.from_cache
        assert cache.read() == newer

    def test_fetch_failure_serves_cache(self, tmp_path):
        """Test offline mode returns the cache with a warning."""
        remote, cache = self._catalog(tmp_path, FakeFetcher(error="network down"))
        cache.write(GO_CATALOG)

        result = remote.fetch()

        assert result.stale
        assert result.versions == GO_CATALOG
        assert result.warning == (
            "Failed to fetch latest go versions (network down). "
            "Showing cached results."
        )

    def test_fetch_failure_without_cache(self, tmp_path):
        """Test offline with no cache propagates the error."""
        remote, _ = self._catalog(tmp_path, FakeFetcher(error="network down"))

        with pytest.raises(FetchError, match="network down"):
            remote.fetch()

    def test_cache_write_failure_is_warning(self, tmp_path, caplog):
        """Test an unwritable cache does not fail the fetch."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        remote = RemoteCatalog(
            "go",
            FakeFetcher(GO_CATALOG),
            CatalogCache(blocker / "remote_versions.json"),
        )

        result = remote.fetch()

        assert result.versions == GO_CATALOG
        assert "Could not update catalog cache" in caplog.text

    def test_catalog_for_tool(self, paths):
        """Test fetcher selection by tool."""
        config = GoltaConfig()

        go_catalog = catalog_for_tool("go", paths, config)
        gopls_catalog = catalog_for_tool("gopls", paths, config)

        assert isinstance(go_catalog.fetcher, GoReleaseFetcher)
        assert isinstance(gopls_catalog.fetcher, ProxyVersionFetcher)
        assert gopls_catalog.cache.cache_file == paths.catalog_cache_file("gopls")


# ============================================================================
# Version Matching
# ============================================================================


class TestMatchVersion:
    """Tests for match_version()."""

    def test_latest_skips_unstable(self):
        """Test latest is the first stable entry."""
        assert match_version("latest", GO_CATALOG, "go") == "1.22.3"

    def test_latest_without_stable(self):
        """Test latest with only pre-releases."""
        with pytest.raises(NoStableVersionError):
            match_version("latest", catalog(("go1.23rc1", False)), "go")

    @pytest.mark.parametrize("spec", ["1.21.9", "go1.21.9", " go1.21.9 "])
    def test_exact(self, spec):
        """Test exact specs with and without prefix."""
        assert match_version(spec, GO_CATALOG, "go") == "1.21.9"

    def test_exact_unstable(self):
        """Test exact specs may name pre-releases."""
        assert match_version("1.23rc1", GO_CATALOG, "go") == "1.23rc1"

    def test_partial_requires_opt_in(self):
        """Test partial specs are rejected by default."""
        with pytest.raises(VersionNotFoundError, match="'1.21' not found"):
            match_version("1.21", GO_CATALOG, "go")

    def test_partial_picks_highest(self):
        """Test partial specs pick the highest stable patch."""
        assert match_version("1.21", GO_CATALOG, "go", allow_partial=True) == "1.21.10"
        assert match_version("1", GO_CATALOG, "go", allow_partial=True) == "1.22.3"

    def test_partial_ignores_full_versions(self):
        """Test a missing three-part version is not matched partially."""
        with pytest.raises(VersionNotFoundError):
            match_version("1.21.11", GO_CATALOG, "go", allow_partial=True)

    def test_auxiliary_tool(self):
        """Test auxiliary versions keep their v prefix."""
        versions = catalog(("v0.16.0", True), ("v0.15.3", True))

        assert match_version("latest", versions, "gopls") == "v0.16.0"
        assert match_version("v0.15.3", versions, "gopls") == "v0.15.3"

    def test_not_found(self):
        """Test unknown versions."""
        with pytest.raises(VersionNotFoundError, match="golta list-remote go"):
            match_version("1.99.0", GO_CATALOG, "go")
