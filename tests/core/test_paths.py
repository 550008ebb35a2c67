"""
Unit tests for the golta directory layout.
"""

from pathlib import Path

import pytest

from golta.core.paths import (
    PIN_FILENAME,
    DirectoryError,
    GoltaPaths,
    get_pin_file,
    resolve_home,
)


class TestResolveHome:
    """Tests for resolve_home()."""

    def test_golta_home_override(self, tmp_path):
        """Test GOLTA_HOME takes precedence."""
        assert resolve_home({"GOLTA_HOME": str(tmp_path)}) == tmp_path

    def test_falls_back_to_user_home(self, monkeypatch, tmp_path):
        """Test the platform home directory is used without an override."""
        monkeypatch.setattr("os.name", "posix")
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert resolve_home({}) == tmp_path

    def test_windows_requires_userprofile(self, monkeypatch):
        """Test Windows without USERPROFILE is an error."""
        monkeypatch.setattr("os.name", "nt")

        with pytest.raises(DirectoryError, match="USERPROFILE"):
            resolve_home({})


class TestGoltaPaths:
    """Tests for the resolved layout."""

    def test_layout(self, tmp_path):
        """Test every directory lives under ~/.golta."""
        paths = GoltaPaths(tmp_path)
        root = tmp_path / ".golta"

        assert paths.root == root
        assert paths.versions_dir == root / "versions"
        assert paths.state_dir == root / "state"
        assert paths.cache_dir == root / "cache"
        assert paths.downloads_dir == root / "downloads"
        assert paths.lock_dir == root / "lock"
        assert paths.config_file == root / "config.yaml"

    def test_install_dir(self, tmp_path):
        """Test Go versions are top level and tools are namespaced."""
        paths = GoltaPaths(tmp_path)

        assert paths.install_dir("go", "1.22.3") == paths.versions_dir / "1.22.3"
        assert (
            paths.install_dir("gopls", "v0.15.3")
            == paths.versions_dir / "gopls" / "v0.15.3"
        )

    def test_default_file(self, tmp_path):
        """Test default files per tool."""
        paths = GoltaPaths(tmp_path)

        assert paths.default_file("go") == paths.state_dir / "default.txt"
        assert paths.default_file("dlv") == paths.state_dir / "dlv.default"

    def test_catalog_cache_file(self, tmp_path):
        """Test catalog cache files per tool."""
        paths = GoltaPaths(tmp_path)

        assert paths.catalog_cache_file("go").name == "remote_versions.json"
        assert paths.catalog_cache_file("air").name == "remote_versions_air.json"

    def test_from_environment(self, tmp_path):
        """Test construction from an environment mapping."""
        paths = GoltaPaths.from_environment({"GOLTA_HOME": str(tmp_path)})

        assert paths.home == tmp_path

    def test_get_pin_file(self, tmp_path):
        """Test pin file location."""
        assert get_pin_file(tmp_path) == tmp_path / PIN_FILENAME
        assert PIN_FILENAME == ".golta.json"
