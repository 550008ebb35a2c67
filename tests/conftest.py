"""
Pytest configuration and shared fixtures for golta tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from golta.core.paths import GoltaPaths
from golta.core.platform import PlatformInfo


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory and point GOLTA_HOME at it."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("GOLTA_HOME", str(fake_home))
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("GOLTA_AUTO_INSTALL", raising=False)

    return fake_home


@pytest.fixture
def paths(isolated_home: Path) -> GoltaPaths:
    """Resolved golta layout inside the isolated home."""
    return GoltaPaths(home=isolated_home)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty project directory outside the golta home."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def linux_platform() -> PlatformInfo:
    """A fixed linux/amd64 host."""
    return PlatformInfo(os="linux", arch="amd64")


@pytest.fixture
def install_go(paths: GoltaPaths, linux_platform: PlatformInfo):
    """Factory creating a complete fake Go install; returns its binary path."""

    def _install(version: str) -> Path:
        binary = (
            paths.install_dir("go", version)
            / "go"
            / "bin"
            / linux_platform.executable("go")
        )
        binary.parent.mkdir(parents=True, exist_ok=True)
        binary.write_text("#!/bin/sh\n")
        return binary

    return _install


@pytest.fixture
def install_tool(paths: GoltaPaths, linux_platform: PlatformInfo):
    """Factory creating a complete fake auxiliary tool install."""

    def _install(tool: str, version: str) -> Path:
        binary = paths.install_dir(tool, version) / "bin" / linux_platform.executable(tool)
        binary.parent.mkdir(parents=True, exist_ok=True)
        binary.write_text("#!/bin/sh\n")
        return binary

    return _install


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset any module-level caches between tests."""
    from golta.core import platform

    platform.detect_platform.cache_clear()

    yield
