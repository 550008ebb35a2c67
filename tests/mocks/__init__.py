"""
Mock implementations for testing golta components.

This package provides in-memory implementations of the golta capability
interfaces to enable isolated, deterministic testing.
"""

from .fakes import (
    InMemoryFileReader,
    FakeFetcher,
    FakeLauncher,
    catalog,
    make_go_tar_gz,
    make_go_zip,
)

__all__ = [
    "InMemoryFileReader",
    "FakeFetcher",
    "FakeLauncher",
    "catalog",
    "make_go_tar_gz",
    "make_go_zip",
]
