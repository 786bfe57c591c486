#!/usr/bin/env python3
"""
Global pytest configuration and fixtures.

This module provides:
- Platform-specific test skipping (macOS/EventKit tests)
- A fixed reference instant for window arithmetic
- An isolated working directory per test
"""

import os
import platform
import sys
import tempfile
import shutil
from datetime import datetime
from typing import Generator

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from taskcal.core.paths import reset_path_manager


HAS_EVENTKIT = False

try:
    if platform.system() == "Darwin":
        import objc  # noqa: F401
        import EventKit  # noqa: F401
        HAS_EVENTKIT = True
except ImportError:
    pass


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "macos: test requires Darwin platform")
    config.addinivalue_line("markers", "eventkit: test requires EventKit framework")


def pytest_collection_modifyitems(config, items):
    """Skip macOS/EventKit tests where they cannot run."""
    skip_macos = pytest.mark.skip(reason="macOS/EventKit tests require Darwin platform")
    skip_eventkit = pytest.mark.skip(reason="Test requires EventKit framework")

    for item in items:
        if "macos" in item.keywords and platform.system() != "Darwin":
            item.add_marker(skip_macos)
        if "eventkit" in item.keywords and not HAS_EVENTKIT:
            item.add_marker(skip_eventkit)


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch) -> Generator[str, None, None]:
    """Point TASKCAL_HOME at a throwaway directory for every test."""
    temp_path = tempfile.mkdtemp(prefix="taskcal_home_")
    monkeypatch.setenv("TASKCAL_HOME", temp_path)
    reset_path_manager()
    try:
        yield temp_path
    finally:
        reset_path_manager()
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for test isolation."""
    temp_path = tempfile.mkdtemp(prefix="taskcal_test_")
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def now() -> datetime:
    """Fixed 'current time': Monday 2025-10-20 10:30 local."""
    return datetime(2025, 10, 20, 10, 30)

