"""Shared pytest fixtures."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from shop_monitor.snapshot import SnapshotStore


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so retry back-off and test-message delays run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture
def store(tmp_path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "cache.json")
