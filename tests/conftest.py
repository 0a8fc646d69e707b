"""
Pytest configuration and shared fixtures for navcore tests.

Provides a deterministic clock, profile sampling helpers, and marker
registration used across the test suite.
"""

import logging
import os
import sys

import pytest

# Add the parent directory to Python path so we can import navcore
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from navcore.geometry import Pose2d  # noqa: E402
from navcore.path import LinePath  # noqa: E402
from tests.utils import ManualClock  # noqa: E402

logger = logging.getLogger(__name__)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def clock() -> ManualClock:
    """Clock starting at t=0 that only advances when told to."""
    return ManualClock()


@pytest.fixture
def line_path() -> LinePath:
    """Straight path from (0, 0) to (10, 0) with constant zero heading."""
    return LinePath(Pose2d(0.0, 0.0, 0.0), Pose2d(10.0, 0.0, 0.0))


@pytest.fixture
def temp_env(monkeypatch):
    """Set environment variables for a single test; restored afterwards."""

    class TempEnv:
        def set(self, key: str, value: str):
            monkeypatch.setenv(key, value)

        def unset(self, key: str):
            monkeypatch.delenv(key, raising=False)

    return TempEnv()


# ============================================================================
# PYTEST CONFIGURATION HOOKS
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "slow: Slow-running tests (long profile searches, many follower ticks)"
    )


def pytest_sessionstart(session):
    """Called after the Session object has been created."""
    logger.info("Starting navcore test session")
