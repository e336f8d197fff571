"""
Pytest configuration and fixtures for DisputePilot tests.
"""
import pytest

from tests.helpers import make_world


@pytest.fixture
def world():
    """Standard booking: rent 1000.00, deposit 500.00, guest 101, host 202."""
    return make_world()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove DP_* variables so settings fall back to defaults."""
    for name in (
        "DP_PLATFORM_WALLET",
        "DP_PLATFORM_FEE_RATE",
        "DP_MAX_ATTACHMENTS",
        "DP_PROPERTY_SUSPENSION_POINTS",
        "DP_PENALTY_MATRIX_PATH",
        "DP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
