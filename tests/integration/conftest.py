"""Shared fixtures for integration tests."""

import os

import pytest

from apca.stream.core import ApiInfo

# Skip all integration tests unless APCA_RUN_NETWORK_TESTS=1
pytestmark = pytest.mark.skipif(
    os.environ.get("APCA_RUN_NETWORK_TESTS") != "1",
    reason="Requires network access. Set APCA_RUN_NETWORK_TESTS=1 to run",
)


@pytest.fixture
def api_info() -> ApiInfo:
    """Credentials from APCA_API_* environment variables (paper account)."""
    return ApiInfo.from_env()
