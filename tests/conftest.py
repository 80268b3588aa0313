"""
Pytest configuration and fixtures for build agent tests.
"""

import os
from unittest.mock import AsyncMock

import pytest
import structlog

from build_agent.core.models import ConnectionData, DeploymentKind


@pytest.fixture(autouse=True)
def clear_agent_env(monkeypatch):
    """
    Remove AGENT_* settings inherited from the developer's shell.

    Tests that need a setting set it explicitly with monkeypatch.setenv().
    """
    for key in list(os.environ):
        if key.startswith("AGENT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo setup_logging() so later tests do not write to a closed capture stream."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def make_location_server(deployment_type=DeploymentKind.HOSTED):
    """Stub location server reporting the given deployment type."""
    location_server = AsyncMock()
    location_server.get_connection_data.return_value = ConnectionData(deployment_type=deployment_type)
    return location_server


@pytest.fixture
def hosted_location_server():
    return make_location_server(DeploymentKind.HOSTED)


@pytest.fixture
def on_premises_location_server():
    return make_location_server(DeploymentKind.ON_PREMISES)
