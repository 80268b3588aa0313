"""Location service access for the agent's server."""

from build_agent.location.connection import (
    ServerConnection,
    create_bearer_credentials,
    create_connection,
    create_pat_credentials,
)
from build_agent.location.server import HttpLocationServer, LocationServer

__all__ = [
    "ServerConnection",
    "create_connection",
    "create_pat_credentials",
    "create_bearer_credentials",
    "LocationServer",
    "HttpLocationServer",
]
