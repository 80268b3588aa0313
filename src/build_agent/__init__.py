"""Build agent server utilities - deployment type detection for agent sessions."""

__version__ = "0.1.0"

from build_agent.core.config import Settings
from build_agent.core.models import ConnectionData, DeploymentKind
from build_agent.utils.server_util import ServerUtil

__all__ = ["Settings", "ConnectionData", "DeploymentKind", "ServerUtil", "__version__"]
