"""Server deployment type detection (hosted vs on-premises)."""

from typing import Any, Optional

import httpx
import structlog

from build_agent.core.exceptions import (
    DeploymentTypeNotDeterminedError,
    UnrecognizedDeploymentTypeError,
)
from build_agent.core.models import ConnectionData, DeploymentKind
from build_agent.location.connection import create_connection
from build_agent.location.server import LocationServer

logger = structlog.get_logger()


class ServerUtil:
    """
    Caches whether the agent's server is hosted or on-premises.

    The type is determined once per instance through the location server and
    never changes afterwards. A failed lookup leaves it undetermined, so the
    next call to is_deployment_type_hosted() fetches again. Concurrent first
    calls are not deduplicated; each may fetch, and all agree on the result.
    """

    def __init__(self, trace: Optional[Any] = None):
        """Initialize server util.

        Args:
            trace: Optional structlog logger for HTTP and lookup tracing
        """
        self._deployment_type = DeploymentKind.UNDETERMINED
        self._trace = trace

    @property
    def deployment_type(self) -> DeploymentKind:
        return self._deployment_type

    @property
    def is_determined(self) -> bool:
        return self._deployment_type != DeploymentKind.UNDETERMINED

    def is_deployment_type_hosted_if_determined(self) -> bool:
        """Return True if the server deployment type is hosted.

        Raises:
            DeploymentTypeNotDeterminedError: type was not determined before
            UnrecognizedDeploymentTypeError: stored type is not a known kind
        """
        if self._deployment_type == DeploymentKind.HOSTED:
            return True
        if self._deployment_type == DeploymentKind.ON_PREMISES:
            return False
        if self._deployment_type == DeploymentKind.UNDETERMINED:
            raise DeploymentTypeNotDeterminedError()
        raise UnrecognizedDeploymentTypeError(self._deployment_type)

    async def is_deployment_type_hosted(
        self,
        server_url: str,
        credentials: Optional[httpx.Auth],
        location_server: LocationServer,
    ) -> bool:
        """Return True if the server deployment type is hosted.

        Determines the type first if it has not been determined yet.
        """
        if self._deployment_type == DeploymentKind.UNDETERMINED:
            connection_data = await self._get_connection_data(server_url, credentials, location_server)
            self._deployment_type = connection_data.deployment_type
            logger.info(
                "Determined server deployment type",
                server_url=server_url,
                deployment_type=getattr(self._deployment_type, "value", self._deployment_type),
            )

        return self.is_deployment_type_hosted_if_determined()

    async def _get_connection_data(
        self,
        server_url: str,
        credentials: Optional[httpx.Auth],
        location_server: LocationServer,
    ) -> ConnectionData:
        connection = create_connection(server_url, credentials, trace=self._trace)
        try:
            await location_server.connect(connection)
            return await location_server.get_connection_data()
        except Exception as e:
            logger.warning(
                "Failed to determine server deployment type",
                server_url=server_url,
                error=str(e),
            )
            raise
