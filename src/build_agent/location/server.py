"""Location service client: connection data for the agent's server."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

import httpx
import structlog
from pydantic import ValidationError

from build_agent.core.exceptions import (
    AuthenticationError,
    LocationServerError,
    ServerConnectionError,
)
from build_agent.core.models import ConnectionData
from build_agent.location.connection import ServerConnection

logger = structlog.get_logger()

CONNECTION_DATA_PATH = "_apis/connectionData"
CONNECTION_DATA_PARAMS = {
    "connectOptions": "1",
    "lastChangeId": "-1",
    "lastChangeId64": "-1",
}


@runtime_checkable
class LocationServer(Protocol):
    """Location service collaborator used to determine server metadata."""

    async def connect(self, connection: ServerConnection) -> None:
        ...

    async def get_connection_data(self) -> ConnectionData:
        ...


class HttpLocationServer:
    """Location service client over HTTP."""

    def __init__(self):
        self._connection: Optional[ServerConnection] = None
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def connection(self) -> Optional[ServerConnection]:
        return self._connection

    async def connect(self, connection: ServerConnection) -> None:
        """Bind to a server connection, replacing any previous one."""
        await self.aclose()
        self._connection = connection
        self._client = connection.create_client()
        logger.debug("Location server connected", server_url=connection.base_url)

    async def get_connection_data(self) -> ConnectionData:
        """Fetch the server's connection data."""
        if self._client is None or self._connection is None:
            raise LocationServerError("Location server is not connected", code="not_connected")

        server_url = self._connection.base_url
        try:
            response = await self._client.get(CONNECTION_DATA_PATH, params=CONNECTION_DATA_PARAMS)
        except httpx.TimeoutException as e:
            raise ServerConnectionError(
                f"Timed out fetching connection data from {server_url}", code="timeout"
            ) from e
        except httpx.TransportError as e:
            raise ServerConnectionError(
                f"Failed to connect to {server_url}: {e}", code="connection_failed"
            ) from e
        except httpx.RequestError as e:
            # redirect loops, undecodable bodies
            raise ServerConnectionError(
                f"Request to {server_url} failed: {e}", code="request_failed"
            ) from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Server rejected credentials ({response.status_code})",
                code="unauthorized",
                status_code=response.status_code,
            )
        if response.is_error:
            raise LocationServerError(
                f"Connection data request failed: {response.status_code} - {response.text[:200]}",
                code="http_error",
                status_code=response.status_code,
            )

        try:
            connection_data = ConnectionData.model_validate(response.json())
        except ValueError as e:
            # ValidationError and JSONDecodeError are both ValueErrors
            code = "invalid_connection_data" if isinstance(e, ValidationError) else "invalid_json"
            raise LocationServerError(
                f"Invalid connection data from {server_url}: {e}",
                code=code,
                status_code=response.status_code,
            ) from e

        logger.debug(
            "Fetched connection data",
            server_url=server_url,
            deployment_type=connection_data.deployment_type.value,
            instance_id=connection_data.instance_id,
        )
        return connection_data

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpLocationServer":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
