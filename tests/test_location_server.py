"""Tests for the HTTP location server client."""

import httpx
import pytest

from build_agent.core.exceptions import (
    AuthenticationError,
    LocationServerError,
    ServerConnectionError,
)
from build_agent.core.models import DeploymentKind
from build_agent.location.connection import create_connection, create_pat_credentials
from build_agent.location.server import HttpLocationServer, LocationServer
from build_agent.utils.server_util import ServerUtil

SERVER_URL = "https://dev.azure.com/org"

CONNECTION_DATA = {
    "authenticatedUser": {"id": "a1", "providerDisplayName": "Build Service"},
    "authorizedUser": {"id": "a1"},
    "instanceId": "b6c1e4a2-0000-0000-0000-000000000001",
    "deploymentId": "d0000000-0000-0000-0000-000000000002",
    "deploymentType": "hosted",
    "lastUserAccess": "2024-05-01T10:00:00Z",
    "locationServiceData": {"serviceOwner": "00025394-6065-48ca-87d9-7f5672854ef7"},
}


def _connection(handler, credentials=None):
    return create_connection(SERVER_URL, credentials, transport=httpx.MockTransport(handler))


def test_http_location_server_satisfies_protocol():
    assert isinstance(HttpLocationServer(), LocationServer)


@pytest.mark.asyncio
async def test_get_connection_data_request_shape():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=CONNECTION_DATA)

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler, create_pat_credentials("secret-pat")))
        data = await location_server.get_connection_data()

    assert data.deployment_type == DeploymentKind.HOSTED
    assert data.instance_id == CONNECTION_DATA["instanceId"]
    assert data.authenticated_user_name == "Build Service"

    assert len(requests) == 1
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/org/_apis/connectionData"
    assert request.url.params["connectOptions"] == "1"
    assert request.url.params["lastChangeId"] == "-1"
    assert request.url.params["lastChangeId64"] == "-1"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["Authorization"].startswith("Basic ")


@pytest.mark.asyncio
async def test_on_premises_connection_data():
    def handler(request):
        return httpx.Response(200, json={**CONNECTION_DATA, "deploymentType": "onPremises"})

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler))
        data = await location_server.get_connection_data()

    assert data.deployment_type == DeploymentKind.ON_PREMISES


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403])
async def test_auth_failures(status_code):
    def handler(request):
        return httpx.Response(status_code, text="denied")

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler))
        with pytest.raises(AuthenticationError) as exc_info:
            await location_server.get_connection_data()

    assert exc_info.value.status_code == status_code


@pytest.mark.asyncio
async def test_server_error():
    def handler(request):
        return httpx.Response(500, text="boom")

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler))
        with pytest.raises(LocationServerError) as exc_info:
            await location_server.get_connection_data()

    assert exc_info.value.status_code == 500
    assert exc_info.value.code == "http_error"
    assert not isinstance(exc_info.value, AuthenticationError)


@pytest.mark.asyncio
async def test_transport_error_maps_to_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler))
        with pytest.raises(ServerConnectionError) as exc_info:
            await location_server.get_connection_data()

    assert exc_info.value.code == "connection_failed"
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_timeout_maps_to_connection_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler))
        with pytest.raises(ServerConnectionError) as exc_info:
            await location_server.get_connection_data()

    assert exc_info.value.code == "timeout"


@pytest.mark.asyncio
async def test_malformed_json():
    def handler(request):
        return httpx.Response(200, text="<html>sign in</html>")

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler))
        with pytest.raises(LocationServerError) as exc_info:
            await location_server.get_connection_data()

    assert exc_info.value.code == "invalid_json"


@pytest.mark.asyncio
async def test_unknown_deployment_type_rejected():
    def handler(request):
        return httpx.Response(200, json={**CONNECTION_DATA, "deploymentType": "sovereign"})

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler))
        with pytest.raises(LocationServerError) as exc_info:
            await location_server.get_connection_data()

    assert exc_info.value.code == "invalid_connection_data"


@pytest.mark.asyncio
async def test_get_connection_data_requires_connect():
    location_server = HttpLocationServer()

    with pytest.raises(LocationServerError) as exc_info:
        await location_server.get_connection_data()

    assert exc_info.value.code == "not_connected"


@pytest.mark.asyncio
async def test_reconnect_replaces_connection():
    def handler(request):
        return httpx.Response(200, json=CONNECTION_DATA)

    location_server = HttpLocationServer()
    first = _connection(handler)
    second = create_connection("https://dev.azure.com/other", transport=httpx.MockTransport(handler))

    await location_server.connect(first)
    await location_server.connect(second)

    assert location_server.connection is second
    await location_server.aclose()
    await location_server.aclose()


@pytest.mark.asyncio
async def test_server_util_end_to_end():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={**CONNECTION_DATA, "deploymentType": "OnPremises"})

    class MockTransportLocationServer(HttpLocationServer):
        async def connect(self, connection):
            connection.transport = httpx.MockTransport(handler)
            await super().connect(connection)

    server_util = ServerUtil()
    async with MockTransportLocationServer() as location_server:
        assert await server_util.is_deployment_type_hosted(SERVER_URL, None, location_server) is False
        assert await server_util.is_deployment_type_hosted(SERVER_URL, None, location_server) is False

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_redirect_loop_maps_to_connection_error():
    def handler(request):
        return httpx.Response(302, headers={"Location": str(request.url)})

    async with HttpLocationServer() as location_server:
        await location_server.connect(_connection(handler))
        with pytest.raises(ServerConnectionError) as exc_info:
            await location_server.get_connection_data()

    assert exc_info.value.code == "request_failed"
    assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)
