"""Connection construction for talking to the agent's server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generator, Optional
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from build_agent.core.config import Settings
from build_agent.core.exceptions import ConfigurationError


class BearerAuth(httpx.Auth):
    """Bearer token authentication."""

    def __init__(self, token: str):
        self._token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self._token}"
        yield request


def create_pat_credentials(token: str) -> httpx.Auth:
    """Personal access token credentials (basic auth with an empty user name)."""
    if not token or not token.strip():
        raise ConfigurationError("Personal access token cannot be empty", code="empty_token")
    return httpx.BasicAuth("", token.strip())


def create_bearer_credentials(token: str) -> httpx.Auth:
    """OAuth bearer token credentials."""
    if not token or not token.strip():
        raise ConfigurationError("Bearer token cannot be empty", code="empty_token")
    return BearerAuth(token.strip())


def normalize_server_url(server_url: str) -> str:
    """Validate an absolute http(s) server URL and strip the trailing slash."""
    if not server_url or not server_url.strip():
        raise ConfigurationError("Server URL cannot be empty", code="invalid_server_url")

    url = server_url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(
            f"Server URL must be an absolute http(s) URI, got: {url}",
            code="invalid_server_url",
        )
    return url.rstrip("/")


@dataclass
class ServerConnection:
    """Everything needed to open an HTTP client against one server."""

    base_url: str
    credentials: Optional[httpx.Auth] = None
    timeout_seconds: float = 100.0
    user_agent: str = "build-agent"
    verify: bool = True
    proxy: Optional[str] = None
    trace: Optional[Any] = None
    transport: Optional[httpx.AsyncBaseTransport] = None

    async def _trace_request(self, request: httpx.Request) -> None:
        self.trace.debug("HTTP request", method=request.method, url=str(request.url))

    async def _trace_response(self, response: httpx.Response) -> None:
        self.trace.debug(
            "HTTP response",
            method=response.request.method,
            url=str(response.request.url),
            status_code=response.status_code,
        )

    def create_client(self) -> httpx.AsyncClient:
        """Open an AsyncClient configured for this connection. Caller closes it."""
        event_hooks = {}
        if self.trace is not None:
            event_hooks = {"request": [self._trace_request], "response": [self._trace_response]}

        kwargs = {}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        elif self.proxy:
            kwargs["proxy"] = self.proxy

        return httpx.AsyncClient(
            base_url=self.base_url,
            auth=self.credentials,
            timeout=httpx.Timeout(self.timeout_seconds),
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            verify=self.verify,
            follow_redirects=True,
            event_hooks=event_hooks,
            **kwargs,
        )


def create_connection(
    server_url: str,
    credentials: Optional[httpx.Auth] = None,
    trace: Optional[Any] = None,
    *,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ServerConnection:
    """Build a connection for server_url.

    Args:
        server_url: Absolute http(s) URL of the server (collection or organization)
        credentials: httpx auth to send, or None for anonymous access
        trace: Optional structlog logger receiving HTTP request/response entries
        settings: Settings to take timeout, user agent, TLS and proxy options from
        transport: Optional transport override (tests, custom networking)

    Returns:
        ServerConnection ready to hand to a location server
    """
    if settings is None:
        try:
            settings = Settings()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid agent configuration: {e}", code="invalid_settings") from e
    return ServerConnection(
        base_url=normalize_server_url(server_url),
        credentials=credentials,
        timeout_seconds=settings.http_timeout_seconds,
        user_agent=settings.user_agent,
        verify=not settings.skip_cert_validation,
        proxy=settings.proxy_url,
        trace=trace,
        transport=transport,
    )
