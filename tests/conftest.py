"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from mcp_docker_gateway.config import (
    Config,
    EngineConfig,
    HubConfig,
    ServerConfig,
    TenantDefaults,
    ToolFilterConfig,
)
from mcp_docker_gateway.tools.common import TenantClientFactory
from mcp_docker_gateway.version import __version__

HUB_URL = "https://hub.docker.com/v2"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeUpstream:
    """Answers engine and Hub requests from a route table and records them.

    Routes are keyed by method and full URL path (query excluded). Each route
    builds a fresh ``httpx.Response`` per request.
    Unknown routes answer 404 so a missing stub shows up as ``NOT_FOUND``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Responder] = {}

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        status: int = 200,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        def respond(_request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text, headers=headers)
            if json_body is not None:
                return httpx.Response(status, json=json_body, headers=headers)
            return httpx.Response(status, headers=headers)

        self.routes[(method, path)] = respond

    def add_handler(self, method: str, path: str, responder: Responder) -> None:
        self.routes[(method, path)] = responder

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


def make_config(tenant: TenantDefaults | None = None, character_limit: int = 0) -> Config:
    """Build a config without reading the process environment for tenant defaults."""
    config = Config.__new__(Config)
    config.engine = EngineConfig(api_version="v1.47", timeout=5)
    config.hub = HubConfig(api_url=HUB_URL, timeout=5, default_page_size=25, max_page_size=100)
    config.tools = ToolFilterConfig(allowed_tools=[], denied_tools=[])
    config.tenant = tenant or TenantDefaults(**dict.fromkeys(TenantDefaults.model_fields, ""))
    config.server = ServerConfig(
        server_name="mcp-docker-gateway-test",
        server_version=__version__,
        log_level="DEBUG",
        character_limit=character_limit,
    )
    return config


@pytest.fixture
def upstream() -> FakeUpstream:
    """Fake engine and Hub endpoints."""
    return FakeUpstream()


@pytest.fixture
def tenant_headers() -> dict[str, str]:
    """Headers of the tenant making the current call; tests mutate this."""
    return {"x-docker-host": "tcp://localhost:2375"}


@pytest.fixture
def config() -> Config:
    """Create complete test configuration with no default tenant."""
    return make_config()


@pytest.fixture
def factory(
    config: Config, upstream: FakeUpstream, tenant_headers: dict[str, str]
) -> TenantClientFactory:
    """Client factory wired to the fake upstream and the test tenant headers."""
    return TenantClientFactory(
        config,
        transport=upstream.transport,
        headers_provider=lambda: tenant_headers,
    )


@pytest.fixture
def hub_factory(config: Config, upstream: FakeUpstream) -> TenantClientFactory:
    """Client factory for a tenant holding only a Hub token."""
    return TenantClientFactory(
        config,
        transport=upstream.transport,
        headers_provider=lambda: {"x-docker-hub-token": "hub-token"},
    )


@pytest.fixture
def make_factory(upstream: FakeUpstream) -> Callable[..., TenantClientFactory]:
    """Build a factory for arbitrary tenant headers or environment defaults."""

    def build(
        headers: dict[str, str] | None = None,
        tenant: TenantDefaults | None = None,
        character_limit: int = 0,
    ) -> TenantClientFactory:
        return TenantClientFactory(
            make_config(tenant, character_limit),
            transport=upstream.transport,
            headers_provider=lambda: headers or {},
        )

    return build
