"""Unit tests for the backend HTTP transport and per-tenant client."""

import base64
import json

import httpx
import pytest

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.backend.transport import (
    REGISTRY_AUTH_HEADER,
    FilterStyle,
    decode_response,
    encode_filters,
    encode_query,
    registry_auth_header,
)
from mcp_docker_gateway.config import EngineConfig, HubConfig
from mcp_docker_gateway.credentials import TenantCredentials
from mcp_docker_gateway.models.requests import RegistryAuth
from mcp_docker_gateway.utils.errors import (
    AuthenticationFailure,
    Conflict,
    ConnectionFailure,
    GenericBackendError,
    NotFound,
    RateLimitExceeded,
)

ENGINE = "/v1.47"
HUB = "/v2"


def _client(upstream, **credentials) -> DockerBackendClient:
    return DockerBackendClient(
        TenantCredentials(**credentials),
        engine_config=EngineConfig(api_version="v1.47"),
        hub_config=HubConfig(api_url="https://hub.docker.com/v2"),
        transport=upstream.transport,
    )


class TestEncoding:
    """Test query, filter and header encoding helpers."""

    def test_encode_query_drops_none_and_renders_bools(self):
        """Test query parameter rendering."""
        assert encode_query({"all": False, "limit": None, "size": True, "n": 3}) == {
            "all": "false",
            "size": "true",
            "n": "3",
        }

    def test_engine_filters_are_json(self):
        """Test that scalar values are wrapped in lists."""
        encoded = encode_filters({"status": "running", "label": ["a=1", "b=2"]})
        assert json.loads(encoded["filters"]) == {
            "label": ["a=1", "b=2"],
            "status": ["running"],
        }

    def test_hub_filters_are_flat(self):
        """Test comma-joined Hub parameters."""
        assert encode_filters({"name": ["a", "b"], "ordering": "last_updated"}, FilterStyle.HUB) == {
            "name": "a,b",
            "ordering": "last_updated",
        }

    @pytest.mark.parametrize("filters", [None, {}, {"status": None}, {"status": []}])
    def test_empty_filters(self, filters):
        """Test that empty filters add no parameter."""
        assert encode_filters(filters) == {}

    def test_registry_auth_header(self):
        """Test the X-Registry-Auth encoding."""
        header = registry_auth_header(RegistryAuth(username="u", password="p"))
        decoded = json.loads(base64.urlsafe_b64decode(header[REGISTRY_AUTH_HEADER]))
        assert decoded == {"username": "u", "password": "p"}
        assert registry_auth_header(None) == {}

    def test_decode_response(self):
        """Test JSON, text and empty bodies."""
        assert decode_response(httpx.Response(204)) is None
        assert decode_response(httpx.Response(200, json={"a": 1})) == {"a": 1}
        assert decode_response(httpx.Response(200, text="OK")) == "OK"
        assert decode_response(httpx.Response(200, content=b"\x01"), "bytes") == b"\x01"


class TestEngineRequests:
    """Test engine request construction and error handling."""

    @pytest.mark.asyncio
    async def test_list_containers_url(self, upstream):
        """Test the exact URL of a container listing."""
        upstream.add("GET", f"{ENGINE}/containers/json", json_body=[])
        async with _client(upstream, docker_host="tcp://localhost:2375") as client:
            assert await client.list_containers() == []

        request = upstream.last_request
        assert str(request.url) == "http://localhost:2375/v1.47/containers/json?all=false"

    @pytest.mark.asyncio
    async def test_tenant_api_version_override(self, upstream):
        """Test that a tenant API version replaces the default path prefix."""
        upstream.add("GET", "/v1.43/_ping", text="OK")
        async with _client(upstream, docker_host="tcp://h:2375", api_version="1.43") as client:
            assert await client.ping() == "OK"

    @pytest.mark.asyncio
    async def test_missing_host_fails_without_request(self, upstream):
        """Test that an engine call without a host raises before any I/O."""
        async with _client(upstream) as client:
            with pytest.raises(ConnectionFailure, match="Docker host not configured"):
                await client.list_containers()
        assert upstream.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,kind",
        [(404, NotFound), (409, Conflict), (429, GenericBackendError), (503, ConnectionFailure)],
    )
    async def test_status_mapping(self, upstream, status, kind):
        """Test that engine error statuses map to gateway errors."""
        upstream.add(
            "GET", f"{ENGINE}/containers/abc/json", json_body={"message": "nope"}, status=status
        )
        async with _client(upstream, docker_host="tcp://h:2375") as client:
            with pytest.raises(kind, match="nope"):
                await client.inspect_container("abc")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Test that transport failures become ConnectionFailure."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = DockerBackendClient(
            TenantCredentials(docker_host="tcp://h:2375"), transport=httpx.MockTransport(refuse)
        )
        async with client:
            with pytest.raises(ConnectionFailure, match="Failed to connect to Docker"):
                await client.ping()

    @pytest.mark.asyncio
    async def test_pull_with_registry_auth(self, upstream):
        """Test that tenant registry credentials are sent on pulls."""
        upstream.add("POST", f"{ENGINE}/images/create", text='{"status":"Downloaded"}\n')
        async with _client(
            upstream,
            docker_host="tcp://h:2375",
            registry_username="ci",
            registry_password="secret",
        ) as client:
            await client.pull_image("nginx", auth=client.registry_auth())

        request = upstream.last_request
        assert request.url.params["fromImage"] == "nginx"
        assert request.url.params["tag"] == "latest"
        header = json.loads(base64.urlsafe_b64decode(request.headers[REGISTRY_AUTH_HEADER]))
        assert header["username"] == "ci"

    @pytest.mark.asyncio
    async def test_pull_without_registry_auth(self, upstream):
        """Test that no auth header is sent without credentials."""
        upstream.add("POST", f"{ENGINE}/images/create", text="done")
        async with _client(upstream, docker_host="tcp://h:2375") as client:
            assert client.registry_auth() is None
            assert await client.pull_image("nginx") == "done"
        assert REGISTRY_AUTH_HEADER not in upstream.last_request.headers

    @pytest.mark.asyncio
    async def test_multiplexed_logs(self, upstream):
        """Test that log frames are stripped."""
        frame = bytes([1, 0, 0, 0, 0, 0, 0, 6]) + b"hello\n"
        upstream.add_handler(
            "GET",
            f"{ENGINE}/containers/web/logs",
            lambda request: httpx.Response(200, content=frame),
        )
        async with _client(upstream, docker_host="tcp://h:2375") as client:
            assert await client.get_container_logs("web", tail=10) == "hello\n"
        assert upstream.last_request.url.params["tail"] == "10"

    @pytest.mark.asyncio
    async def test_test_connection_reports_failure(self, upstream):
        """Test that the connection probe does not raise."""
        upstream.add("GET", f"{ENGINE}/_ping", json_body={"message": "down"}, status=500)
        async with _client(upstream, docker_host="tcp://h:2375") as client:
            result = await client.test_connection()
        assert result == {"connected": False, "message": "down"}


class TestHubRequests:
    """Test Hub authentication, paging and error handling."""

    @pytest.mark.asyncio
    async def test_auth_required_without_credentials(self, upstream):
        """Test that protected Hub calls fail before any request."""
        async with _client(upstream) as client:
            with pytest.raises(AuthenticationFailure, match="authentication required"):
                await client.get_build_history("org", "app", page=2)
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_public_repository_without_token(self, upstream):
        """Test that public reads go out without an Authorization header."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/library/nginx/",
            json_body={"name": "nginx", "star_count": 5},
        )
        async with _client(upstream) as client:
            repo = await client.get_repository("library", "nginx")
        assert repo.star_count == 5
        assert "authorization" not in upstream.last_request.headers

    @pytest.mark.asyncio
    async def test_static_token_sent(self, upstream):
        """Test that a tenant token is used as a bearer token."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/org/app/buildhistory/",
            json_body={"count": 30, "next": "more", "results": [{"id": 1, "status": 10}]},
        )
        async with _client(upstream, hub_token="tok") as client:
            page = await client.get_build_history("org", "app", page=2, page_size=10)

        request = upstream.last_request
        assert request.headers["authorization"] == "Bearer tok"
        assert request.url.params["page"] == "2"
        assert request.url.params["page_size"] == "10"
        assert page.next_cursor == "3"
        assert page.items[0].id == 1

    @pytest.mark.asyncio
    async def test_username_password_logs_in_once(self, upstream):
        """Test the automatic login for username and password tenants."""
        upstream.add("POST", f"{HUB}/users/login", json_body={"token": "session"})
        upstream.add("GET", f"{HUB}/repositories/org/app/webhooks/", json_body={"results": []})
        async with _client(upstream, hub_username="u", hub_password="p") as client:
            assert await client.list_webhooks("org", "app") == []
            assert await client.list_webhooks("org", "app") == []

        paths = [request.url.path for request in upstream.requests]
        assert paths.count(f"{HUB}/users/login") == 1
        assert upstream.last_request.headers["authorization"] == "Bearer session"

    @pytest.mark.asyncio
    async def test_public_read_does_not_log_in(self, upstream):
        """Test that a public read with username and password stays one anonymous call."""
        upstream.add(
            "POST", f"{HUB}/users/login", json_body={"detail": "bad credentials"}, status=401
        )
        upstream.add("GET", f"{HUB}/repositories/library/nginx/", json_body={"name": "nginx"})
        async with _client(upstream, hub_username="u", hub_password="wrong") as client:
            repo = await client.get_repository("library", "nginx")

        assert repo.name == "nginx"
        assert [request.url.path for request in upstream.requests] == [
            f"{HUB}/repositories/library/nginx/"
        ]
        assert "authorization" not in upstream.last_request.headers

    @pytest.mark.asyncio
    async def test_login_without_token_fails(self, upstream):
        """Test a login reply that carries no token."""
        upstream.add("POST", f"{HUB}/users/login", json_body={"detail": "ok?"})
        async with _client(upstream) as client:
            with pytest.raises(AuthenticationFailure, match="did not return a token"):
                await client.hub_login("u", "p")

    @pytest.mark.asyncio
    async def test_rate_limit(self, upstream):
        """Test that Hub 429 carries the Retry-After value."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/library/",
            json_body={"detail": "slow down"},
            status=429,
            headers={"Retry-After": "30"},
        )
        async with _client(upstream) as client:
            with pytest.raises(RateLimitExceeded) as exc_info:
                await client.list_repositories("library")
        assert exc_info.value.retry_after_seconds == 30
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_rate_limit_default_retry_after(self, upstream):
        """Test the default when Retry-After is absent."""
        upstream.add("GET", f"{HUB}/repositories/library/", status=429)
        async with _client(upstream) as client:
            with pytest.raises(RateLimitExceeded) as exc_info:
                await client.list_repositories("library")
        assert exc_info.value.retry_after_seconds == 60

    @pytest.mark.asyncio
    async def test_hub_auth_failure_message(self, upstream):
        """Test that 401 from Hub names Docker Hub in the message."""
        upstream.add(
            "DELETE",
            f"{HUB}/repositories/org/app/tags/old/",
            json_body={"detail": "token expired"},
            status=401,
        )
        async with _client(upstream, hub_token="tok") as client:
            with pytest.raises(AuthenticationFailure, match="Docker Hub authentication failed"):
                await client.delete_tag("org", "app", "old")

    @pytest.mark.asyncio
    async def test_hub_filters_flat(self, upstream):
        """Test that repository filters go out as flat parameters."""
        upstream.add("GET", f"{HUB}/repositories/org/", json_body={"results": []})
        async with _client(upstream) as client:
            await client.list_repositories("org", filters={"ordering": "last_updated"})
        assert upstream.last_request.url.params["ordering"] == "last_updated"
