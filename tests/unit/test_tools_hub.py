"""Unit tests for tools/hub.py."""

import json

import pytest
from fastmcp.exceptions import ToolError

from mcp_docker_gateway.formatting import ResponseFormat
from mcp_docker_gateway.tools.hub import (
    create_hub_build_history_tool,
    create_hub_create_webhook_tool,
    create_hub_delete_tag_tool,
    create_hub_get_repo_tool,
    create_hub_get_tag_tool,
    create_hub_list_repos_tool,
    create_hub_list_webhooks_tool,
    create_hub_login_tool,
    create_hub_trigger_build_tool,
    resolve_page_size,
)
from mcp_docker_gateway.utils.fastmcp_helpers import OperationSafety

HUB = "/v2"


def _text(result) -> str:
    return result.content[0].text


def _error(exc_info) -> dict:
    return json.loads(str(exc_info.value))


class TestPageSize:
    """Test page size resolution."""

    @pytest.mark.parametrize(
        "requested,expected",
        [(None, 25), (10, 10), (100, 100), (500, 100)],
    )
    def test_default_and_cap(self, factory, requested, expected):
        """Test the configured default and maximum."""
        assert resolve_page_size(factory, requested) == expected


class TestHubLogin:
    """Test docker_hub_login."""

    def test_metadata(self, hub_factory):
        """Test that login reaches outside the host."""
        name, _, safety, _, open_world, _ = create_hub_login_tool(hub_factory)
        assert name == "docker_hub_login"
        assert safety == OperationSafety.SAFE
        assert open_world is True

    @pytest.mark.asyncio
    async def test_login(self, make_factory, upstream):
        """Test that the token length is reported, never the token."""
        upstream.add("POST", f"{HUB}/users/login", json_body={"token": "abcdef"})
        *_, func = create_hub_login_tool(make_factory())

        text = _text(await func(username="alice", password="pw"))

        assert json.loads(text) == {
            "success": True,
            "message": "Logged in to Docker Hub",
            "tokenLength": 6,
        }
        assert "abcdef" not in text
        assert upstream.last_json() == {"username": "alice", "password": "pw"}

    @pytest.mark.asyncio
    async def test_bad_credentials(self, make_factory, upstream):
        """Test that a rejected login is an authentication failure."""
        upstream.add(
            "POST",
            f"{HUB}/users/login",
            json_body={"detail": "Incorrect authentication credentials"},
            status=401,
        )
        *_, func = create_hub_login_tool(make_factory())

        with pytest.raises(ToolError) as exc_info:
            await func(username="alice", password="wrong")

        assert _error(exc_info)["details"]["code"] == "AUTHENTICATION_FAILED"


class TestRepositories:
    """Test repository listing and lookup."""

    @pytest.mark.asyncio
    async def test_list_paging(self, hub_factory, upstream):
        """Test page parameters and the synthesized cursor."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/myorg/",
            json_body={
                "count": 30,
                "next": "https://hub.docker.com/v2/repositories/myorg/?page=3",
                "results": [{"name": "app", "namespace": "myorg", "pull_count": 12}],
            },
        )
        *_, func = create_hub_list_repos_tool(hub_factory)

        payload = json.loads(_text(await func(namespace="myorg", page=2, page_size=10)))

        assert payload["items"][0]["pullCount"] == 12
        assert payload["count"] == 1
        assert payload["total"] == 30
        assert payload["hasMore"] is True
        assert payload["nextCursor"] == "3"
        params = upstream.last_request.url.params
        assert (params["page"], params["page_size"]) == ("2", "10")
        assert upstream.last_request.headers["Authorization"] == "Bearer hub-token"

    @pytest.mark.asyncio
    async def test_list_last_page(self, hub_factory, upstream):
        """Test that the last page has no cursor."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/myorg/",
            json_body={"count": 1, "next": None, "results": [{"name": "app"}]},
        )
        *_, func = create_hub_list_repos_tool(hub_factory)

        payload = json.loads(_text(await func(namespace="myorg")))

        assert payload["hasMore"] is False
        assert payload["nextCursor"] is None
        assert upstream.last_request.url.params["page_size"] == "25"

    @pytest.mark.asyncio
    async def test_list_markdown(self, hub_factory, upstream):
        """Test the Markdown rendering of a page."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/myorg/",
            json_body={"count": 40, "next": "x", "results": [{"name": "app", "namespace": "myorg"}]},
        )
        *_, func = create_hub_list_repos_tool(hub_factory)

        text = _text(await func(namespace="myorg", format=ResponseFormat.MARKDOWN))

        assert "**Total:** 40 | **Showing:** 1" in text
        assert "cursor: `2`" in text

    @pytest.mark.asyncio
    async def test_list_filters_are_flat(self, hub_factory, upstream):
        """Test that Hub filters are sent as plain query parameters."""
        upstream.add("GET", f"{HUB}/repositories/myorg/", json_body={"results": []})
        *_, func = create_hub_list_repos_tool(hub_factory)

        await func(namespace="myorg", filters={"name": "app", "ordering": "last_updated"})

        params = upstream.last_request.url.params
        assert params["name"] == "app"
        assert params["ordering"] == "last_updated"
        assert "filters" not in params

    @pytest.mark.asyncio
    async def test_public_repo_without_credentials(self, make_factory, upstream):
        """Test that public reads work anonymously."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/library/nginx/",
            json_body={"name": "nginx", "namespace": "library", "star_count": 20000},
        )
        *_, func = create_hub_get_repo_tool(make_factory())

        payload = json.loads(_text(await func(namespace="library", repository="nginx")))

        assert payload["starCount"] == 20000
        assert "Authorization" not in upstream.last_request.headers

    @pytest.mark.asyncio
    async def test_rate_limited(self, make_factory, upstream):
        """Test the rate limit envelope."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/library/nginx/",
            json_body={"detail": "too many requests"},
            status=429,
            headers={"Retry-After": "15"},
        )
        *_, func = create_hub_get_repo_tool(make_factory())

        with pytest.raises(ToolError) as exc_info:
            await func(namespace="library", repository="nginx")

        body = _error(exc_info)
        assert body["details"]["code"] == "RATE_LIMIT_EXCEEDED"
        assert body["details"]["retryable"] is True
        assert body["details"]["retryAfterSeconds"] == 15


class TestTags:
    """Test tag tools."""

    @pytest.mark.asyncio
    async def test_get_tag_images(self, make_factory, upstream):
        """Test per-platform images of a tag."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/library/nginx/tags/latest/",
            json_body={
                "name": "latest",
                "full_size": 1000,
                "images": [{"architecture": "arm64", "os": "linux", "digest": "sha256:1"}],
            },
        )
        *_, func = create_hub_get_tag_tool(make_factory())

        payload = json.loads(
            _text(await func(namespace="library", repository="nginx", tag="latest"))
        )

        assert payload["fullSize"] == 1000
        assert payload["images"][0]["architecture"] == "arm64"

    @pytest.mark.asyncio
    async def test_delete_requires_credentials(self, make_factory, upstream):
        """Test that deletion fails before any request without credentials."""
        *_, func = create_hub_delete_tag_tool(make_factory())

        with pytest.raises(ToolError) as exc_info:
            await func(namespace="myorg", repository="app", tag="old")

        body = _error(exc_info)
        assert body["details"]["code"] == "AUTHENTICATION_FAILED"
        assert "docker_hub_login" in body["error"]
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_delete(self, hub_factory, upstream):
        """Test tag deletion with a token."""
        upstream.add("DELETE", f"{HUB}/repositories/myorg/app/tags/old/", status=204)
        _, _, safety, _, _, func = create_hub_delete_tag_tool(hub_factory)

        payload = json.loads(_text(await func(namespace="myorg", repository="app", tag="old")))

        assert safety == OperationSafety.DESTRUCTIVE
        assert payload["message"] == "Tag myorg/app:old deleted"


class TestWebhooksAndBuilds:
    """Test webhook and automated build tools."""

    @pytest.mark.asyncio
    async def test_list_webhooks(self, hub_factory, upstream):
        """Test that webhooks are read from the results list."""
        upstream.add(
            "GET",
            f"{HUB}/repositories/myorg/app/webhooks/",
            json_body={
                "results": [
                    {
                        "id": 4,
                        "name": "ci",
                        "webhooks": [{"id": 9, "hook_url": "https://ci.example.com/hook"}],
                    }
                ]
            },
        )
        *_, func = create_hub_list_webhooks_tool(hub_factory)

        payload = json.loads(_text(await func(namespace="myorg", repository="app")))

        assert payload[0]["id"] == 4
        assert payload[0]["hooks"][0]["hookUrl"] == "https://ci.example.com/hook"

    @pytest.mark.asyncio
    async def test_create_webhook(self, hub_factory, upstream):
        """Test the webhook create body."""
        upstream.add(
            "POST",
            f"{HUB}/repositories/myorg/app/webhooks/",
            json_body={"id": 5, "name": "ci"},
            status=201,
        )
        *_, func = create_hub_create_webhook_tool(hub_factory)

        payload = json.loads(
            _text(
                await func(
                    namespace="myorg",
                    repository="app",
                    name="ci",
                    webhook_url="https://ci.example.com/hook",
                )
            )
        )

        assert payload["message"] == "Webhook ci created"
        assert payload["webhook"]["id"] == 5
        assert upstream.last_json() == {
            "name": "ci",
            "expect_final_callback": False,
            "webhooks": [{"name": "ci", "hook_url": "https://ci.example.com/hook"}],
        }

    @pytest.mark.asyncio
    async def test_build_history_logs_in_with_password(self, make_factory, upstream):
        """Test that username and password credentials log in before the call."""
        upstream.add("POST", f"{HUB}/users/login", json_body={"token": "session"})
        upstream.add(
            "GET",
            f"{HUB}/repositories/myorg/app/buildhistory/",
            json_body={"count": 0, "next": None, "results": []},
        )
        factory = make_factory(
            headers={"x-docker-hub-username": "alice", "x-docker-hub-password": "pw"}
        )
        *_, func = create_hub_build_history_tool(factory)

        payload = json.loads(_text(await func(namespace="myorg", repository="app")))

        assert payload["items"] == []
        assert [r.url.path for r in upstream.requests] == [
            f"{HUB}/users/login",
            f"{HUB}/repositories/myorg/app/buildhistory/",
        ]
        assert upstream.last_request.headers["Authorization"] == "Bearer session"

    @pytest.mark.asyncio
    async def test_trigger_build(self, hub_factory, upstream):
        """Test the trigger body and message."""
        upstream.add(
            "POST", f"{HUB}/repositories/myorg/app/autobuild/trigger-build/", json_body={}
        )
        *_, func = create_hub_trigger_build_tool(hub_factory)

        payload = json.loads(
            _text(
                await func(
                    namespace="myorg", repository="app", source_type="Tag", source_name="v1"
                )
            )
        )

        assert payload["message"] == "Build triggered for myorg/app from Tag v1"
        assert upstream.last_json() == {"source_type": "Tag", "source_name": "v1"}
