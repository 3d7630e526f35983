"""Unit tests for tools/secrets.py and tools/plugins.py."""

import base64
import json

import pytest
from fastmcp.exceptions import ToolError

from mcp_docker_gateway.tools.plugins import (
    create_configure_plugin_tool,
    create_install_plugin_tool,
    create_list_plugins_tool,
    create_plugin_privileges_tool,
    create_remove_plugin_tool,
    create_upgrade_plugin_tool,
)
from mcp_docker_gateway.tools.secrets import (
    create_create_config_tool,
    create_create_secret_tool,
    create_inspect_secret_tool,
    create_remove_secret_tool,
    create_update_config_tool,
    create_update_secret_tool,
)
from mcp_docker_gateway.utils.fastmcp_helpers import OperationSafety

ENGINE = "/v1.47"

PRIVILEGES = [
    {"Name": "network", "Description": "", "Value": ["host"]},
    {"Name": "mount", "Description": "", "Value": ["/var/lib/docker/plugins/"]},
]


def _text(result) -> str:
    return result.content[0].text


class TestSecrets:
    """Test secret tools."""

    @pytest.mark.asyncio
    async def test_create_encodes_data(self, factory, upstream):
        """Test that plain-text data is base64 encoded before sending."""
        upstream.add("POST", f"{ENGINE}/secrets/create", json_body={"ID": "sec1"}, status=201)
        *_, func = create_create_secret_tool(factory)

        payload = json.loads(_text(await func(name="db-password", data="s3cret")))

        assert payload == {
            "success": True,
            "message": "Secret db-password created",
            "secretId": "sec1",
        }
        body = upstream.last_json()
        assert base64.b64decode(body["Data"]) == b"s3cret"
        assert body["Labels"] == {}

    @pytest.mark.asyncio
    async def test_inspect_metadata(self, factory, upstream):
        """Test that secret metadata is normalized."""
        upstream.add(
            "GET",
            f"{ENGINE}/secrets/sec1",
            json_body={
                "ID": "sec1",
                "Version": {"Index": 5},
                "Spec": {"Name": "db-password", "Labels": {"app": "db"}},
            },
        )
        *_, func = create_inspect_secret_tool(factory)

        payload = json.loads(_text(await func(secret_id="sec1")))

        assert payload["version"]["index"] == 5
        assert payload["spec"]["name"] == "db-password"
        assert payload["spec"]["labels"] == {"app": "db"}

    @pytest.mark.asyncio
    async def test_update_replaces_labels(self, factory, upstream):
        """Test the read-modify-write of secret labels."""
        upstream.add(
            "GET",
            f"{ENGINE}/secrets/sec1",
            json_body={
                "ID": "sec1",
                "Version": {"Index": 5},
                "Spec": {"Name": "db-password", "Labels": {"app": "db"}},
            },
        )
        upstream.add("POST", f"{ENGINE}/secrets/sec1/update", status=200)
        *_, func = create_update_secret_tool(factory)

        payload = json.loads(_text(await func(secret_id="sec1", labels='{"app": "billing"}')))

        assert payload["message"] == "Secret sec1 updated"
        assert upstream.last_request.url.params["version"] == "5"
        assert upstream.last_json() == {"Name": "db-password", "Labels": {"app": "billing"}}

    @pytest.mark.asyncio
    async def test_remove(self, factory, upstream):
        """Test secret removal."""
        upstream.add("DELETE", f"{ENGINE}/secrets/sec1", status=204)
        _, _, safety, _, _, func = create_remove_secret_tool(factory)

        payload = json.loads(_text(await func(secret_id="sec1")))

        assert safety == OperationSafety.DESTRUCTIVE
        assert payload["message"] == "Secret sec1 removed"


class TestConfigs:
    """Test config tools."""

    @pytest.mark.asyncio
    async def test_create_with_labels(self, factory, upstream):
        """Test config creation."""
        upstream.add("POST", f"{ENGINE}/configs/create", json_body={"ID": "cfg1"}, status=201)
        *_, func = create_create_config_tool(factory)

        payload = json.loads(
            _text(await func(name="nginx.conf", data="server {}", labels={"app": "web"}))
        )

        assert payload["configId"] == "cfg1"
        body = upstream.last_json()
        assert body["Name"] == "nginx.conf"
        assert base64.b64decode(body["Data"]) == b"server {}"
        assert body["Labels"] == {"app": "web"}

    @pytest.mark.asyncio
    async def test_update_keeps_data(self, factory, upstream):
        """Test that the config data survives a label update."""
        upstream.add(
            "GET",
            f"{ENGINE}/configs/cfg1",
            json_body={
                "ID": "cfg1",
                "Version": {"Index": 9},
                "Spec": {"Name": "nginx.conf", "Data": "c2VydmVyIHt9"},
            },
        )
        upstream.add("POST", f"{ENGINE}/configs/cfg1/update", status=200)
        *_, func = create_update_config_tool(factory)

        await func(config_id="cfg1", labels={"rev": "2"})

        assert upstream.last_request.url.params["version"] == "9"
        assert upstream.last_json() == {
            "Name": "nginx.conf",
            "Data": "c2VydmVyIHt9",
            "Labels": {"rev": "2"},
        }


class TestPlugins:
    """Test plugin tools."""

    @pytest.mark.asyncio
    async def test_list_enabled_filter(self, factory, upstream):
        """Test the enabled filter and plugin mapping."""
        upstream.add(
            "GET",
            f"{ENGINE}/plugins",
            json_body=[{"Id": "p1", "Name": "vieux/sshfs:latest", "Enabled": True}],
        )
        *_, func = create_list_plugins_tool(factory)

        payload = json.loads(_text(await func(enabled=True)))

        assert payload[0]["name"] == "vieux/sshfs:latest"
        assert payload[0]["enabled"] is True
        filters = json.loads(upstream.last_request.url.params["filters"])
        assert filters == {"enabled": ["true"]}

    @pytest.mark.asyncio
    async def test_privileges(self, factory, upstream):
        """Test listing the privileges a remote plugin requests."""
        upstream.add("GET", f"{ENGINE}/plugins/privileges", json_body=PRIVILEGES)
        *_, func = create_plugin_privileges_tool(factory)

        payload = json.loads(_text(await func(remote="vieux/sshfs")))

        assert [p["name"] for p in payload] == ["network", "mount"]
        assert upstream.last_request.url.params["remote"] == "vieux/sshfs"

    @pytest.mark.asyncio
    async def test_install_without_grant(self, factory, upstream):
        """Test that nothing is granted, or even fetched, without consent."""
        upstream.add("POST", f"{ENGINE}/plugins/pull", status=204)
        *_, func = create_install_plugin_tool(factory)

        payload = json.loads(_text(await func(remote="vieux/sshfs")))

        assert payload["message"] == "Plugin vieux/sshfs installed"
        assert [r.url.path for r in upstream.requests] == [f"{ENGINE}/plugins/pull"]
        assert upstream.last_json() == []

    @pytest.mark.asyncio
    async def test_install_with_grant(self, factory, upstream):
        """Test that granting sends back exactly the requested privileges."""
        upstream.add("GET", f"{ENGINE}/plugins/privileges", json_body=PRIVILEGES)
        upstream.add("POST", f"{ENGINE}/plugins/pull", status=204)
        *_, func = create_install_plugin_tool(factory)

        payload = json.loads(
            _text(await func(remote="vieux/sshfs", name="sshfs", grant_all_permissions=True))
        )

        assert payload["message"] == "Plugin vieux/sshfs installed as sshfs"
        assert upstream.last_json() == PRIVILEGES
        params = upstream.last_request.url.params
        assert params["remote"] == "vieux/sshfs"
        assert params["name"] == "sshfs"

    @pytest.mark.asyncio
    async def test_install_rejected_privileges(self, factory, upstream):
        """Test the engine's refusal when privileges were not granted."""
        upstream.add(
            "POST",
            f"{ENGINE}/plugins/pull",
            json_body={"message": "privileges not granted"},
            status=400,
        )
        *_, func = create_install_plugin_tool(factory)

        with pytest.raises(ToolError) as exc_info:
            await func(remote="vieux/sshfs")

        assert json.loads(str(exc_info.value))["details"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_install_error_inside_stream(self, factory, upstream):
        """Test that a pull failure reported in the progress stream fails the install."""
        upstream.add(
            "POST",
            f"{ENGINE}/plugins/pull",
            text='{"status":"Pulling"}\n{"error":"pull access denied for vieux/nope"}\n',
        )
        *_, func = create_install_plugin_tool(factory)

        with pytest.raises(ToolError) as exc_info:
            await func(remote="vieux/nope")

        assert json.loads(str(exc_info.value))["details"]["code"] == "AUTHENTICATION_FAILED"

    @pytest.mark.asyncio
    async def test_upgrade(self, factory, upstream):
        """Test the upgrade path and message."""
        upstream.add("POST", f"{ENGINE}/plugins/sshfs/upgrade", status=204)
        *_, func = create_upgrade_plugin_tool(factory)

        payload = json.loads(_text(await func(name="sshfs", remote="vieux/sshfs:next")))

        assert payload["message"] == "Plugin sshfs upgraded to vieux/sshfs:next"
        assert upstream.last_request.url.params["remote"] == "vieux/sshfs:next"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "settings",
        [{"DEBUG": "1", "LOG": "info"}, ["DEBUG=1", "LOG=info"], '{"DEBUG": "1", "LOG": "info"}'],
    )
    async def test_configure_forms(self, factory, upstream, settings):
        """Test that every settings form becomes KEY=value strings."""
        upstream.add("POST", f"{ENGINE}/plugins/sshfs/set", status=204)
        *_, func = create_configure_plugin_tool(factory)

        await func(name="sshfs", settings=settings)

        assert upstream.last_json() == ["DEBUG=1", "LOG=info"]

    @pytest.mark.asyncio
    async def test_remove_force(self, factory, upstream):
        """Test plugin removal."""
        upstream.add("DELETE", f"{ENGINE}/plugins/sshfs", status=200)
        *_, func = create_remove_plugin_tool(factory)

        payload = json.loads(_text(await func(name="sshfs", force=True)))

        assert payload["message"] == "Plugin sshfs removed"
        assert upstream.last_request.url.params["force"] == "true"
