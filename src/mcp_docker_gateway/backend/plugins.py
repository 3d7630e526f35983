"""Plugin operations against the engine API."""

from typing import Any

from mcp_docker_gateway.backend.transport import (
    BackendTransport,
    encode_filters,
    registry_auth_header,
)
from mcp_docker_gateway.mappers import (
    map_many,
    map_plugin,
    map_plugin_privilege,
    unmap_plugin_privilege,
)
from mcp_docker_gateway.models.entities import Plugin, PluginPrivilege
from mcp_docker_gateway.models.requests import RegistryAuth
from mcp_docker_gateway.utils.streams import check_progress


class PluginOperations(BackendTransport):
    async def list_plugins(self, filters: dict[str, Any] | None = None) -> list[Plugin]:
        raw = await self._engine_request("GET", "/plugins", params=encode_filters(filters))
        return map_many(raw, map_plugin)

    async def inspect_plugin(self, name: str) -> Plugin:
        raw = await self._engine_request("GET", f"/plugins/{name}/json")
        return map_plugin(raw or {})

    async def get_plugin_privileges(self, remote: str) -> list[PluginPrivilege]:
        raw = await self._engine_request("GET", "/plugins/privileges", params={"remote": remote})
        return map_many(raw, map_plugin_privilege)

    async def install_plugin(
        self,
        remote: str,
        name: str | None = None,
        privileges: list[PluginPrivilege] | None = None,
        auth: RegistryAuth | None = None,
    ) -> None:
        """Pull and install a plugin, granting exactly ``privileges``."""
        raw = await self._engine_request(
            "POST",
            "/plugins/pull",
            params={"remote": remote, "name": name},
            json_body=[unmap_plugin_privilege(p) for p in privileges or []],
            headers=registry_auth_header(auth),
        )
        check_progress(raw)

    async def enable_plugin(self, name: str, timeout: int = 0) -> None:
        await self._engine_request(
            "POST", f"/plugins/{name}/enable", params={"timeout": timeout}
        )

    async def disable_plugin(self, name: str, force: bool = False) -> None:
        await self._engine_request(
            "POST", f"/plugins/{name}/disable", params={"force": force}
        )

    async def remove_plugin(self, name: str, force: bool = False) -> None:
        await self._engine_request("DELETE", f"/plugins/{name}", params={"force": force})

    async def upgrade_plugin(
        self,
        name: str,
        remote: str,
        privileges: list[PluginPrivilege] | None = None,
        auth: RegistryAuth | None = None,
    ) -> None:
        raw = await self._engine_request(
            "POST",
            f"/plugins/{name}/upgrade",
            params={"remote": remote},
            json_body=[unmap_plugin_privilege(p) for p in privileges or []],
            headers=registry_auth_header(auth),
        )
        check_progress(raw)

    async def configure_plugin(self, name: str, settings: list[str]) -> None:
        """Apply ``KEY=value`` settings to a disabled plugin."""
        await self._engine_request("POST", f"/plugins/{name}/set", json_body=settings)
