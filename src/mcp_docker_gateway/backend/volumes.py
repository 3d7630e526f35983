"""Volume operations against the engine API."""

from typing import Any

from mcp_docker_gateway.backend.transport import BackendTransport, encode_filters
from mcp_docker_gateway.mappers import (
    map_volume,
    map_volume_list,
    map_volume_prune,
    unmap_volume_create,
)
from mcp_docker_gateway.models.entities import Volume, VolumeList, VolumePruneResult
from mcp_docker_gateway.models.requests import VolumeCreateRequest


class VolumeOperations(BackendTransport):
    async def list_volumes(self, filters: dict[str, Any] | None = None) -> VolumeList:
        raw = await self._engine_request("GET", "/volumes", params=encode_filters(filters))
        return map_volume_list(raw or {})

    async def inspect_volume(self, name: str) -> Volume:
        raw = await self._engine_request("GET", f"/volumes/{name}")
        return map_volume(raw or {})

    async def create_volume(self, request: VolumeCreateRequest) -> Volume:
        raw = await self._engine_request(
            "POST", "/volumes/create", json_body=unmap_volume_create(request)
        )
        return map_volume(raw or {})

    async def remove_volume(self, name: str, force: bool = False) -> None:
        await self._engine_request("DELETE", f"/volumes/{name}", params={"force": force})

    async def prune_volumes(self, filters: dict[str, Any] | None = None) -> VolumePruneResult:
        raw = await self._engine_request("POST", "/volumes/prune", params=encode_filters(filters))
        return map_volume_prune(raw or {})
