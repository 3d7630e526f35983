"""Container operations against the engine API."""

from typing import Any

from mcp_docker_gateway.backend.transport import BackendTransport, encode_filters
from mcp_docker_gateway.mappers import (
    map_container,
    map_container_change,
    map_container_created,
    map_container_processes,
    map_container_prune,
    map_document,
    map_many,
    map_wait_result,
    unmap_container_create,
    unmap_container_update,
)
from mcp_docker_gateway.models.entities import (
    Container,
    ContainerChange,
    ContainerCreated,
    ContainerProcesses,
    ContainerPruneResult,
    ContainerWaitResult,
)
from mcp_docker_gateway.models.requests import ContainerCreateRequest, ContainerUpdateRequest
from mcp_docker_gateway.utils.streams import demultiplex


class ContainerOperations(BackendTransport):
    async def list_containers(
        self,
        all: bool = False,  # noqa: A002 - mirrors the engine parameter
        limit: int | None = None,
        size: bool = False,
        filters: dict[str, Any] | None = None,
    ) -> list[Container]:
        params: dict[str, Any] = {"all": all, "limit": limit, "size": size or None}
        params.update(encode_filters(filters))
        raw = await self._engine_request("GET", "/containers/json", params=params)
        return map_many(raw, map_container)

    async def inspect_container(self, container_id: str, size: bool = False) -> dict[str, Any]:
        raw = await self._engine_request(
            "GET", f"/containers/{container_id}/json", params={"size": size or None}
        )
        return map_document(raw)

    async def create_container(
        self,
        request: ContainerCreateRequest,
        name: str | None = None,
        platform: str | None = None,
    ) -> ContainerCreated:
        raw = await self._engine_request(
            "POST",
            "/containers/create",
            params={"name": name, "platform": platform},
            json_body=unmap_container_create(request),
        )
        return map_container_created(raw)

    async def start_container(self, container_id: str) -> None:
        # 304 (already started) is success
        await self._engine_request("POST", f"/containers/{container_id}/start")

    async def stop_container(self, container_id: str, timeout: int | None = None) -> None:
        await self._engine_request(
            "POST", f"/containers/{container_id}/stop", params={"t": timeout}
        )

    async def restart_container(self, container_id: str, timeout: int | None = None) -> None:
        await self._engine_request(
            "POST", f"/containers/{container_id}/restart", params={"t": timeout}
        )

    async def kill_container(self, container_id: str, signal: str | None = None) -> None:
        await self._engine_request(
            "POST", f"/containers/{container_id}/kill", params={"signal": signal}
        )

    async def pause_container(self, container_id: str) -> None:
        await self._engine_request("POST", f"/containers/{container_id}/pause")

    async def unpause_container(self, container_id: str) -> None:
        await self._engine_request("POST", f"/containers/{container_id}/unpause")

    async def remove_container(
        self,
        container_id: str,
        force: bool = False,
        volumes: bool = False,
        link: bool = False,
    ) -> None:
        await self._engine_request(
            "DELETE",
            f"/containers/{container_id}",
            params={"force": force, "v": volumes, "link": link or None},
        )

    async def rename_container(self, container_id: str, new_name: str) -> None:
        await self._engine_request(
            "POST", f"/containers/{container_id}/rename", params={"name": new_name}
        )

    async def get_container_logs(
        self,
        container_id: str,
        tail: int | str | None = None,
        timestamps: bool = False,
        since: int | None = None,
        until: int | None = None,
        stdout: bool = True,
        stderr: bool = True,
    ) -> str:
        """Fetch container logs as text with stream framing removed."""
        raw = await self._engine_request(
            "GET",
            f"/containers/{container_id}/logs",
            params={
                "stdout": stdout,
                "stderr": stderr,
                "tail": tail,
                "timestamps": timestamps,
                "since": since,
                "until": until,
                "follow": False,
            },
            expect="bytes",
        )
        return demultiplex(raw) if raw else ""

    async def get_container_stats(self, container_id: str) -> dict[str, Any]:
        raw = await self._engine_request(
            "GET", f"/containers/{container_id}/stats", params={"stream": False}
        )
        return map_document(raw)

    async def get_container_top(
        self, container_id: str, ps_args: str | None = None
    ) -> ContainerProcesses:
        raw = await self._engine_request(
            "GET", f"/containers/{container_id}/top", params={"ps_args": ps_args}
        )
        return map_container_processes(raw or {})

    async def get_container_changes(self, container_id: str) -> list[ContainerChange]:
        raw = await self._engine_request("GET", f"/containers/{container_id}/changes")
        return map_many(raw, map_container_change)

    async def wait_container(
        self, container_id: str, condition: str | None = None
    ) -> ContainerWaitResult:
        raw = await self._engine_request(
            "POST", f"/containers/{container_id}/wait", params={"condition": condition}
        )
        return map_wait_result(raw or {})

    async def prune_containers(self, filters: dict[str, Any] | None = None) -> ContainerPruneResult:
        raw = await self._engine_request(
            "POST", "/containers/prune", params=encode_filters(filters)
        )
        return map_container_prune(raw or {})

    async def update_container(
        self, container_id: str, request: ContainerUpdateRequest
    ) -> list[str]:
        """Update resource limits; returns the engine's warnings."""
        raw = await self._engine_request(
            "POST",
            f"/containers/{container_id}/update",
            json_body=unmap_container_update(request),
        )
        warnings = raw.get("Warnings") if isinstance(raw, dict) else None
        return list(warnings or [])
