"""Swarm, node, service and task operations against the engine API.

Updates of swarm objects replace the whole spec and must name the object
version they were computed from. ``get_*_spec`` fetch that snapshot in one
call; the caller edits the spec and passes it back to the matching update.
"""

from typing import Any

from mcp_docker_gateway.backend.transport import (
    BackendTransport,
    encode_filters,
    registry_auth_header,
)
from mcp_docker_gateway.mappers import (
    map_document,
    map_many,
    map_node,
    map_service,
    map_service_created,
    map_task,
    unmap_node_update,
    unmap_service_create,
    unmap_swarm_init,
    unmap_swarm_join,
)
from mcp_docker_gateway.models.entities import Service, ServiceCreated, SwarmNode, Task
from mcp_docker_gateway.models.requests import (
    NodeUpdateRequest,
    RegistryAuth,
    ServiceCreateRequest,
    SpecSnapshot,
    SwarmInitRequest,
    SwarmJoinRequest,
)
from mcp_docker_gateway.utils.streams import demultiplex


def spec_snapshot(raw: Any) -> SpecSnapshot:
    """Extract version index and wire spec from a swarm object document."""
    document = raw if isinstance(raw, dict) else {}
    version = document.get("Version") or {}
    spec = document.get("Spec") or {}
    return SpecSnapshot(version=int(version.get("Index", 0)), spec=dict(spec))


class SwarmOperations(BackendTransport):
    # Swarm

    async def inspect_swarm(self) -> dict[str, Any]:
        raw = await self._engine_request("GET", "/swarm")
        return map_document(raw)

    async def init_swarm(self, request: SwarmInitRequest) -> str:
        """Initialize a swarm and return the node ID of this manager."""
        raw = await self._engine_request("POST", "/swarm/init", json_body=unmap_swarm_init(request))
        return raw if isinstance(raw, str) else ""

    async def join_swarm(self, request: SwarmJoinRequest) -> None:
        await self._engine_request("POST", "/swarm/join", json_body=unmap_swarm_join(request))

    async def leave_swarm(self, force: bool = False) -> None:
        await self._engine_request("POST", "/swarm/leave", params={"force": force})

    async def get_swarm_spec(self) -> SpecSnapshot:
        return spec_snapshot(await self._engine_request("GET", "/swarm"))

    async def update_swarm(
        self,
        version: int,
        spec: dict[str, Any],
        rotate_worker_token: bool = False,
        rotate_manager_token: bool = False,
        rotate_manager_unlock_key: bool = False,
    ) -> None:
        await self._engine_request(
            "POST",
            "/swarm/update",
            params={
                "version": version,
                "rotateWorkerToken": rotate_worker_token,
                "rotateManagerToken": rotate_manager_token,
                "rotateManagerUnlockKey": rotate_manager_unlock_key,
            },
            json_body=spec,
        )

    async def get_swarm_unlock_key(self) -> str:
        raw = await self._engine_request("GET", "/swarm/unlockkey")
        return str(raw.get("UnlockKey", "")) if isinstance(raw, dict) else ""

    async def unlock_swarm(self, unlock_key: str) -> None:
        await self._engine_request("POST", "/swarm/unlock", json_body={"UnlockKey": unlock_key})

    # Nodes

    async def list_nodes(self, filters: dict[str, Any] | None = None) -> list[SwarmNode]:
        raw = await self._engine_request("GET", "/nodes", params=encode_filters(filters))
        return map_many(raw, map_node)

    async def inspect_node(self, node_id: str) -> SwarmNode:
        raw = await self._engine_request("GET", f"/nodes/{node_id}")
        return map_node(raw or {})

    async def remove_node(self, node_id: str, force: bool = False) -> None:
        await self._engine_request("DELETE", f"/nodes/{node_id}", params={"force": force})

    async def update_node(self, node_id: str, version: int, request: NodeUpdateRequest) -> None:
        await self._engine_request(
            "POST",
            f"/nodes/{node_id}/update",
            params={"version": version},
            json_body=unmap_node_update(request),
        )

    # Services

    async def list_services(
        self, filters: dict[str, Any] | None = None, status: bool = False
    ) -> list[Service]:
        params: dict[str, Any] = {"status": status or None}
        params.update(encode_filters(filters))
        raw = await self._engine_request("GET", "/services", params=params)
        return map_many(raw, map_service)

    async def inspect_service(self, service_id: str) -> Service:
        raw = await self._engine_request("GET", f"/services/{service_id}")
        return map_service(raw or {})

    async def get_service_spec(self, service_id: str) -> SpecSnapshot:
        return spec_snapshot(await self._engine_request("GET", f"/services/{service_id}"))

    async def create_service(
        self, request: ServiceCreateRequest, auth: RegistryAuth | None = None
    ) -> ServiceCreated:
        raw = await self._engine_request(
            "POST",
            "/services/create",
            json_body=unmap_service_create(request),
            headers=registry_auth_header(auth),
        )
        return map_service_created(raw or {})

    async def update_service(
        self,
        service_id: str,
        version: int,
        spec: dict[str, Any],
        auth: RegistryAuth | None = None,
    ) -> list[str]:
        """Replace a service spec; returns the engine's warnings."""
        raw = await self._engine_request(
            "POST",
            f"/services/{service_id}/update",
            params={"version": version},
            json_body=spec,
            headers=registry_auth_header(auth),
        )
        warnings = raw.get("Warnings") if isinstance(raw, dict) else None
        return list(warnings or [])

    async def remove_service(self, service_id: str) -> None:
        await self._engine_request("DELETE", f"/services/{service_id}")

    async def get_service_logs(
        self,
        service_id: str,
        tail: int | str | None = None,
        timestamps: bool = False,
    ) -> str:
        raw = await self._engine_request(
            "GET",
            f"/services/{service_id}/logs",
            params={"stdout": True, "stderr": True, "tail": tail, "timestamps": timestamps},
            expect="bytes",
        )
        return demultiplex(raw) if raw else ""

    # Tasks

    async def list_tasks(self, filters: dict[str, Any] | None = None) -> list[Task]:
        raw = await self._engine_request("GET", "/tasks", params=encode_filters(filters))
        return map_many(raw, map_task)

    async def inspect_task(self, task_id: str) -> Task:
        raw = await self._engine_request("GET", f"/tasks/{task_id}")
        return map_task(raw or {})

    async def get_task_logs(
        self,
        task_id: str,
        tail: int | str | None = None,
        timestamps: bool = False,
    ) -> str:
        raw = await self._engine_request(
            "GET",
            f"/tasks/{task_id}/logs",
            params={"stdout": True, "stderr": True, "tail": tail, "timestamps": timestamps},
            expect="bytes",
        )
        return demultiplex(raw) if raw else ""
