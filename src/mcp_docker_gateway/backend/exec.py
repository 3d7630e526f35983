"""Exec session operations against the engine API."""

from mcp_docker_gateway.backend.transport import BackendTransport
from mcp_docker_gateway.mappers import map_exec_inspect, unmap_exec_create
from mcp_docker_gateway.models.entities import ExecInspect
from mcp_docker_gateway.models.requests import ExecCreateRequest
from mcp_docker_gateway.utils.streams import demultiplex


class ExecOperations(BackendTransport):
    async def create_exec(self, container_id: str, request: ExecCreateRequest) -> str:
        """Create an exec instance and return its ID."""
        raw = await self._engine_request(
            "POST",
            f"/containers/{container_id}/exec",
            json_body=unmap_exec_create(request),
        )
        return str(raw.get("Id", "")) if isinstance(raw, dict) else ""

    async def start_exec(self, exec_id: str, detach: bool = False, tty: bool = False) -> str:
        """Start an exec instance.

        Attached starts wait for the process to finish and return its output
        with stream framing removed. Detached starts return an empty string.
        """
        raw = await self._engine_request(
            "POST",
            f"/exec/{exec_id}/start",
            json_body={"Detach": detach, "Tty": tty},
            expect="bytes",
        )
        return demultiplex(raw) if raw else ""

    async def inspect_exec(self, exec_id: str) -> ExecInspect:
        raw = await self._engine_request("GET", f"/exec/{exec_id}/json")
        return map_exec_inspect(raw or {})

    async def resize_exec(self, exec_id: str, height: int, width: int) -> None:
        await self._engine_request(
            "POST", f"/exec/{exec_id}/resize", params={"h": height, "w": width}
        )
