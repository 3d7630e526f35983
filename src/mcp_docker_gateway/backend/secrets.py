"""Swarm secret and config operations against the engine API.

Both object kinds carry base64 ``Data``; callers pass plain text and the
encoding happens here.
"""

import base64
from typing import Any

from mcp_docker_gateway.backend.swarm import spec_snapshot
from mcp_docker_gateway.backend.transport import BackendTransport, encode_filters
from mcp_docker_gateway.mappers import map_many, map_secret, map_swarm_config
from mcp_docker_gateway.models.entities import Secret, SwarmConfig
from mcp_docker_gateway.models.requests import SpecSnapshot


def encode_data(data: str) -> str:
    return base64.b64encode(data.encode("utf-8")).decode("ascii")


def _created_id(raw: Any) -> str:
    return str(raw.get("ID", "")) if isinstance(raw, dict) else ""


class SecretOperations(BackendTransport):
    # Secrets

    async def list_secrets(self, filters: dict[str, Any] | None = None) -> list[Secret]:
        raw = await self._engine_request("GET", "/secrets", params=encode_filters(filters))
        return map_many(raw, map_secret)

    async def inspect_secret(self, secret_id: str) -> Secret:
        raw = await self._engine_request("GET", f"/secrets/{secret_id}")
        return map_secret(raw or {})

    async def create_secret(
        self,
        name: str,
        data: str,
        labels: dict[str, str] | None = None,
    ) -> str:
        """Create a secret and return its ID."""
        raw = await self._engine_request(
            "POST",
            "/secrets/create",
            json_body={"Name": name, "Data": encode_data(data), "Labels": labels or {}},
        )
        return _created_id(raw)

    async def get_secret_spec(self, secret_id: str) -> SpecSnapshot:
        return spec_snapshot(await self._engine_request("GET", f"/secrets/{secret_id}"))

    async def update_secret(self, secret_id: str, version: int, spec: dict[str, Any]) -> None:
        # The engine only accepts label changes for secrets.
        await self._engine_request(
            "POST",
            f"/secrets/{secret_id}/update",
            params={"version": version},
            json_body=spec,
        )

    async def remove_secret(self, secret_id: str) -> None:
        await self._engine_request("DELETE", f"/secrets/{secret_id}")

    # Configs

    async def list_configs(self, filters: dict[str, Any] | None = None) -> list[SwarmConfig]:
        raw = await self._engine_request("GET", "/configs", params=encode_filters(filters))
        return map_many(raw, map_swarm_config)

    async def inspect_config(self, config_id: str) -> SwarmConfig:
        raw = await self._engine_request("GET", f"/configs/{config_id}")
        return map_swarm_config(raw or {})

    async def create_config(
        self,
        name: str,
        data: str,
        labels: dict[str, str] | None = None,
    ) -> str:
        raw = await self._engine_request(
            "POST",
            "/configs/create",
            json_body={"Name": name, "Data": encode_data(data), "Labels": labels or {}},
        )
        return _created_id(raw)

    async def get_config_spec(self, config_id: str) -> SpecSnapshot:
        return spec_snapshot(await self._engine_request("GET", f"/configs/{config_id}"))

    async def update_config(self, config_id: str, version: int, spec: dict[str, Any]) -> None:
        await self._engine_request(
            "POST",
            f"/configs/{config_id}/update",
            params={"version": version},
            json_body=spec,
        )

    async def remove_config(self, config_id: str) -> None:
        await self._engine_request("DELETE", f"/configs/{config_id}")
