"""Network operations against the engine API."""

from typing import Any

from mcp_docker_gateway.backend.transport import BackendTransport, encode_filters
from mcp_docker_gateway.mappers import (
    map_many,
    map_network,
    map_network_created,
    map_network_prune,
    unmap_network_create,
)
from mcp_docker_gateway.models.entities import Network, NetworkCreated, NetworkPruneResult
from mcp_docker_gateway.models.requests import NetworkCreateRequest


class NetworkOperations(BackendTransport):
    async def list_networks(self, filters: dict[str, Any] | None = None) -> list[Network]:
        raw = await self._engine_request("GET", "/networks", params=encode_filters(filters))
        return map_many(raw, map_network)

    async def inspect_network(self, network_id: str, verbose: bool = False) -> Network:
        raw = await self._engine_request(
            "GET", f"/networks/{network_id}", params={"verbose": verbose or None}
        )
        return map_network(raw or {})

    async def create_network(self, request: NetworkCreateRequest) -> NetworkCreated:
        raw = await self._engine_request(
            "POST", "/networks/create", json_body=unmap_network_create(request)
        )
        return map_network_created(raw or {})

    async def remove_network(self, network_id: str) -> None:
        await self._engine_request("DELETE", f"/networks/{network_id}")

    async def connect_container(
        self,
        network_id: str,
        container_id: str,
        ipv4_address: str | None = None,
        ipv6_address: str | None = None,
        aliases: list[str] | None = None,
    ) -> None:
        endpoint: dict[str, Any] = {}
        ipam = {
            key: value
            for key, value in (("IPv4Address", ipv4_address), ("IPv6Address", ipv6_address))
            if value
        }
        if ipam:
            endpoint["IPAMConfig"] = ipam
        if aliases:
            endpoint["Aliases"] = aliases
        body: dict[str, Any] = {"Container": container_id}
        if endpoint:
            body["EndpointConfig"] = endpoint
        await self._engine_request("POST", f"/networks/{network_id}/connect", json_body=body)

    async def disconnect_container(
        self, network_id: str, container_id: str, force: bool = False
    ) -> None:
        await self._engine_request(
            "POST",
            f"/networks/{network_id}/disconnect",
            json_body={"Container": container_id, "Force": force},
        )

    async def prune_networks(self, filters: dict[str, Any] | None = None) -> NetworkPruneResult:
        raw = await self._engine_request(
            "POST", "/networks/prune", params=encode_filters(filters)
        )
        return map_network_prune(raw or {})
