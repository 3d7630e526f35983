"""FastMCP network tools."""

from typing import Annotated, Any, Literal

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.models.requests import NetworkCreateRequest
from mcp_docker_gateway.tools.common import (
    DESC_CONTAINER_ID,
    DESC_NETWORK_ID,
    FiltersArg,
    FormatArg,
    LabelsArg,
    TenantClientFactory,
    run_tool,
)
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety
from mcp_docker_gateway.utils.json_parsing import parse_json_argument
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

NetworkIdArg = Annotated[str, Field(description=DESC_NETWORK_ID)]


def create_list_networks_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_networks(
        driver: Annotated[str | None, Field(description="Only networks using this driver")] = None,
        scope: Annotated[
            Literal["local", "swarm", "global"] | None, Field(description="Only networks in scope")
        ] = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            parsed = dict(parse_json_argument(filters, "filters") or {})
            if driver:
                parsed["driver"] = [driver]
            if scope:
                parsed["scope"] = [scope]
            networks = await client.list_networks(parsed)
            logger.info(f"Found {len(networks)} networks")
            return format_response(networks, format, "network")

        return await run_tool(factory, "docker_list_networks", operation)

    return (
        "docker_list_networks",
        "List Docker networks with optional filters",
        OperationSafety.SAFE,
        True,
        False,
        list_networks,
    )


def create_inspect_network_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_network(
        network_id: NetworkIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_network(network_id), format, "network")

        return await run_tool(factory, "docker_inspect_network", operation)

    return (
        "docker_inspect_network",
        "Get detailed information about a Docker network",
        OperationSafety.SAFE,
        True,
        False,
        inspect_network,
    )


def create_create_network_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def create_network(  # noqa: PLR0913 - Docker API requires these parameters
        name: Annotated[str, Field(description="Network name")],
        driver: Annotated[
            str, Field(description="Network driver (bridge, overlay, ...)")
        ] = "bridge",
        internal: Annotated[bool, Field(description="Restrict external access")] = False,
        attachable: Annotated[
            bool, Field(description="Allow standalone containers on swarm networks")
        ] = False,
        enable_ipv6: Annotated[bool, Field(description="Enable IPv6")] = False,
        subnet: Annotated[str | None, Field(description="Subnet in CIDR form")] = None,
        gateway: Annotated[str | None, Field(description="Gateway address")] = None,
        ip_range: Annotated[str | None, Field(description="Allocation range in CIDR form")] = None,
        options: Annotated[
            dict[str, str] | str | None, Field(description="Driver-specific options")
        ] = None,
        labels: LabelsArg = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = NetworkCreateRequest(
                name=name,
                driver=driver,
                internal=internal or None,
                attachable=attachable or None,
                enable_ipv6=enable_ipv6 or None,
                subnet=subnet,
                gateway=gateway,
                ip_range=ip_range,
                options=parse_json_argument(options, "options"),
                labels=parse_json_argument(labels, "labels"),
            )
            created = await client.create_network(request)
            logger.info(f"Created network {name} ({created.id})")
            return format_success(
                f"Network {name} created", networkId=created.id, warning=created.warning
            )

        return await run_tool(factory, "docker_create_network", operation)

    return (
        "docker_create_network",
        "Create a new Docker network",
        OperationSafety.MODERATE,
        False,
        False,
        create_network,
    )


def create_remove_network_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_network(network_id: NetworkIdArg) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.remove_network(network_id)
            return format_success(f"Network {network_id} removed")

        return await run_tool(factory, "docker_remove_network", operation)

    return (
        "docker_remove_network",
        "Remove a Docker network",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_network,
    )


def create_connect_network_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def connect_network(
        network_id: NetworkIdArg,
        container_id: Annotated[str, Field(description=DESC_CONTAINER_ID)],
        ipv4_address: Annotated[str | None, Field(description="IPv4 address")] = None,
        ipv6_address: Annotated[str | None, Field(description="IPv6 address")] = None,
        aliases: Annotated[list[str] | None, Field(description="Network-scoped aliases")] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.connect_container(
                network_id,
                container_id,
                ipv4_address=ipv4_address,
                ipv6_address=ipv6_address,
                aliases=aliases,
            )
            return format_success(f"Container {container_id} connected to network {network_id}")

        return await run_tool(factory, "docker_connect_network", operation)

    return (
        "docker_connect_network",
        "Connect a container to a network",
        OperationSafety.MODERATE,
        False,
        False,
        connect_network,
    )


def create_disconnect_network_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def disconnect_network(
        network_id: NetworkIdArg,
        container_id: Annotated[str, Field(description=DESC_CONTAINER_ID)],
        force: Annotated[bool, Field(description="Force disconnection")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.disconnect_container(network_id, container_id, force=force)
            return format_success(
                f"Container {container_id} disconnected from network {network_id}"
            )

        return await run_tool(factory, "docker_disconnect_network", operation)

    return (
        "docker_disconnect_network",
        "Disconnect a container from a network",
        OperationSafety.MODERATE,
        False,
        False,
        disconnect_network,
    )


def create_prune_networks_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def prune_networks(filters: FiltersArg = None) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            result = await client.prune_networks(parse_json_argument(filters, "filters"))
            return format_success(
                f"Pruned {len(result.networks_deleted)} networks",
                networksDeleted=result.networks_deleted,
            )

        return await run_tool(factory, "docker_prune_networks", operation)

    return (
        "docker_prune_networks",
        "Remove all unused networks",
        OperationSafety.DESTRUCTIVE,
        False,
        False,
        prune_networks,
    )


def register_network_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register all network tools with FastMCP."""
    tools = [
        create_list_networks_tool(factory),
        create_inspect_network_tool(factory),
        create_create_network_tool(factory),
        create_remove_network_tool(factory),
        create_connect_network_tool(factory),
        create_disconnect_network_tool(factory),
        create_prune_networks_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
