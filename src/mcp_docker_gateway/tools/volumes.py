"""FastMCP volume tools."""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.models.requests import VolumeCreateRequest
from mcp_docker_gateway.tools.common import (
    DESC_VOLUME_NAME,
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

VolumeNameArg = Annotated[str, Field(description=DESC_VOLUME_NAME)]


def create_list_volumes_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_volumes(
        dangling: Annotated[
            bool | None, Field(description="Only volumes not referenced by any container")
        ] = None,
        driver: Annotated[str | None, Field(description="Only volumes using this driver")] = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            parsed = dict(parse_json_argument(filters, "filters") or {})
            if dangling is not None:
                parsed["dangling"] = [str(dangling).lower()]
            if driver:
                parsed["driver"] = [driver]
            listing = await client.list_volumes(parsed)
            logger.info(f"Found {len(listing.volumes)} volumes")
            return format_response(listing.volumes, format, "volume")

        return await run_tool(factory, "docker_list_volumes", operation)

    return (
        "docker_list_volumes",
        "List Docker volumes",
        OperationSafety.SAFE,
        True,
        False,
        list_volumes,
    )


def create_inspect_volume_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_volume(
        name: VolumeNameArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_volume(name), format, "volume")

        return await run_tool(factory, "docker_inspect_volume", operation)

    return (
        "docker_inspect_volume",
        "Get detailed information about a volume",
        OperationSafety.SAFE,
        True,
        False,
        inspect_volume,
    )


def create_create_volume_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def create_volume(
        name: Annotated[
            str | None, Field(description="Volume name (generated when omitted)")
        ] = None,
        driver: Annotated[str, Field(description="Volume driver")] = "local",
        driver_opts: Annotated[
            dict[str, str] | str | None, Field(description="Driver-specific options")
        ] = None,
        labels: LabelsArg = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = VolumeCreateRequest(
                name=name,
                driver=driver,
                driver_opts=parse_json_argument(driver_opts, "driver_opts"),
                labels=parse_json_argument(labels, "labels"),
            )
            volume = await client.create_volume(request)
            return format_success(f"Volume {volume.name} created", volume=volume)

        return await run_tool(factory, "docker_create_volume", operation)

    return (
        "docker_create_volume",
        "Create a new volume",
        OperationSafety.MODERATE,
        False,
        False,
        create_volume,
    )


def create_remove_volume_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_volume(
        name: VolumeNameArg,
        force: Annotated[bool, Field(description="Force removal")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.remove_volume(name, force=force)
            return format_success(f"Volume {name} removed")

        return await run_tool(factory, "docker_remove_volume", operation)

    return (
        "docker_remove_volume",
        "Remove a volume",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_volume,
    )


def create_prune_volumes_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def prune_volumes(filters: FiltersArg = None) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            result = await client.prune_volumes(parse_json_argument(filters, "filters"))
            return format_success(
                f"Pruned {len(result.volumes_deleted)} volumes",
                volumesDeleted=result.volumes_deleted,
                spaceReclaimed=result.space_reclaimed,
            )

        return await run_tool(factory, "docker_prune_volumes", operation)

    return (
        "docker_prune_volumes",
        "Remove all unused local volumes",
        OperationSafety.DESTRUCTIVE,
        False,
        False,
        prune_volumes,
    )


def register_volume_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register all volume tools with FastMCP."""
    tools = [
        create_list_volumes_tool(factory),
        create_inspect_volume_tool(factory),
        create_create_volume_tool(factory),
        create_remove_volume_tool(factory),
        create_prune_volumes_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
