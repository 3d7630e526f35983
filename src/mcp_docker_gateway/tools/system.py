"""FastMCP system tools: daemon info, version, ping, disk usage, events and registry auth."""

from typing import Annotated, Any, Literal

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.models.requests import RegistryAuth
from mcp_docker_gateway.tools.common import FiltersArg, FormatArg, TenantClientFactory, run_tool
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety
from mcp_docker_gateway.utils.json_parsing import parse_json_argument
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

EventType = Literal[
    "container",
    "image",
    "volume",
    "network",
    "daemon",
    "plugin",
    "node",
    "service",
    "secret",
    "config",
]


def create_system_info_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def system_info(format: FormatArg = ResponseFormat.JSON) -> ToolResult:  # noqa: A002
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.get_system_info(), format, "system_info")

        return await run_tool(factory, "docker_system_info", operation)

    return (
        "docker_system_info",
        "Get system-wide information about the Docker daemon",
        OperationSafety.SAFE,
        True,
        False,
        system_info,
    )


def create_version_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def version(format: FormatArg = ResponseFormat.JSON) -> ToolResult:  # noqa: A002
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.get_version(), format, "version")

        return await run_tool(factory, "docker_version", operation)

    return (
        "docker_version",
        "Get Docker engine and API version information",
        OperationSafety.SAFE,
        True,
        False,
        version,
    )


def create_ping_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def ping() -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            response = await client.ping()
            return format_success("Docker daemon is responsive", response=response)

        return await run_tool(factory, "docker_ping", operation)

    return (
        "docker_ping",
        "Check that the Docker daemon is reachable",
        OperationSafety.SAFE,
        True,
        False,
        ping,
    )


def create_disk_usage_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def disk_usage(format: FormatArg = ResponseFormat.JSON) -> ToolResult:  # noqa: A002
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.get_disk_usage(), format, "disk_usage")

        return await run_tool(factory, "docker_disk_usage", operation)

    return (
        "docker_disk_usage",
        "Get disk usage of images, containers, volumes and build cache",
        OperationSafety.SAFE,
        True,
        False,
        disk_usage,
    )


def create_events_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def events(
        since: Annotated[
            str | None, Field(description="Start of the window (UNIX timestamp or RFC 3339)")
        ] = None,
        until: Annotated[
            str | None, Field(description="End of the window, defaults to now")
        ] = None,
        type: Annotated[  # noqa: A002
            EventType | None, Field(description="Only events about this object type")
        ] = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            parsed = dict(parse_json_argument(filters, "filters") or {})
            if type:
                parsed["type"] = [type]
            result = await client.get_events(since=since, until=until, filters=parsed)
            logger.info(f"Collected {len(result)} events")
            return format_response(result, format, "event")

        return await run_tool(factory, "docker_events", operation)

    return (
        "docker_events",
        "Get Docker events for a bounded time window",
        OperationSafety.SAFE,
        True,
        False,
        events,
    )


def create_auth_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def auth(
        username: Annotated[str, Field(description="Registry username")],
        password: Annotated[str, Field(description="Registry password or token")],
        serveraddress: Annotated[
            str | None, Field(description="Registry address, defaults to Docker Hub")
        ] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            credentials = RegistryAuth(
                username=username, password=password, serveraddress=serveraddress
            )
            result = await client.auth(credentials)
            return format_success(
                result.status or "Login Succeeded",
                hasIdentityToken=bool(result.identity_token),
            )

        return await run_tool(factory, "docker_auth", operation)

    return (
        "docker_auth",
        "Validate registry credentials with the Docker daemon",
        OperationSafety.SAFE,
        True,
        True,
        auth,
    )


def register_system_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register all system tools with FastMCP."""
    tools = [
        create_system_info_tool(factory),
        create_version_tool(factory),
        create_ping_tool(factory),
        create_disk_usage_tool(factory),
        create_events_tool(factory),
        create_auth_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
