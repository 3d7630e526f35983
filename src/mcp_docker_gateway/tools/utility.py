"""FastMCP utility tools, available whatever credentials the tenant supplied."""

from typing import Any

from fastmcp.tools.tool import ToolResult

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import format_response
from mcp_docker_gateway.tools.common import TenantClientFactory, run_tool
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety


def create_test_connection_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def test_connection() -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.test_connection())

        return await run_tool(factory, "docker_test_connection", operation)

    return (
        "docker_test_connection",
        "Check whether the Docker daemon for the current credentials is reachable",
        OperationSafety.SAFE,
        True,
        False,
        test_connection,
    )


def register_utility_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    tools = [create_test_connection_tool(factory)]
    return register_tools_with_filtering(app, tools, filter_config, Capability.UTILITY)
