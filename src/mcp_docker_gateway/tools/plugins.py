"""FastMCP plugin tools."""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.models.entities import PluginPrivilege
from mcp_docker_gateway.tools.common import FiltersArg, FormatArg, TenantClientFactory, run_tool
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety
from mcp_docker_gateway.utils.json_parsing import parse_json_argument
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

PluginNameArg = Annotated[str, Field(description="Plugin name or ID")]
RemoteArg = Annotated[str, Field(description="Remote plugin reference, e.g. 'vieux/sshfs:latest'")]
GrantArg = Annotated[
    bool,
    Field(description="Grant every privilege the plugin requests"),
]


async def granted_privileges(
    client: DockerBackendClient, remote: str, grant_all_permissions: bool
) -> list[PluginPrivilege]:
    """Privileges to send with an install or upgrade.

    Without ``grant_all_permissions`` nothing is granted, and the engine
    rejects plugins that request privileges.
    """
    if not grant_all_permissions:
        return []
    return await client.get_plugin_privileges(remote)


def create_list_plugins_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_plugins(
        enabled: Annotated[
            bool | None, Field(description="Only enabled (true) or disabled (false) plugins")
        ] = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            parsed = dict(parse_json_argument(filters, "filters") or {})
            if enabled is not None:
                parsed["enabled"] = [str(enabled).lower()]
            return format_response(await client.list_plugins(parsed), format, "plugin")

        return await run_tool(factory, "docker_list_plugins", operation)

    return (
        "docker_list_plugins",
        "List installed plugins",
        OperationSafety.SAFE,
        True,
        False,
        list_plugins,
    )


def create_inspect_plugin_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_plugin(
        name: PluginNameArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_plugin(name), format, "plugin")

        return await run_tool(factory, "docker_inspect_plugin", operation)

    return (
        "docker_inspect_plugin",
        "Get detailed information about a plugin",
        OperationSafety.SAFE,
        True,
        False,
        inspect_plugin,
    )


def create_plugin_privileges_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def plugin_privileges(
        remote: RemoteArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            privileges = await client.get_plugin_privileges(remote)
            return format_response(privileges, format, "plugin_privilege")

        return await run_tool(factory, "docker_plugin_privileges", operation)

    return (
        "docker_plugin_privileges",
        "List the privileges a remote plugin requests",
        OperationSafety.SAFE,
        True,
        True,
        plugin_privileges,
    )


def create_install_plugin_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def install_plugin(
        remote: RemoteArg,
        name: Annotated[str | None, Field(description="Local name for the plugin")] = None,
        grant_all_permissions: GrantArg = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            privileges = await granted_privileges(client, remote, grant_all_permissions)
            await client.install_plugin(
                remote, name=name, privileges=privileges, auth=client.registry_auth()
            )
            logger.info(f"Installed plugin {remote}")
            suffix = f" as {name}" if name else ""
            return format_success(f"Plugin {remote} installed{suffix}")

        return await run_tool(factory, "docker_install_plugin", operation)

    return (
        "docker_install_plugin",
        "Pull and install a plugin",
        OperationSafety.MODERATE,
        False,
        True,
        install_plugin,
    )


def create_enable_plugin_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def enable_plugin(
        name: PluginNameArg,
        timeout: Annotated[int, Field(ge=0, description="Seconds to wait for activation")] = 0,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.enable_plugin(name, timeout=timeout)
            return format_success(f"Plugin {name} enabled")

        return await run_tool(factory, "docker_enable_plugin", operation)

    return (
        "docker_enable_plugin",
        "Enable a plugin",
        OperationSafety.MODERATE,
        True,
        False,
        enable_plugin,
    )


def create_disable_plugin_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def disable_plugin(
        name: PluginNameArg,
        force: Annotated[bool, Field(description="Disable even if in use")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.disable_plugin(name, force=force)
            return format_success(f"Plugin {name} disabled")

        return await run_tool(factory, "docker_disable_plugin", operation)

    return (
        "docker_disable_plugin",
        "Disable a plugin",
        OperationSafety.MODERATE,
        True,
        False,
        disable_plugin,
    )


def create_remove_plugin_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_plugin(
        name: PluginNameArg,
        force: Annotated[bool, Field(description="Remove even if enabled")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.remove_plugin(name, force=force)
            return format_success(f"Plugin {name} removed")

        return await run_tool(factory, "docker_remove_plugin", operation)

    return (
        "docker_remove_plugin",
        "Remove a plugin",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_plugin,
    )


def create_upgrade_plugin_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def upgrade_plugin(
        name: PluginNameArg,
        remote: RemoteArg,
        grant_all_permissions: GrantArg = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            privileges = await granted_privileges(client, remote, grant_all_permissions)
            await client.upgrade_plugin(
                name, remote, privileges=privileges, auth=client.registry_auth()
            )
            return format_success(f"Plugin {name} upgraded to {remote}")

        return await run_tool(factory, "docker_upgrade_plugin", operation)

    return (
        "docker_upgrade_plugin",
        "Upgrade a disabled plugin to another remote reference",
        OperationSafety.MODERATE,
        False,
        True,
        upgrade_plugin,
    )


def create_configure_plugin_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def configure_plugin(
        name: PluginNameArg,
        settings: Annotated[
            dict[str, str] | list[str] | str,
            Field(description="Settings as {'KEY': 'value'} or ['KEY=value']"),
        ],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            parsed = parse_json_argument(settings, "settings")
            if isinstance(parsed, dict):
                values = [f"{key}={value}" for key, value in parsed.items()]
            else:
                values = [str(item) for item in parsed]
            await client.configure_plugin(name, values)
            return format_success(f"Plugin {name} configured")

        return await run_tool(factory, "docker_configure_plugin", operation)

    return (
        "docker_configure_plugin",
        "Change settings of a disabled plugin",
        OperationSafety.MODERATE,
        True,
        False,
        configure_plugin,
    )


def register_plugin_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register all plugin tools with FastMCP."""
    tools = [
        create_list_plugins_tool(factory),
        create_inspect_plugin_tool(factory),
        create_plugin_privileges_tool(factory),
        create_install_plugin_tool(factory),
        create_enable_plugin_tool(factory),
        create_disable_plugin_tool(factory),
        create_remove_plugin_tool(factory),
        create_upgrade_plugin_tool(factory),
        create_configure_plugin_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
