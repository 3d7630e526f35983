"""FastMCP tools for swarm secrets and configs.

The two object kinds share a shape: plain-text data goes in, only metadata
comes back out. Secret payloads are never returned by the engine.
"""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.tools.common import (
    FiltersArg,
    FormatArg,
    LabelsArg,
    TenantClientFactory,
    run_tool,
)
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety
from mcp_docker_gateway.utils.json_parsing import parse_json_argument

SecretIdArg = Annotated[str, Field(description="Secret ID or name")]
ConfigIdArg = Annotated[str, Field(description="Config ID or name")]
DataArg = Annotated[str, Field(description="Plain-text content, encoded before sending")]


# Secrets


def create_list_secrets_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_secrets(
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            secrets = await client.list_secrets(parse_json_argument(filters, "filters"))
            return format_response(secrets, format, "secret")

        return await run_tool(factory, "docker_list_secrets", operation)

    return (
        "docker_list_secrets",
        "List swarm secrets (metadata only)",
        OperationSafety.SAFE,
        True,
        False,
        list_secrets,
    )


def create_inspect_secret_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_secret(
        secret_id: SecretIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_secret(secret_id), format, "secret")

        return await run_tool(factory, "docker_inspect_secret", operation)

    return (
        "docker_inspect_secret",
        "Get metadata of a swarm secret",
        OperationSafety.SAFE,
        True,
        False,
        inspect_secret,
    )


def create_create_secret_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def create_secret(
        name: Annotated[str, Field(description="Secret name")],
        data: DataArg,
        labels: LabelsArg = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            secret_id = await client.create_secret(
                name, data, labels=parse_json_argument(labels, "labels")
            )
            return format_success(f"Secret {name} created", secretId=secret_id)

        return await run_tool(factory, "docker_create_secret", operation)

    return (
        "docker_create_secret",
        "Create a swarm secret",
        OperationSafety.MODERATE,
        False,
        False,
        create_secret,
    )


def create_update_secret_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def update_secret(
        secret_id: SecretIdArg,
        labels: Annotated[
            dict[str, str] | str, Field(description="Replacement labels. Example: {'env': 'prod'}")
        ],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            snapshot = await client.get_secret_spec(secret_id)
            spec = {**snapshot.spec, "Labels": parse_json_argument(labels, "labels")}
            await client.update_secret(secret_id, snapshot.version, spec)
            return format_success(f"Secret {secret_id} updated")

        return await run_tool(factory, "docker_update_secret", operation)

    return (
        "docker_update_secret",
        "Replace the labels of a swarm secret",
        OperationSafety.MODERATE,
        True,
        False,
        update_secret,
    )


def create_remove_secret_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_secret(secret_id: SecretIdArg) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.remove_secret(secret_id)
            return format_success(f"Secret {secret_id} removed")

        return await run_tool(factory, "docker_remove_secret", operation)

    return (
        "docker_remove_secret",
        "Remove a swarm secret",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_secret,
    )


# Configs


def create_list_configs_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_configs(
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            configs = await client.list_configs(parse_json_argument(filters, "filters"))
            return format_response(configs, format, "config")

        return await run_tool(factory, "docker_list_configs", operation)

    return (
        "docker_list_configs",
        "List swarm configs",
        OperationSafety.SAFE,
        True,
        False,
        list_configs,
    )


def create_inspect_config_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_config(
        config_id: ConfigIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_config(config_id), format, "config")

        return await run_tool(factory, "docker_inspect_config", operation)

    return (
        "docker_inspect_config",
        "Get a swarm config, including its base64 data",
        OperationSafety.SAFE,
        True,
        False,
        inspect_config,
    )


def create_create_config_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def create_config(
        name: Annotated[str, Field(description="Config name")],
        data: DataArg,
        labels: LabelsArg = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            config_id = await client.create_config(
                name, data, labels=parse_json_argument(labels, "labels")
            )
            return format_success(f"Config {name} created", configId=config_id)

        return await run_tool(factory, "docker_create_config", operation)

    return (
        "docker_create_config",
        "Create a swarm config",
        OperationSafety.MODERATE,
        False,
        False,
        create_config,
    )


def create_update_config_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def update_config(
        config_id: ConfigIdArg,
        labels: Annotated[
            dict[str, str] | str, Field(description="Replacement labels. Example: {'env': 'prod'}")
        ],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            snapshot = await client.get_config_spec(config_id)
            spec = {**snapshot.spec, "Labels": parse_json_argument(labels, "labels")}
            await client.update_config(config_id, snapshot.version, spec)
            return format_success(f"Config {config_id} updated")

        return await run_tool(factory, "docker_update_config", operation)

    return (
        "docker_update_config",
        "Replace the labels of a swarm config",
        OperationSafety.MODERATE,
        True,
        False,
        update_config,
    )


def create_remove_config_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_config(config_id: ConfigIdArg) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.remove_config(config_id)
            return format_success(f"Config {config_id} removed")

        return await run_tool(factory, "docker_remove_config", operation)

    return (
        "docker_remove_config",
        "Remove a swarm config",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_config,
    )


def register_secret_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register secret and config tools with FastMCP."""
    tools = [
        create_list_secrets_tool(factory),
        create_inspect_secret_tool(factory),
        create_create_secret_tool(factory),
        create_update_secret_tool(factory),
        create_remove_secret_tool(factory),
        create_list_configs_tool(factory),
        create_inspect_config_tool(factory),
        create_create_config_tool(factory),
        create_update_config_tool(factory),
        create_remove_config_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
