"""FastMCP exec tools.

``docker_exec`` is the one-shot convenience: it creates an exec instance and
starts it attached, returning the process output. The remaining tools expose
the individual steps.
"""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.models.requests import ExecCreateRequest
from mcp_docker_gateway.tools.common import (
    DESC_CONTAINER_ID,
    FormatArg,
    TenantClientFactory,
    run_tool,
    text_or_placeholder,
)
from mcp_docker_gateway.tools.containers import env_list
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

ExecIdArg = Annotated[str, Field(description="Exec instance ID")]
CommandArg = Annotated[
    list[str] | str,
    Field(description="Command to run, as an argv list or a shell string (run with sh -c)"),
]
EnvArg = Annotated[
    dict[str, str] | list[str] | str | None,
    Field(description="Environment variables as {'KEY': 'value'} or ['KEY=value']"),
]


def command_argv(command: list[str] | str) -> list[str]:
    """Argv for the engine; plain strings go through ``sh -c``."""
    if isinstance(command, str):
        return ["sh", "-c", command]
    return list(command)


def _exec_request(
    command: list[str] | str,
    env: Any,
    user: str | None,
    working_dir: str | None,
    privileged: bool,
    tty: bool,
) -> ExecCreateRequest:
    return ExecCreateRequest(
        cmd=command_argv(command),
        env=env_list(env),
        user=user,
        working_dir=working_dir,
        privileged=privileged,
        tty=tty,
    )


def create_exec_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def exec_command(  # noqa: PLR0913 - Docker API requires these parameters
        container_id: Annotated[str, Field(description=DESC_CONTAINER_ID)],
        command: CommandArg,
        env: EnvArg = None,
        user: Annotated[str | None, Field(description="User to run as")] = None,
        working_dir: Annotated[str | None, Field(description="Working directory")] = None,
        privileged: Annotated[bool, Field(description="Run with extended privileges")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = _exec_request(command, env, user, working_dir, privileged, tty=False)
            exec_id = await client.create_exec(container_id, request)
            output = await client.start_exec(exec_id)
            logger.info(f"Ran command in container {container_id} (exec {exec_id[:12]})")
            return text_or_placeholder(output, "(no output)")

        return await run_tool(factory, "docker_exec", operation)

    return (
        "docker_exec",
        "Execute a command in a running container and return its output",
        OperationSafety.MODERATE,
        False,
        False,
        exec_command,
    )


def create_create_exec_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def create_exec(  # noqa: PLR0913 - Docker API requires these parameters
        container_id: Annotated[str, Field(description=DESC_CONTAINER_ID)],
        command: CommandArg,
        env: EnvArg = None,
        user: Annotated[str | None, Field(description="User to run as")] = None,
        working_dir: Annotated[str | None, Field(description="Working directory")] = None,
        privileged: Annotated[bool, Field(description="Run with extended privileges")] = False,
        tty: Annotated[bool, Field(description="Allocate a pseudo-TTY")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = _exec_request(command, env, user, working_dir, privileged, tty)
            exec_id = await client.create_exec(container_id, request)
            return format_success("Exec instance created", execId=exec_id)

        return await run_tool(factory, "docker_create_exec", operation)

    return (
        "docker_create_exec",
        "Create an exec instance in a running container without starting it",
        OperationSafety.MODERATE,
        False,
        False,
        create_exec,
    )


def create_start_exec_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def start_exec(
        exec_id: ExecIdArg,
        detach: Annotated[bool, Field(description="Return immediately without output")] = False,
        tty: Annotated[bool, Field(description="Attach a pseudo-TTY")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            output = await client.start_exec(exec_id, detach=detach, tty=tty)
            if detach:
                return format_success("Exec started in detached mode", execId=exec_id)
            return text_or_placeholder(output, "(no output)")

        return await run_tool(factory, "docker_start_exec", operation)

    return (
        "docker_start_exec",
        "Start a previously created exec instance",
        OperationSafety.MODERATE,
        False,
        False,
        start_exec,
    )


def create_inspect_exec_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_exec(
        exec_id: ExecIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_exec(exec_id), format, "exec")

        return await run_tool(factory, "docker_inspect_exec", operation)

    return (
        "docker_inspect_exec",
        "Get the state of an exec instance, including its exit code",
        OperationSafety.SAFE,
        True,
        False,
        inspect_exec,
    )


def create_resize_exec_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def resize_exec(
        exec_id: ExecIdArg,
        height: Annotated[int, Field(ge=1, description="TTY height in rows")],
        width: Annotated[int, Field(ge=1, description="TTY width in columns")],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.resize_exec(exec_id, height=height, width=width)
            return format_success(f"Exec TTY resized to {width}x{height}")

        return await run_tool(factory, "docker_resize_exec", operation)

    return (
        "docker_resize_exec",
        "Resize the TTY of an exec instance",
        OperationSafety.MODERATE,
        True,
        False,
        resize_exec,
    )


def register_exec_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register all exec tools with FastMCP."""
    tools = [
        create_exec_tool(factory),
        create_create_exec_tool(factory),
        create_start_exec_tool(factory),
        create_inspect_exec_tool(factory),
        create_resize_exec_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
