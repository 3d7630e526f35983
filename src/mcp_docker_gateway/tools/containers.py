"""FastMCP container tools.

Listing and inspection (SAFE), lifecycle (MODERATE) and removal/pruning
(DESTRUCTIVE) of containers on the tenant's engine.
"""

from typing import Annotated, Any, Literal

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.models.requests import (
    ContainerCreateRequest,
    ContainerUpdateRequest,
    PortBinding,
)
from mcp_docker_gateway.tools.common import (
    DESC_CONTAINER_ID,
    FiltersArg,
    FormatArg,
    LabelsArg,
    TenantClientFactory,
    run_tool,
    text_or_placeholder,
)
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety
from mcp_docker_gateway.utils.json_parsing import parse_json_argument
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

ContainerIdArg = Annotated[str, Field(description=DESC_CONTAINER_ID)]
GracePeriodArg = Annotated[
    int, Field(ge=0, description="Seconds to wait before killing the container")
]


def env_list(env: Any) -> list[str] | None:
    """Accept ``["K=V"]`` or ``{"K": "V"}`` and return the engine's list form."""
    env = parse_json_argument(env, "env")
    if not env:
        return None
    if isinstance(env, dict):
        return [f"{key}={value}" for key, value in env.items()]
    return [str(item) for item in env]


def port_bindings(ports: Any) -> dict[str, list[PortBinding]] | None:
    """Normalize port mappings keyed by container port.

    Values may be a host port (``8080``), ``"ip:port"``, a list of
    ``{"HostIp", "HostPort"}`` objects, or ``None`` to only expose the port.
    A container port without protocol defaults to ``/tcp``.
    """
    ports = parse_json_argument(ports, "ports")
    if not ports:
        return None

    result: dict[str, list[PortBinding]] = {}
    for container_port, value in ports.items():
        key = container_port if "/" in str(container_port) else f"{container_port}/tcp"
        entries = value if isinstance(value, list) else [value]
        bindings: list[PortBinding] = []
        for entry in entries:
            if entry is None:
                continue
            if isinstance(entry, dict):
                host_port = entry.get("HostPort", entry.get("host_port", ""))
                host_ip = entry.get("HostIp", entry.get("host_ip")) or None
                bindings.append(PortBinding(host_ip=host_ip, host_port=str(host_port)))
            else:
                host_ip, _, host_port = str(entry).rpartition(":")
                bindings.append(PortBinding(host_ip=host_ip or None, host_port=host_port))
        result[key] = bindings
    return result


def create_list_containers_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_containers(
        all: Annotated[  # noqa: A002
            bool, Field(description="Include stopped containers")
        ] = False,
        limit: Annotated[
            int | None, Field(ge=1, description="Return only the most recently created N")
        ] = None,
        size: Annotated[bool, Field(description="Include container filesystem sizes")] = False,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        """List containers with optional filters."""

        async def operation(client: DockerBackendClient) -> str:
            containers = await client.list_containers(
                all=all,
                limit=limit,
                size=size,
                filters=parse_json_argument(filters, "filters"),
            )
            logger.info(f"Found {len(containers)} containers")
            return format_response(containers, format, "container")

        return await run_tool(factory, "docker_list_containers", operation)

    return (
        "docker_list_containers",
        "List Docker containers (running only unless all=true) with optional filters",
        OperationSafety.SAFE,
        True,  # idempotent
        False,  # not open_world
        list_containers,
    )


def create_inspect_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_container(
        container_id: ContainerIdArg,
        size: Annotated[bool, Field(description="Include filesystem sizes")] = False,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            details = await client.inspect_container(container_id, size=size)
            return format_response(details, format, "container_details")

        return await run_tool(factory, "docker_inspect_container", operation)

    return (
        "docker_inspect_container",
        "Get low-level information about a container",
        OperationSafety.SAFE,
        True,
        False,
        inspect_container,
    )


def create_create_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def create_container(  # noqa: PLR0913 - mirrors the engine's create options
        image: Annotated[str, Field(description="Image to create the container from")],
        name: Annotated[str | None, Field(description="Container name")] = None,
        cmd: Annotated[list[str] | None, Field(description="Command to run")] = None,
        entrypoint: Annotated[list[str] | None, Field(description="Entrypoint override")] = None,
        env: Annotated[
            list[str] | dict[str, str] | str | None,
            Field(description="Environment as ['KEY=value'] or {'KEY': 'value'}"),
        ] = None,
        ports: Annotated[
            dict[str, Any] | str | None,
            Field(
                description=(
                    "Port mappings keyed by container port. Examples: {'80/tcp': 8080}, "
                    "{'80': '127.0.0.1:8080'}, {'443/tcp': [{'HostIp': '', 'HostPort': '8443'}]}"
                )
            ),
        ] = None,
        volumes: Annotated[
            list[str] | None,
            Field(description="Bind mounts as 'host_path_or_volume:container_path[:mode]'"),
        ] = None,
        working_dir: Annotated[str | None, Field(description="Working directory")] = None,
        hostname: Annotated[str | None, Field(description="Container hostname")] = None,
        user: Annotated[str | None, Field(description="User to run as")] = None,
        tty: Annotated[bool, Field(description="Allocate a pseudo-TTY")] = False,
        labels: LabelsArg = None,
        network_mode: Annotated[
            str | None, Field(description="Network mode (bridge, host, none or a network name)")
        ] = None,
        restart_policy: Annotated[
            Literal["no", "always", "unless-stopped", "on-failure"] | None,
            Field(description="Restart policy"),
        ] = None,
        auto_remove: Annotated[
            bool, Field(description="Remove the container when it exits")
        ] = False,
    ) -> ToolResult:
        """Create a container without starting it."""

        async def operation(client: DockerBackendClient) -> str:
            request = ContainerCreateRequest(
                image=image,
                cmd=cmd,
                entrypoint=entrypoint,
                env=env_list(env),
                working_dir=working_dir,
                hostname=hostname,
                user=user,
                tty=tty or None,
                labels=parse_json_argument(labels, "labels"),
                binds=volumes,
                port_bindings=port_bindings(ports),
                network_mode=network_mode,
                restart_policy=restart_policy,
                auto_remove=auto_remove or None,
            )
            created = await client.create_container(request, name=name)
            logger.info(f"Created container {created.id}")
            return format_success(
                "Container created",
                containerId=created.id,
                name=name,
                warnings=created.warnings,
            )

        return await run_tool(factory, "docker_create_container", operation)

    return (
        "docker_create_container",
        "Create a new container from an image (does not start it)",
        OperationSafety.MODERATE,
        False,
        False,
        create_container,
    )


def create_start_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def start_container(container_id: ContainerIdArg) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.start_container(container_id)
            return format_success(f"Container {container_id} started")

        return await run_tool(factory, "docker_start_container", operation)

    return (
        "docker_start_container",
        "Start a stopped container",
        OperationSafety.MODERATE,
        True,
        False,
        start_container,
    )


def create_stop_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def stop_container(
        container_id: ContainerIdArg, timeout: GracePeriodArg = 10
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.stop_container(container_id, timeout=timeout)
            return format_success(f"Container {container_id} stopped")

        return await run_tool(factory, "docker_stop_container", operation)

    return (
        "docker_stop_container",
        "Stop a running container (SIGTERM, then SIGKILL after the timeout)",
        OperationSafety.MODERATE,
        True,
        False,
        stop_container,
    )


def create_restart_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def restart_container(
        container_id: ContainerIdArg, timeout: GracePeriodArg = 10
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.restart_container(container_id, timeout=timeout)
            return format_success(f"Container {container_id} restarted")

        return await run_tool(factory, "docker_restart_container", operation)

    return (
        "docker_restart_container",
        "Restart a container",
        OperationSafety.MODERATE,
        False,
        False,
        restart_container,
    )


def create_kill_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def kill_container(
        container_id: ContainerIdArg,
        signal: Annotated[
            str, Field(description="Signal to send, e.g. SIGKILL or SIGHUP")
        ] = "SIGKILL",
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.kill_container(container_id, signal=signal)
            return format_success(f"Container {container_id} killed with {signal}")

        return await run_tool(factory, "docker_kill_container", operation)

    return (
        "docker_kill_container",
        "Send a signal to a running container",
        OperationSafety.MODERATE,
        False,
        False,
        kill_container,
    )


def create_pause_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def pause_container(container_id: ContainerIdArg) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.pause_container(container_id)
            return format_success(f"Container {container_id} paused")

        return await run_tool(factory, "docker_pause_container", operation)

    return (
        "docker_pause_container",
        "Pause all processes in a container",
        OperationSafety.MODERATE,
        True,
        False,
        pause_container,
    )


def create_unpause_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def unpause_container(container_id: ContainerIdArg) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.unpause_container(container_id)
            return format_success(f"Container {container_id} unpaused")

        return await run_tool(factory, "docker_unpause_container", operation)

    return (
        "docker_unpause_container",
        "Resume a paused container",
        OperationSafety.MODERATE,
        True,
        False,
        unpause_container,
    )


def create_remove_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_container(
        container_id: ContainerIdArg,
        force: Annotated[bool, Field(description="Kill and remove a running container")] = False,
        volumes: Annotated[
            bool, Field(description="Remove anonymous volumes attached to the container")
        ] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.remove_container(container_id, force=force, volumes=volumes)
            return format_success(f"Container {container_id} removed")

        return await run_tool(factory, "docker_remove_container", operation)

    return (
        "docker_remove_container",
        "Remove a container",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_container,
    )


def create_rename_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def rename_container(
        container_id: ContainerIdArg,
        new_name: Annotated[str, Field(description="New container name")],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.rename_container(container_id, new_name)
            return format_success(f"Container {container_id} renamed to {new_name}")

        return await run_tool(factory, "docker_rename_container", operation)

    return (
        "docker_rename_container",
        "Rename a container",
        OperationSafety.MODERATE,
        True,
        False,
        rename_container,
    )


def create_get_logs_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def get_logs(
        container_id: ContainerIdArg,
        tail: Annotated[int, Field(ge=1, description="Number of lines from the end")] = 100,
        timestamps: Annotated[bool, Field(description="Prefix lines with timestamps")] = False,
        since: Annotated[
            int | None, Field(description="Only logs since this UNIX timestamp")
        ] = None,
        until: Annotated[
            int | None, Field(description="Only logs before this UNIX timestamp")
        ] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            logs = await client.get_container_logs(
                container_id, tail=tail, timestamps=timestamps, since=since, until=until
            )
            return text_or_placeholder(logs, "(no logs)")

        return await run_tool(factory, "docker_get_logs", operation)

    return (
        "docker_get_logs",
        "Get container logs (stdout and stderr)",
        OperationSafety.SAFE,
        True,
        False,
        get_logs,
    )


def create_get_stats_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def get_stats(
        container_id: ContainerIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            stats = await client.get_container_stats(container_id)
            return format_response(stats, format, "stats")

        return await run_tool(factory, "docker_get_stats", operation)

    return (
        "docker_get_stats",
        "Get a one-shot snapshot of container CPU, memory, network and I/O usage",
        OperationSafety.SAFE,
        False,
        False,
        get_stats,
    )


def create_get_top_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def get_top(
        container_id: ContainerIdArg,
        ps_args: Annotated[str, Field(description="Arguments passed to ps")] = "-ef",
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            top = await client.get_container_top(container_id, ps_args=ps_args)
            return format_response(top, format, "processes")

        return await run_tool(factory, "docker_get_top", operation)

    return (
        "docker_get_top",
        "List the processes running inside a container",
        OperationSafety.SAFE,
        False,
        False,
        get_top,
    )


def create_get_changes_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def get_changes(
        container_id: ContainerIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            changes = await client.get_container_changes(container_id)
            return format_response(changes, format, "change")

        return await run_tool(factory, "docker_get_changes", operation)

    return (
        "docker_get_changes",
        "List filesystem changes in a container (kind 0=Modified, 1=Added, 2=Deleted)",
        OperationSafety.SAFE,
        True,
        False,
        get_changes,
    )


def create_wait_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def wait_container(
        container_id: ContainerIdArg,
        condition: Annotated[
            Literal["not-running", "next-exit", "removed"] | None,
            Field(description="Condition to wait for (default: not-running)"),
        ] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            result = await client.wait_container(container_id, condition=condition)
            return format_response(result)

        return await run_tool(factory, "docker_wait_container", operation)

    return (
        "docker_wait_container",
        "Block until a container stops, then return its exit code",
        OperationSafety.SAFE,
        True,
        False,
        wait_container,
    )


def create_prune_containers_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def prune_containers(filters: FiltersArg = None) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            result = await client.prune_containers(parse_json_argument(filters, "filters"))
            logger.info(f"Pruned {len(result.containers_deleted)} containers")
            return format_success(
                f"Pruned {len(result.containers_deleted)} containers",
                containersDeleted=result.containers_deleted,
                spaceReclaimed=result.space_reclaimed,
            )

        return await run_tool(factory, "docker_prune_containers", operation)

    return (
        "docker_prune_containers",
        "Remove all stopped containers",
        OperationSafety.DESTRUCTIVE,
        False,
        False,
        prune_containers,
    )


def create_update_container_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def update_container(  # noqa: PLR0913 - one argument per resource limit
        container_id: ContainerIdArg,
        cpu_shares: Annotated[int | None, Field(ge=0, description="Relative CPU weight")] = None,
        memory: Annotated[int | None, Field(ge=0, description="Memory limit in bytes")] = None,
        memory_swap: Annotated[
            int | None, Field(ge=-1, description="Memory plus swap limit in bytes (-1 = unlimited)")
        ] = None,
        cpu_period: Annotated[int | None, Field(ge=0, description="CPU CFS period (µs)")] = None,
        cpu_quota: Annotated[int | None, Field(description="CPU CFS quota (µs)")] = None,
        cpuset_cpus: Annotated[str | None, Field(description="CPUs allowed, e.g. '0-3'")] = None,
        cpuset_mems: Annotated[str | None, Field(description="Memory nodes allowed")] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = ContainerUpdateRequest(
                cpu_shares=cpu_shares,
                memory=memory,
                memory_swap=memory_swap,
                cpu_period=cpu_period,
                cpu_quota=cpu_quota,
                cpuset_cpus=cpuset_cpus,
                cpuset_mems=cpuset_mems,
            )
            warnings = await client.update_container(container_id, request)
            return format_success(f"Container {container_id} updated", warnings=warnings)

        return await run_tool(factory, "docker_update_container", operation)

    return (
        "docker_update_container",
        "Update resource limits of a container",
        OperationSafety.MODERATE,
        True,
        False,
        update_container,
    )


def register_container_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register all container tools with FastMCP."""
    tools = [
        create_list_containers_tool(factory),
        create_inspect_container_tool(factory),
        create_create_container_tool(factory),
        create_start_container_tool(factory),
        create_stop_container_tool(factory),
        create_restart_container_tool(factory),
        create_kill_container_tool(factory),
        create_pause_container_tool(factory),
        create_unpause_container_tool(factory),
        create_remove_container_tool(factory),
        create_rename_container_tool(factory),
        create_get_logs_tool(factory),
        create_get_stats_tool(factory),
        create_get_top_tool(factory),
        create_get_changes_tool(factory),
        create_wait_container_tool(factory),
        create_prune_containers_tool(factory),
        create_update_container_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
