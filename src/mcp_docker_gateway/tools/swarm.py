"""FastMCP swarm tools: the swarm itself, nodes, services and tasks.

Updates follow read-modify-write: the current spec and its version are read
first and the edited spec is submitted against that version, so a concurrent
change makes the engine reject the update instead of overwriting it.
"""

from typing import Annotated, Any, Literal

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.mappers import apply_service_update
from mcp_docker_gateway.models.requests import (
    NodeUpdateRequest,
    PublishedPort,
    ServiceCreateRequest,
    ServiceUpdateRequest,
    SwarmInitRequest,
    SwarmJoinRequest,
)
from mcp_docker_gateway.tools.common import (
    FiltersArg,
    FormatArg,
    LabelsArg,
    TenantClientFactory,
    run_tool,
    text_or_placeholder,
)
from mcp_docker_gateway.tools.containers import env_list
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety
from mcp_docker_gateway.utils.json_parsing import parse_json_argument
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

NodeIdArg = Annotated[str, Field(description="Node ID or hostname")]
ServiceIdArg = Annotated[str, Field(description="Service ID or name")]
TaskIdArg = Annotated[str, Field(description="Task ID")]
TailArg = Annotated[int, Field(ge=1, description="Number of lines from the end")]
TimestampsArg = Annotated[bool, Field(description="Prefix lines with timestamps")]


def _with_filter(filters: Any, **values: Any) -> dict[str, Any]:
    parsed = dict(parse_json_argument(filters, "filters") or {})
    for key, value in values.items():
        if value is not None:
            parsed[key] = [value]
    return parsed


# Swarm


def create_swarm_inspect_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def swarm_inspect(format: FormatArg = ResponseFormat.JSON) -> ToolResult:  # noqa: A002
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_swarm(), format, "swarm")

        return await run_tool(factory, "docker_swarm_inspect", operation)

    return (
        "docker_swarm_inspect",
        "Inspect the swarm this engine belongs to, including join tokens",
        OperationSafety.SAFE,
        True,
        False,
        swarm_inspect,
    )


def create_swarm_init_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def swarm_init(
        listen_addr: Annotated[
            str, Field(description="Listen address for the manager")
        ] = "0.0.0.0:2377",
        advertise_addr: Annotated[
            str | None, Field(description="Address advertised to other nodes")
        ] = None,
        force_new_cluster: Annotated[
            bool, Field(description="Force a new cluster from the current state")
        ] = False,
        default_addr_pool: Annotated[
            list[str] | None, Field(description="Default address pools in CIDR form")
        ] = None,
        subnet_size: Annotated[
            int | None, Field(ge=1, le=32, description="Subnet size for default pools")
        ] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = SwarmInitRequest(
                listen_addr=listen_addr,
                advertise_addr=advertise_addr,
                force_new_cluster=force_new_cluster,
                default_addr_pool=default_addr_pool,
                subnet_size=subnet_size,
            )
            node_id = await client.init_swarm(request)
            logger.info(f"Initialized swarm with manager node {node_id}")
            return format_success("Swarm initialized", nodeId=node_id)

        return await run_tool(factory, "docker_swarm_init", operation)

    return (
        "docker_swarm_init",
        "Initialize a new swarm with this engine as manager",
        OperationSafety.MODERATE,
        False,
        False,
        swarm_init,
    )


def create_swarm_join_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def swarm_join(
        remote_addrs: Annotated[list[str], Field(min_length=1, description="Manager addresses")],
        join_token: Annotated[str, Field(description="Worker or manager join token")],
        listen_addr: Annotated[str, Field(description="Listen address")] = "0.0.0.0:2377",
        advertise_addr: Annotated[
            str | None, Field(description="Address advertised to other nodes")
        ] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = SwarmJoinRequest(
                remote_addrs=remote_addrs,
                join_token=join_token,
                listen_addr=listen_addr,
                advertise_addr=advertise_addr,
            )
            await client.join_swarm(request)
            return format_success("Joined swarm")

        return await run_tool(factory, "docker_swarm_join", operation)

    return (
        "docker_swarm_join",
        "Join an existing swarm",
        OperationSafety.MODERATE,
        False,
        False,
        swarm_join,
    )


def create_swarm_leave_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def swarm_leave(
        force: Annotated[
            bool, Field(description="Leave even if this is the last manager")
        ] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.leave_swarm(force=force)
            return format_success("Left swarm")

        return await run_tool(factory, "docker_swarm_leave", operation)

    return (
        "docker_swarm_leave",
        "Leave the swarm",
        OperationSafety.DESTRUCTIVE,
        False,
        False,
        swarm_leave,
    )


def create_swarm_update_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def swarm_update(
        rotate_worker_token: Annotated[
            bool, Field(description="Rotate the worker join token")
        ] = False,
        rotate_manager_token: Annotated[
            bool, Field(description="Rotate the manager join token")
        ] = False,
        rotate_manager_unlock_key: Annotated[
            bool, Field(description="Rotate the manager unlock key")
        ] = False,
        autolock_managers: Annotated[
            bool | None, Field(description="Require the unlock key after manager restarts")
        ] = None,
        task_history_retention_limit: Annotated[
            int | None, Field(ge=0, description="Number of historic tasks kept per slot")
        ] = None,
        labels: LabelsArg = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            snapshot = await client.get_swarm_spec()
            spec = dict(snapshot.spec)
            if autolock_managers is not None:
                encryption = dict(spec.get("EncryptionConfig") or {})
                encryption["AutoLockManagers"] = autolock_managers
                spec["EncryptionConfig"] = encryption
            if task_history_retention_limit is not None:
                orchestration = dict(spec.get("Orchestration") or {})
                orchestration["TaskHistoryRetentionLimit"] = task_history_retention_limit
                spec["Orchestration"] = orchestration
            parsed_labels = parse_json_argument(labels, "labels")
            if parsed_labels is not None:
                spec["Labels"] = parsed_labels
            await client.update_swarm(
                snapshot.version,
                spec,
                rotate_worker_token=rotate_worker_token,
                rotate_manager_token=rotate_manager_token,
                rotate_manager_unlock_key=rotate_manager_unlock_key,
            )
            return format_success("Swarm updated")

        return await run_tool(factory, "docker_swarm_update", operation)

    return (
        "docker_swarm_update",
        "Update swarm settings or rotate join tokens and the unlock key",
        OperationSafety.MODERATE,
        False,
        False,
        swarm_update,
    )


def create_swarm_unlock_key_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def swarm_unlock_key() -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            key = await client.get_swarm_unlock_key()
            return format_response({"unlockKey": key})

        return await run_tool(factory, "docker_swarm_unlock_key", operation)

    return (
        "docker_swarm_unlock_key",
        "Get the key needed to unlock a locked swarm manager",
        OperationSafety.SAFE,
        True,
        False,
        swarm_unlock_key,
    )


def create_swarm_unlock_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def swarm_unlock(
        unlock_key: Annotated[str, Field(description="Swarm unlock key")],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.unlock_swarm(unlock_key)
            return format_success("Swarm unlocked")

        return await run_tool(factory, "docker_swarm_unlock", operation)

    return (
        "docker_swarm_unlock",
        "Unlock a locked swarm manager",
        OperationSafety.MODERATE,
        True,
        False,
        swarm_unlock,
    )


# Nodes


def create_list_nodes_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_nodes(
        role: Annotated[
            Literal["manager", "worker"] | None, Field(description="Only nodes with this role")
        ] = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            nodes = await client.list_nodes(_with_filter(filters, role=role))
            return format_response(nodes, format, "node")

        return await run_tool(factory, "docker_list_nodes", operation)

    return (
        "docker_list_nodes",
        "List swarm nodes",
        OperationSafety.SAFE,
        True,
        False,
        list_nodes,
    )


def create_inspect_node_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_node(
        node_id: NodeIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_node(node_id), format, "node")

        return await run_tool(factory, "docker_inspect_node", operation)

    return (
        "docker_inspect_node",
        "Get detailed information about a swarm node",
        OperationSafety.SAFE,
        True,
        False,
        inspect_node,
    )


def create_remove_node_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_node(
        node_id: NodeIdArg,
        force: Annotated[bool, Field(description="Remove even if the node is reachable")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.remove_node(node_id, force=force)
            return format_success(f"Node {node_id} removed")

        return await run_tool(factory, "docker_remove_node", operation)

    return (
        "docker_remove_node",
        "Remove a node from the swarm",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_node,
    )


def create_update_node_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def update_node(
        node_id: NodeIdArg,
        role: Annotated[
            Literal["worker", "manager"] | None, Field(description="New node role")
        ] = None,
        availability: Annotated[
            Literal["active", "pause", "drain"] | None, Field(description="New availability")
        ] = None,
        name: Annotated[str | None, Field(description="New node name")] = None,
        labels: LabelsArg = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            node = await client.inspect_node(node_id)
            current = node.spec
            parsed_labels = parse_json_argument(labels, "labels")
            request = NodeUpdateRequest(
                role=role or current.get("role", "worker"),
                availability=availability or current.get("availability", "active"),
                name=name if name is not None else current.get("name"),
                labels=parsed_labels if parsed_labels is not None else current.get("labels"),
            )
            await client.update_node(node_id, node.version.index, request)
            return format_success(f"Node {node_id} updated")

        return await run_tool(factory, "docker_update_node", operation)

    return (
        "docker_update_node",
        "Change a node's role, availability, name or labels",
        OperationSafety.MODERATE,
        True,
        False,
        update_node,
    )


# Services


def create_list_services_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_services(
        mode: Annotated[
            Literal["replicated", "global"] | None, Field(description="Only services in mode")
        ] = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            services = await client.list_services(_with_filter(filters, mode=mode), status=True)
            return format_response(services, format, "service")

        return await run_tool(factory, "docker_list_services", operation)

    return (
        "docker_list_services",
        "List swarm services",
        OperationSafety.SAFE,
        True,
        False,
        list_services,
    )


def create_inspect_service_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_service(
        service_id: ServiceIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_service(service_id), format, "service")

        return await run_tool(factory, "docker_inspect_service", operation)

    return (
        "docker_inspect_service",
        "Get detailed information about a swarm service",
        OperationSafety.SAFE,
        True,
        False,
        inspect_service,
    )


def create_create_service_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def create_service(  # noqa: PLR0913 - Docker API requires these parameters
        name: Annotated[str, Field(description="Service name")],
        image: Annotated[str, Field(description="Image to run")],
        replicas: Annotated[
            int | None, Field(ge=0, description="Replica count (replicated mode)")
        ] = None,
        global_mode: Annotated[bool, Field(description="Run one task on every node")] = False,
        command: Annotated[list[str] | None, Field(description="Command to run")] = None,
        env: Annotated[
            dict[str, str] | list[str] | str | None,
            Field(description="Environment variables as {'KEY': 'value'} or ['KEY=value']"),
        ] = None,
        labels: LabelsArg = None,
        published_ports: Annotated[
            list[PublishedPort] | str | None,
            Field(description="Ports as [{'target_port': 80, 'published_port': 8080}]"),
        ] = None,
        networks: Annotated[list[str] | None, Field(description="Networks to attach")] = None,
        constraints: Annotated[
            list[str] | None, Field(description="Placement constraints, e.g. 'node.role==worker'")
        ] = None,
        registry_username: Annotated[str | None, Field(description="Registry username")] = None,
        registry_password: Annotated[str | None, Field(description="Registry password")] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = ServiceCreateRequest(
                name=name,
                image=image,
                replicas=replicas,
                global_mode=global_mode,
                cmd=command,
                env=env_list(env),
                labels=parse_json_argument(labels, "labels"),
                published_ports=parse_json_argument(published_ports, "published_ports") or [],
                networks=networks,
                constraints=constraints,
            )
            auth = client.registry_auth(registry_username, registry_password)
            created = await client.create_service(request, auth=auth)
            logger.info(f"Created service {name} ({created.id})")
            return format_success(
                f"Service {name} created", serviceId=created.id, warnings=created.warnings
            )

        return await run_tool(factory, "docker_create_service", operation)

    return (
        "docker_create_service",
        "Create a swarm service",
        OperationSafety.MODERATE,
        False,
        False,
        create_service,
    )


def create_update_service_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def update_service(  # noqa: PLR0913 - Docker API requires these parameters
        service_id: ServiceIdArg,
        image: Annotated[str | None, Field(description="New image")] = None,
        replicas: Annotated[int | None, Field(ge=0, description="New replica count")] = None,
        env: Annotated[
            dict[str, str] | list[str] | str | None,
            Field(description="Replacement environment variables"),
        ] = None,
        labels: LabelsArg = None,
        force_update: Annotated[
            bool, Field(description="Redeploy tasks even if nothing changed")
        ] = False,
        registry_username: Annotated[str | None, Field(description="Registry username")] = None,
        registry_password: Annotated[str | None, Field(description="Registry password")] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            request = ServiceUpdateRequest(
                image=image,
                replicas=replicas,
                env=env_list(env),
                labels=parse_json_argument(labels, "labels"),
                force_update=force_update,
            )
            snapshot = await client.get_service_spec(service_id)
            spec = apply_service_update(snapshot.spec, request)
            auth = client.registry_auth(registry_username, registry_password)
            warnings = await client.update_service(service_id, snapshot.version, spec, auth=auth)
            return format_success(f"Service {service_id} updated", warnings=warnings)

        return await run_tool(factory, "docker_update_service", operation)

    return (
        "docker_update_service",
        "Update a swarm service's image, replicas, environment or labels",
        OperationSafety.MODERATE,
        False,
        False,
        update_service,
    )


def create_remove_service_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_service(service_id: ServiceIdArg) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.remove_service(service_id)
            return format_success(f"Service {service_id} removed")

        return await run_tool(factory, "docker_remove_service", operation)

    return (
        "docker_remove_service",
        "Remove a swarm service",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_service,
    )


def create_service_logs_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def service_logs(
        service_id: ServiceIdArg,
        tail: TailArg = 100,
        timestamps: TimestampsArg = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            logs = await client.get_service_logs(service_id, tail=tail, timestamps=timestamps)
            return text_or_placeholder(logs, "(no logs)")

        return await run_tool(factory, "docker_service_logs", operation)

    return (
        "docker_service_logs",
        "Get the logs of all tasks of a service",
        OperationSafety.SAFE,
        True,
        False,
        service_logs,
    )


# Tasks


def create_list_tasks_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_tasks(
        service: Annotated[str | None, Field(description="Only tasks of this service")] = None,
        node: Annotated[str | None, Field(description="Only tasks on this node")] = None,
        desired_state: Annotated[
            Literal["running", "shutdown", "accepted"] | None,
            Field(description="Only tasks with this desired state"),
        ] = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            parsed = _with_filter(
                filters, service=service, node=node, **{"desired-state": desired_state}
            )
            return format_response(await client.list_tasks(parsed), format, "task")

        return await run_tool(factory, "docker_list_tasks", operation)

    return (
        "docker_list_tasks",
        "List swarm tasks",
        OperationSafety.SAFE,
        True,
        False,
        list_tasks,
    )


def create_inspect_task_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_task(
        task_id: TaskIdArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_task(task_id), format, "task")

        return await run_tool(factory, "docker_inspect_task", operation)

    return (
        "docker_inspect_task",
        "Get detailed information about a swarm task",
        OperationSafety.SAFE,
        True,
        False,
        inspect_task,
    )


def create_task_logs_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def task_logs(
        task_id: TaskIdArg,
        tail: TailArg = 100,
        timestamps: TimestampsArg = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            logs = await client.get_task_logs(task_id, tail=tail, timestamps=timestamps)
            return text_or_placeholder(logs, "(no logs)")

        return await run_tool(factory, "docker_task_logs", operation)

    return (
        "docker_task_logs",
        "Get the logs of a single swarm task",
        OperationSafety.SAFE,
        True,
        False,
        task_logs,
    )


def register_swarm_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register swarm, node, service and task tools with FastMCP."""
    tools = [
        create_swarm_inspect_tool(factory),
        create_swarm_init_tool(factory),
        create_swarm_join_tool(factory),
        create_swarm_leave_tool(factory),
        create_swarm_update_tool(factory),
        create_swarm_unlock_key_tool(factory),
        create_swarm_unlock_tool(factory),
        create_list_nodes_tool(factory),
        create_inspect_node_tool(factory),
        create_remove_node_tool(factory),
        create_update_node_tool(factory),
        create_list_services_tool(factory),
        create_inspect_service_tool(factory),
        create_create_service_tool(factory),
        create_update_service_tool(factory),
        create_remove_service_tool(factory),
        create_service_logs_tool(factory),
        create_list_tasks_tool(factory),
        create_inspect_task_tool(factory),
        create_task_logs_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
