"""Entity mappers: upstream wire JSON to normalized entities.

Pure functions, no I/O. Absent or null optional upstream fields become the
entity's documented default (empty list, empty mapping, ``False``, ``0``)
instead of leaking ``None`` into the entity.

Every entity-shaped response has an explicit field-by-field mapper. Free-form
engine documents (container and image inspect, system info, version, disk
usage, stats, swarm inspect) and the nested spec/description/status objects of
swarm entities go through ``map_document``, which camelizes keys recursively
while leaving user-data maps such as labels untouched.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from mcp_docker_gateway.models.entities import (
    AuthResult,
    Container,
    ContainerChange,
    ContainerCreated,
    ContainerProcesses,
    ContainerPruneResult,
    ContainerWaitResult,
    EventActor,
    ExecInspect,
    HubBuildHistory,
    HubBuildSettings,
    HubBuildTag,
    HubRepository,
    HubTag,
    HubTagImage,
    HubWebhook,
    HubWebhookHook,
    Image,
    ImageDeleteEntry,
    ImageHistoryEntry,
    ImagePruneResult,
    ImageSearchResult,
    Ipam,
    IpamConfig,
    Mount,
    Network,
    NetworkContainer,
    NetworkCreated,
    NetworkPruneResult,
    ObjectVersion,
    Page,
    Plugin,
    PluginPrivilege,
    Port,
    Secret,
    Service,
    ServiceCreated,
    SwarmConfig,
    SwarmNode,
    SystemEvent,
    Task,
    Volume,
    VolumeList,
    VolumePruneResult,
    VolumeUsage,
)
from mcp_docker_gateway.models.requests import (
    ContainerCreateRequest,
    ContainerUpdateRequest,
    ExecCreateRequest,
    NetworkCreateRequest,
    NodeUpdateRequest,
    ServiceCreateRequest,
    ServiceUpdateRequest,
    SwarmInitRequest,
    SwarmJoinRequest,
    VolumeCreateRequest,
)
from mcp_docker_gateway.utils.casing import camelize_keys

E = TypeVar("E")


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _int(value: Any) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def map_document(raw: Any) -> Any:
    """Normalize a free-form engine document by camelizing its keys."""
    return camelize_keys(raw)


def map_many(raw: Any, mapper: Callable[[dict[str, Any]], E]) -> list[E]:
    """Map a JSON array, tolerating ``null`` for an empty listing."""
    return [mapper(_dict(item)) for item in _list(raw)]


# Containers


def map_port(raw: dict[str, Any]) -> Port:
    return Port(
        ip=raw.get("IP") or None,
        private_port=_int(raw.get("PrivatePort")),
        public_port=raw.get("PublicPort"),
        type=raw.get("Type") or "tcp",
    )


def map_mount(raw: dict[str, Any]) -> Mount:
    return Mount(
        type=_str(raw.get("Type")),
        name=raw.get("Name") or None,
        source=_str(raw.get("Source")),
        destination=_str(raw.get("Destination")),
        driver=raw.get("Driver") or None,
        mode=_str(raw.get("Mode")),
        rw=bool(raw.get("RW", False)),
        propagation=_str(raw.get("Propagation")),
    )


def map_container(raw: dict[str, Any]) -> Container:
    """Map one container listing entry. Names keep their leading slash."""
    return Container(
        id=_str(raw.get("Id")),
        names=[str(name) for name in _list(raw.get("Names"))],
        image=_str(raw.get("Image")),
        image_id=_str(raw.get("ImageID")),
        command=_str(raw.get("Command")),
        created=_int(raw.get("Created")),
        state=_str(raw.get("State")),
        status=_str(raw.get("Status")),
        ports=map_many(raw.get("Ports"), map_port),
        labels=_dict(raw.get("Labels")),
        size_rw=raw.get("SizeRw"),
        size_root_fs=raw.get("SizeRootFs"),
        network_settings=map_document(_dict(raw.get("NetworkSettings"))),
        mounts=map_many(raw.get("Mounts"), map_mount),
    )


def map_container_created(raw: dict[str, Any]) -> ContainerCreated:
    return ContainerCreated(
        id=_str(raw.get("Id")),
        warnings=[str(w) for w in _list(raw.get("Warnings"))],
    )


def map_container_change(raw: dict[str, Any]) -> ContainerChange:
    # Kind stays numeric: 0=Modified, 1=Added, 2=Deleted
    return ContainerChange(path=_str(raw.get("Path")), kind=_int(raw.get("Kind")))


def map_container_processes(raw: dict[str, Any]) -> ContainerProcesses:
    return ContainerProcesses(
        titles=[str(t) for t in _list(raw.get("Titles"))],
        processes=[[str(col) for col in _list(row)] for row in _list(raw.get("Processes"))],
    )


def map_wait_result(raw: dict[str, Any]) -> ContainerWaitResult:
    error = _dict(raw.get("Error")).get("Message") or None
    return ContainerWaitResult(status_code=_int(raw.get("StatusCode")), error=error)


def map_container_prune(raw: dict[str, Any]) -> ContainerPruneResult:
    return ContainerPruneResult(
        containers_deleted=[str(c) for c in _list(raw.get("ContainersDeleted"))],
        space_reclaimed=_int(raw.get("SpaceReclaimed")),
    )


# Images


def map_image(raw: dict[str, Any]) -> Image:
    return Image(
        id=_str(raw.get("Id")),
        parent_id=_str(raw.get("ParentId")),
        repo_tags=[str(t) for t in _list(raw.get("RepoTags"))],
        repo_digests=[str(d) for d in _list(raw.get("RepoDigests"))],
        created=_int(raw.get("Created")),
        size=_int(raw.get("Size")),
        shared_size=_int(raw.get("SharedSize")),
        virtual_size=_int(raw.get("VirtualSize")),
        labels=_dict(raw.get("Labels")),
        containers=_int(raw.get("Containers")),
    )


def map_image_history_entry(raw: dict[str, Any]) -> ImageHistoryEntry:
    return ImageHistoryEntry(
        id=_str(raw.get("Id")),
        created=_int(raw.get("Created")),
        created_by=_str(raw.get("CreatedBy")),
        tags=[str(t) for t in _list(raw.get("Tags"))],
        size=_int(raw.get("Size")),
        comment=_str(raw.get("Comment")),
    )


def map_image_search_result(raw: dict[str, Any]) -> ImageSearchResult:
    # The search endpoint is already snake_case on the wire
    return ImageSearchResult(
        name=_str(raw.get("name")),
        description=_str(raw.get("description")),
        is_official=bool(raw.get("is_official", False)),
        is_automated=bool(raw.get("is_automated", False)),
        star_count=_int(raw.get("star_count")),
    )


def map_image_delete_entry(raw: dict[str, Any]) -> ImageDeleteEntry:
    return ImageDeleteEntry(
        untagged=raw.get("Untagged") or None,
        deleted=raw.get("Deleted") or None,
    )


def map_image_prune(raw: dict[str, Any]) -> ImagePruneResult:
    return ImagePruneResult(
        images_deleted=map_many(raw.get("ImagesDeleted"), map_image_delete_entry),
        space_reclaimed=_int(raw.get("SpaceReclaimed")),
    )


# Networks


def map_ipam_config(raw: dict[str, Any]) -> IpamConfig:
    return IpamConfig(
        subnet=raw.get("Subnet") or None,
        ip_range=raw.get("IPRange") or None,
        gateway=raw.get("Gateway") or None,
        aux_address=_dict(raw.get("AuxiliaryAddresses")),
    )


def map_ipam(raw: dict[str, Any]) -> Ipam:
    return Ipam(
        driver=raw.get("Driver") or "default",
        options=_dict(raw.get("Options")),
        config=map_many(raw.get("Config"), map_ipam_config),
    )


def map_network_container(raw: dict[str, Any]) -> NetworkContainer:
    return NetworkContainer(
        name=_str(raw.get("Name")),
        endpoint_id=_str(raw.get("EndpointID")),
        mac_address=_str(raw.get("MacAddress")),
        ipv4_address=_str(raw.get("IPv4Address")),
        ipv6_address=_str(raw.get("IPv6Address")),
    )


def map_network(raw: dict[str, Any]) -> Network:
    return Network(
        name=_str(raw.get("Name")),
        id=_str(raw.get("Id")),
        created=_str(raw.get("Created")),
        scope=_str(raw.get("Scope")),
        driver=_str(raw.get("Driver")),
        enable_ipv6=bool(raw.get("EnableIPv6", False)),
        ipam=map_ipam(_dict(raw.get("IPAM"))),
        internal=bool(raw.get("Internal", False)),
        attachable=bool(raw.get("Attachable", False)),
        ingress=bool(raw.get("Ingress", False)),
        containers={
            key: map_network_container(_dict(value))
            for key, value in _dict(raw.get("Containers")).items()
        },
        options=_dict(raw.get("Options")),
        labels=_dict(raw.get("Labels")),
    )


def map_network_created(raw: dict[str, Any]) -> NetworkCreated:
    return NetworkCreated(id=_str(raw.get("Id")), warning=_str(raw.get("Warning")))


def map_network_prune(raw: dict[str, Any]) -> NetworkPruneResult:
    return NetworkPruneResult(networks_deleted=[str(n) for n in _list(raw.get("NetworksDeleted"))])


# Volumes


def map_volume(raw: dict[str, Any]) -> Volume:
    usage = raw.get("UsageData")
    return Volume(
        name=_str(raw.get("Name")),
        driver=raw.get("Driver") or "local",
        mountpoint=_str(raw.get("Mountpoint")),
        created_at=raw.get("CreatedAt") or None,
        status=raw.get("Status") if isinstance(raw.get("Status"), dict) else None,
        labels=_dict(raw.get("Labels")),
        scope=raw.get("Scope") or "local",
        options=_dict(raw.get("Options")),
        usage_data=(
            VolumeUsage(size=usage.get("Size", -1), ref_count=usage.get("RefCount", -1))
            if isinstance(usage, dict)
            else None
        ),
    )


def map_volume_list(raw: dict[str, Any]) -> VolumeList:
    return VolumeList(
        volumes=map_many(raw.get("Volumes"), map_volume),
        warnings=[str(w) for w in _list(raw.get("Warnings"))],
    )


def map_volume_prune(raw: dict[str, Any]) -> VolumePruneResult:
    return VolumePruneResult(
        volumes_deleted=[str(v) for v in _list(raw.get("VolumesDeleted"))],
        space_reclaimed=_int(raw.get("SpaceReclaimed")),
    )


# Exec


def map_exec_inspect(raw: dict[str, Any]) -> ExecInspect:
    return ExecInspect(
        id=_str(raw.get("ID")),
        running=bool(raw.get("Running", False)),
        exit_code=raw.get("ExitCode"),
        process_config=map_document(_dict(raw.get("ProcessConfig"))),
        open_stdin=bool(raw.get("OpenStdin", False)),
        open_stderr=bool(raw.get("OpenStderr", False)),
        open_stdout=bool(raw.get("OpenStdout", False)),
        can_remove=bool(raw.get("CanRemove", False)),
        container_id=_str(raw.get("ContainerID")),
        detach_keys=_str(raw.get("DetachKeys")),
        pid=_int(raw.get("Pid")),
    )


# System


def map_system_event(raw: dict[str, Any]) -> SystemEvent:
    actor = _dict(raw.get("Actor"))
    return SystemEvent(
        type=_str(raw.get("Type")),
        action=_str(raw.get("Action")),
        actor=EventActor(id=_str(actor.get("ID")), attributes=_dict(actor.get("Attributes"))),
        scope=_str(raw.get("scope")),
        time=_int(raw.get("time")),
        time_nano=_int(raw.get("timeNano")),
    )


def map_auth_result(raw: dict[str, Any]) -> AuthResult:
    return AuthResult(
        status=_str(raw.get("Status")),
        identity_token=raw.get("IdentityToken") or None,
    )


# Swarm


def map_object_version(raw: Any) -> ObjectVersion:
    return ObjectVersion(index=_int(_dict(raw).get("Index")))


def map_node(raw: dict[str, Any]) -> SwarmNode:
    manager_status = raw.get("ManagerStatus")
    return SwarmNode(
        id=_str(raw.get("ID")),
        version=map_object_version(raw.get("Version")),
        created_at=_str(raw.get("CreatedAt")),
        updated_at=_str(raw.get("UpdatedAt")),
        spec=map_document(_dict(raw.get("Spec"))),
        description=map_document(_dict(raw.get("Description"))),
        status=map_document(_dict(raw.get("Status"))),
        manager_status=map_document(manager_status) if isinstance(manager_status, dict) else None,
    )


def map_service(raw: dict[str, Any]) -> Service:
    update_status = raw.get("UpdateStatus")
    return Service(
        id=_str(raw.get("ID")),
        version=map_object_version(raw.get("Version")),
        created_at=_str(raw.get("CreatedAt")),
        updated_at=_str(raw.get("UpdatedAt")),
        spec=map_document(_dict(raw.get("Spec"))),
        endpoint=map_document(_dict(raw.get("Endpoint"))),
        update_status=map_document(update_status) if isinstance(update_status, dict) else None,
    )


def map_service_created(raw: dict[str, Any]) -> ServiceCreated:
    return ServiceCreated(
        id=_str(raw.get("ID")),
        warnings=[str(w) for w in _list(raw.get("Warnings"))],
    )


def map_task(raw: dict[str, Any]) -> Task:
    return Task(
        id=_str(raw.get("ID")),
        version=map_object_version(raw.get("Version")),
        created_at=_str(raw.get("CreatedAt")),
        updated_at=_str(raw.get("UpdatedAt")),
        name=raw.get("Name") or None,
        labels=_dict(raw.get("Labels")),
        spec=map_document(_dict(raw.get("Spec"))),
        service_id=_str(raw.get("ServiceID")),
        slot=raw.get("Slot"),
        node_id=raw.get("NodeID") or None,
        status=map_document(_dict(raw.get("Status"))),
        desired_state=_str(raw.get("DesiredState")),
    )


def map_secret(raw: dict[str, Any]) -> Secret:
    return Secret(
        id=_str(raw.get("ID")),
        version=map_object_version(raw.get("Version")),
        created_at=_str(raw.get("CreatedAt")),
        updated_at=_str(raw.get("UpdatedAt")),
        spec=map_document(_dict(raw.get("Spec"))),
    )


def map_swarm_config(raw: dict[str, Any]) -> SwarmConfig:
    return SwarmConfig(
        id=_str(raw.get("ID")),
        version=map_object_version(raw.get("Version")),
        created_at=_str(raw.get("CreatedAt")),
        updated_at=_str(raw.get("UpdatedAt")),
        spec=map_document(_dict(raw.get("Spec"))),
    )


def map_plugin(raw: dict[str, Any]) -> Plugin:
    return Plugin(
        id=raw.get("Id") or None,
        name=_str(raw.get("Name")),
        enabled=bool(raw.get("Enabled", False)),
        settings=map_document(_dict(raw.get("Settings"))),
        plugin_reference=raw.get("PluginReference") or None,
        config=map_document(_dict(raw.get("Config"))),
    )


def map_plugin_privilege(raw: dict[str, Any]) -> PluginPrivilege:
    return PluginPrivilege(
        name=_str(raw.get("Name")),
        description=_str(raw.get("Description")),
        value=[str(v) for v in _list(raw.get("Value"))],
    )


def unmap_plugin_privilege(privilege: PluginPrivilege) -> dict[str, Any]:
    """Translate a privilege back to the engine's wire shape for install/upgrade."""
    return {
        "Name": privilege.name,
        "Description": privilege.description,
        "Value": list(privilege.value),
    }


# Docker Hub


def map_hub_repository(raw: dict[str, Any]) -> HubRepository:
    return HubRepository(
        user=_str(raw.get("user")),
        name=_str(raw.get("name")),
        namespace=_str(raw.get("namespace")),
        repository_type=raw.get("repository_type") or None,
        status=_int(raw.get("status")),
        description=_str(raw.get("description")),
        is_private=bool(raw.get("is_private", False)),
        is_automated=bool(raw.get("is_automated", False)),
        can_edit=bool(raw.get("can_edit", False)),
        star_count=_int(raw.get("star_count")),
        pull_count=_int(raw.get("pull_count")),
        last_updated=raw.get("last_updated") or None,
        is_migrated=bool(raw.get("is_migrated", False)),
        collaborator_count=_int(raw.get("collaborator_count")),
        affiliation=raw.get("affiliation") or None,
        hub_user=_str(raw.get("hub_user")),
    )


def map_hub_tag_image(raw: dict[str, Any]) -> HubTagImage:
    return HubTagImage(
        architecture=_str(raw.get("architecture")),
        features=_str(raw.get("features")),
        variant=raw.get("variant") or None,
        digest=_str(raw.get("digest")),
        os=_str(raw.get("os")),
        os_features=_str(raw.get("os_features")),
        os_version=raw.get("os_version") or None,
        size=_int(raw.get("size")),
        status=_str(raw.get("status")),
        last_pulled=raw.get("last_pulled") or None,
        last_pushed=raw.get("last_pushed") or None,
    )


def map_hub_tag(raw: dict[str, Any]) -> HubTag:
    return HubTag(
        creator=_int(raw.get("creator")),
        id=_int(raw.get("id")),
        image_id=raw.get("image_id") or None,
        images=map_many(raw.get("images"), map_hub_tag_image),
        last_updated=raw.get("last_updated") or None,
        last_updater=_int(raw.get("last_updater")),
        last_updater_username=_str(raw.get("last_updater_username")),
        name=_str(raw.get("name")),
        repository=_int(raw.get("repository")),
        full_size=_int(raw.get("full_size")),
        v2=bool(raw.get("v2", True)),
        tag_status=_str(raw.get("tag_status")),
        tag_last_pushed=raw.get("tag_last_pushed") or None,
        tag_last_pulled=raw.get("tag_last_pulled") or None,
    )


def map_hub_webhook_hook(raw: dict[str, Any]) -> HubWebhookHook:
    return HubWebhookHook(
        id=_int(raw.get("id")),
        hook_url=_str(raw.get("hook_url")),
        active=bool(raw.get("active", True)),
        last_caller=_str(raw.get("last_caller")),
        last_result=_str(raw.get("last_result")),
    )


def map_hub_webhook(raw: dict[str, Any]) -> HubWebhook:
    return HubWebhook(
        id=_int(raw.get("id")),
        name=_str(raw.get("name")),
        active=bool(raw.get("active", True)),
        expect_final_callback=bool(raw.get("expect_final_callback", False)),
        creator=_str(raw.get("creator")),
        last_updated=raw.get("last_updated") or None,
        last_caller=_str(raw.get("last_caller")),
        hooks=map_many(raw.get("webhooks") or raw.get("hooks"), map_hub_webhook_hook),
    )


def map_hub_build_tag(raw: dict[str, Any]) -> HubBuildTag:
    return HubBuildTag(
        id=_int(raw.get("id")),
        name=_str(raw.get("name")),
        dockerfile_path=_str(raw.get("dockerfile_path")),
        context=_str(raw.get("context")),
        source=_str(raw.get("source_name") or raw.get("source")),
        source_type=_str(raw.get("source_type")),
        auto_build=bool(raw.get("autobuild", raw.get("auto_build", False))),
    )


def map_hub_build_settings(raw: dict[str, Any]) -> HubBuildSettings:
    return HubBuildSettings(
        autotests=raw.get("autotests") or "OFF",
        build_forks=bool(raw.get("build_in_farm", raw.get("build_forks", False))),
        is_builder=bool(raw.get("is_builder", False)),
        build_tags=map_many(raw.get("build_tags"), map_hub_build_tag),
    )


def map_hub_build_history(raw: dict[str, Any]) -> HubBuildHistory:
    return HubBuildHistory(
        id=_int(raw.get("id")),
        status=_int(raw.get("status")),
        status_text=_str(raw.get("status_text")),
        build_tag=_str(raw.get("build_tag")),
        cause=_str(raw.get("cause")),
        created_date=raw.get("created_date") or None,
        last_updated=raw.get("last_updated") or None,
        build_path=_str(raw.get("build_path")),
        docker_tag=_str(raw.get("dockertag_name") or raw.get("docker_tag")),
        build_code=_str(raw.get("build_code")),
    )


def map_hub_page(
    raw: dict[str, Any],
    page: int,
    mapper: Callable[[dict[str, Any]], E],
) -> Page[E]:
    """Map a Hub listing page.

    Hub answers with an opaque ``next`` URL; the cursor handed to callers is
    simply the next page number.
    """
    items = map_many(raw.get("results"), mapper)
    has_more = bool(raw.get("next"))
    total = raw.get("count")
    return Page(
        items=items,
        count=len(items),
        total=total if isinstance(total, int) else None,
        has_more=has_more,
        next_cursor=str(page + 1) if has_more else None,
    )


# Request bodies (normalized input -> engine wire shape)


def _compact(body: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in body.items() if value is not None}


def unmap_container_create(request: ContainerCreateRequest) -> dict[str, Any]:
    host_config = _compact(
        {
            "Binds": request.binds,
            "PortBindings": (
                {
                    port: [
                        _compact({"HostIp": b.host_ip, "HostPort": b.host_port})
                        for b in bindings
                    ]
                    for port, bindings in request.port_bindings.items()
                }
                if request.port_bindings
                else None
            ),
            "NetworkMode": request.network_mode,
            "RestartPolicy": {"Name": request.restart_policy} if request.restart_policy else None,
            "AutoRemove": request.auto_remove,
            "Privileged": request.privileged,
        }
    )
    return _compact(
        {
            "Image": request.image,
            "Cmd": request.cmd,
            "Entrypoint": request.entrypoint,
            "Env": request.env,
            "WorkingDir": request.working_dir,
            "Hostname": request.hostname,
            "User": request.user,
            "Tty": request.tty,
            "OpenStdin": request.open_stdin,
            "Labels": request.labels,
            "ExposedPorts": (
                {port: {} for port in request.port_bindings} if request.port_bindings else None
            ),
            "HostConfig": host_config or None,
        }
    )


def unmap_container_update(request: ContainerUpdateRequest) -> dict[str, Any]:
    return _compact(
        {
            "CpuShares": request.cpu_shares,
            "Memory": request.memory,
            "MemorySwap": request.memory_swap,
            "CpuPeriod": request.cpu_period,
            "CpuQuota": request.cpu_quota,
            "CpusetCpus": request.cpuset_cpus,
            "CpusetMems": request.cpuset_mems,
        }
    )


def unmap_network_create(request: NetworkCreateRequest) -> dict[str, Any]:
    ipam_config = _compact(
        {"Subnet": request.subnet, "Gateway": request.gateway, "IPRange": request.ip_range}
    )
    return _compact(
        {
            "Name": request.name,
            "CheckDuplicate": True,
            "Driver": request.driver,
            "Internal": request.internal,
            "Attachable": request.attachable,
            "Ingress": request.ingress,
            "EnableIPv6": request.enable_ipv6,
            "IPAM": {"Driver": "default", "Config": [ipam_config]} if ipam_config else None,
            "Options": request.options,
            "Labels": request.labels,
        }
    )


def unmap_volume_create(request: VolumeCreateRequest) -> dict[str, Any]:
    return _compact(
        {
            "Name": request.name,
            "Driver": request.driver,
            "DriverOpts": request.driver_opts,
            "Labels": request.labels,
        }
    )


def unmap_exec_create(request: ExecCreateRequest) -> dict[str, Any]:
    return _compact(
        {
            "AttachStdin": request.attach_stdin,
            "AttachStdout": request.attach_stdout,
            "AttachStderr": request.attach_stderr,
            "DetachKeys": request.detach_keys,
            "Tty": request.tty,
            "Env": request.env,
            "Cmd": request.cmd,
            "Privileged": request.privileged,
            "User": request.user,
            "WorkingDir": request.working_dir,
        }
    )


def unmap_swarm_init(request: SwarmInitRequest) -> dict[str, Any]:
    return _compact(
        {
            "ListenAddr": request.listen_addr,
            "AdvertiseAddr": request.advertise_addr,
            "DataPathAddr": request.data_path_addr,
            "DataPathPort": request.data_path_port,
            "DefaultAddrPool": request.default_addr_pool,
            "SubnetSize": request.subnet_size,
            "ForceNewCluster": request.force_new_cluster,
        }
    )


def unmap_swarm_join(request: SwarmJoinRequest) -> dict[str, Any]:
    return _compact(
        {
            "ListenAddr": request.listen_addr,
            "AdvertiseAddr": request.advertise_addr,
            "DataPathAddr": request.data_path_addr,
            "RemoteAddrs": request.remote_addrs,
            "JoinToken": request.join_token,
        }
    )


def unmap_node_update(request: NodeUpdateRequest) -> dict[str, Any]:
    return _compact(
        {
            "Name": request.name,
            "Labels": request.labels or {},
            "Role": request.role,
            "Availability": request.availability,
        }
    )


def unmap_service_create(request: ServiceCreateRequest) -> dict[str, Any]:
    container_spec = _compact(
        {"Image": request.image, "Command": request.cmd, "Env": request.env}
    )
    if request.global_mode:
        mode: dict[str, Any] = {"Global": {}}
    else:
        mode = {"Replicated": {"Replicas": request.replicas if request.replicas is not None else 1}}
    task_template: dict[str, Any] = {"ContainerSpec": container_spec}
    if request.constraints:
        task_template["Placement"] = {"Constraints": request.constraints}
    if request.networks:
        task_template["Networks"] = [{"Target": network} for network in request.networks]
    spec: dict[str, Any] = {
        "Name": request.name,
        "Labels": request.labels or {},
        "TaskTemplate": task_template,
        "Mode": mode,
    }
    if request.published_ports:
        spec["EndpointSpec"] = {
            "Ports": [
                _compact(
                    {
                        "Protocol": port.protocol,
                        "TargetPort": port.target_port,
                        "PublishedPort": port.published_port,
                        "PublishMode": port.publish_mode,
                    }
                )
                for port in request.published_ports
            ]
        }
    return spec


def apply_service_update(spec: dict[str, Any], request: ServiceUpdateRequest) -> dict[str, Any]:
    """Return a copy of a wire-format service spec with the requested changes."""
    updated = dict(spec)
    task_template = dict(_dict(updated.get("TaskTemplate")))
    container_spec = dict(_dict(task_template.get("ContainerSpec")))
    if request.image is not None:
        container_spec["Image"] = request.image
    if request.env is not None:
        container_spec["Env"] = request.env
    task_template["ContainerSpec"] = container_spec
    if request.force_update:
        task_template["ForceUpdate"] = _int(task_template.get("ForceUpdate")) + 1
    updated["TaskTemplate"] = task_template
    if request.labels is not None:
        updated["Labels"] = request.labels
    if request.replicas is not None:
        updated["Mode"] = {"Replicated": {"Replicas": request.replicas}}
    return updated
