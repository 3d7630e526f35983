"""Normalized entity models.

Attributes are snake_case in Python and serialize to lower camel case
(``model_dump(by_alias=True)``), independent of either upstream's casing.
Entities are immutable once a mapper has built them.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class Entity(BaseModel):
    """Base class for every normalized entity."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with normalized (camelCase) field names."""
        return self.model_dump(by_alias=True, mode="json")


# Containers


class Port(Entity):
    ip: str | None = None
    private_port: int
    public_port: int | None = None
    type: str = "tcp"


class Mount(Entity):
    type: str = ""
    name: str | None = None
    source: str = ""
    destination: str = ""
    driver: str | None = None
    mode: str = ""
    rw: bool = False
    propagation: str = ""


class Container(Entity):
    """Container as returned by the container listing."""

    id: str
    names: list[str] = Field(default_factory=list)
    image: str = ""
    image_id: str = ""
    command: str = ""
    created: int = 0
    state: str = ""
    status: str = ""
    ports: list[Port] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    size_rw: int | None = None
    size_root_fs: int | None = None
    network_settings: dict[str, Any] = Field(default_factory=dict)
    mounts: list[Mount] = Field(default_factory=list)


class ContainerCreated(Entity):
    id: str
    warnings: list[str] = Field(default_factory=list)


class ContainerChange(Entity):
    """Filesystem change; kind is 0=Modified, 1=Added, 2=Deleted."""

    path: str
    kind: int


class ContainerProcesses(Entity):
    titles: list[str] = Field(default_factory=list)
    processes: list[list[str]] = Field(default_factory=list)


class ContainerWaitResult(Entity):
    status_code: int
    error: str | None = None


class ContainerPruneResult(Entity):
    containers_deleted: list[str] = Field(default_factory=list)
    space_reclaimed: int = 0


# Images


class Image(Entity):
    id: str
    parent_id: str = ""
    repo_tags: list[str] = Field(default_factory=list)
    repo_digests: list[str] = Field(default_factory=list)
    created: int = 0
    size: int = 0
    shared_size: int = 0
    virtual_size: int = 0
    labels: dict[str, str] = Field(default_factory=dict)
    containers: int = 0


class ImageHistoryEntry(Entity):
    id: str
    created: int = 0
    created_by: str = ""
    tags: list[str] = Field(default_factory=list)
    size: int = 0
    comment: str = ""


class ImageSearchResult(Entity):
    name: str
    description: str = ""
    is_official: bool = False
    is_automated: bool = False
    star_count: int = 0


class ImageDeleteEntry(Entity):
    untagged: str | None = None
    deleted: str | None = None


class ImagePruneResult(Entity):
    images_deleted: list[ImageDeleteEntry] = Field(default_factory=list)
    space_reclaimed: int = 0


# Networks


class IpamConfig(Entity):
    subnet: str | None = None
    ip_range: str | None = None
    gateway: str | None = None
    aux_address: dict[str, str] = Field(default_factory=dict)


class Ipam(Entity):
    driver: str = "default"
    options: dict[str, str] = Field(default_factory=dict)
    config: list[IpamConfig] = Field(default_factory=list)


class NetworkContainer(Entity):
    name: str = ""
    endpoint_id: str = ""
    mac_address: str = ""
    ipv4_address: str = ""
    ipv6_address: str = ""


class Network(Entity):
    name: str
    id: str
    created: str = ""
    scope: str = ""
    driver: str = ""
    enable_ipv6: bool = False
    ipam: Ipam = Field(default_factory=Ipam)
    internal: bool = False
    attachable: bool = False
    ingress: bool = False
    containers: dict[str, NetworkContainer] = Field(default_factory=dict)
    options: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)


class NetworkCreated(Entity):
    id: str
    warning: str = ""


class NetworkPruneResult(Entity):
    networks_deleted: list[str] = Field(default_factory=list)


# Volumes


class VolumeUsage(Entity):
    size: int = -1
    ref_count: int = -1


class Volume(Entity):
    name: str
    driver: str = "local"
    mountpoint: str = ""
    created_at: str | None = None
    status: dict[str, Any] | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    scope: str = "local"
    options: dict[str, str] = Field(default_factory=dict)
    usage_data: VolumeUsage | None = None


class VolumeList(Entity):
    volumes: list[Volume] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class VolumePruneResult(Entity):
    volumes_deleted: list[str] = Field(default_factory=list)
    space_reclaimed: int = 0


# Exec


class ExecInspect(Entity):
    id: str
    running: bool = False
    exit_code: int | None = None
    process_config: dict[str, Any] = Field(default_factory=dict)
    open_stdin: bool = False
    open_stderr: bool = False
    open_stdout: bool = False
    can_remove: bool = False
    container_id: str = ""
    detach_keys: str = ""
    pid: int = 0


# System


class EventActor(Entity):
    id: str = ""
    attributes: dict[str, str] = Field(default_factory=dict)


class SystemEvent(Entity):
    type: str = ""
    action: str = ""
    actor: EventActor = Field(default_factory=EventActor)
    scope: str = ""
    time: int = 0
    time_nano: int = 0


class AuthResult(Entity):
    status: str = ""
    identity_token: str | None = None


# Swarm


class ObjectVersion(Entity):
    index: int = 0


class SwarmNode(Entity):
    id: str
    version: ObjectVersion = Field(default_factory=ObjectVersion)
    created_at: str = ""
    updated_at: str = ""
    spec: dict[str, Any] = Field(default_factory=dict)
    description: dict[str, Any] = Field(default_factory=dict)
    status: dict[str, Any] = Field(default_factory=dict)
    manager_status: dict[str, Any] | None = None


class Service(Entity):
    id: str
    version: ObjectVersion = Field(default_factory=ObjectVersion)
    created_at: str = ""
    updated_at: str = ""
    spec: dict[str, Any] = Field(default_factory=dict)
    endpoint: dict[str, Any] = Field(default_factory=dict)
    update_status: dict[str, Any] | None = None


class ServiceCreated(Entity):
    id: str
    warnings: list[str] = Field(default_factory=list)


class Task(Entity):
    id: str
    version: ObjectVersion = Field(default_factory=ObjectVersion)
    created_at: str = ""
    updated_at: str = ""
    name: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    spec: dict[str, Any] = Field(default_factory=dict)
    service_id: str = ""
    slot: int | None = None
    node_id: str | None = None
    status: dict[str, Any] = Field(default_factory=dict)
    desired_state: str = ""


class Secret(Entity):
    id: str
    version: ObjectVersion = Field(default_factory=ObjectVersion)
    created_at: str = ""
    updated_at: str = ""
    spec: dict[str, Any] = Field(default_factory=dict)


class SwarmConfig(Entity):
    """Swarm config object (named to avoid clashing with settings classes)."""

    id: str
    version: ObjectVersion = Field(default_factory=ObjectVersion)
    created_at: str = ""
    updated_at: str = ""
    spec: dict[str, Any] = Field(default_factory=dict)


class Plugin(Entity):
    id: str | None = None
    name: str
    enabled: bool = False
    settings: dict[str, Any] = Field(default_factory=dict)
    plugin_reference: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)


class PluginPrivilege(Entity):
    name: str
    description: str = ""
    value: list[str] = Field(default_factory=list)


# Docker Hub


class HubRepository(Entity):
    user: str = ""
    name: str
    namespace: str = ""
    repository_type: str | None = None
    status: int = 0
    description: str = ""
    is_private: bool = False
    is_automated: bool = False
    can_edit: bool = False
    star_count: int = 0
    pull_count: int = 0
    last_updated: str | None = None
    is_migrated: bool = False
    collaborator_count: int = 0
    affiliation: str | None = None
    hub_user: str = ""


class HubTagImage(Entity):
    architecture: str = ""
    features: str = ""
    variant: str | None = None
    digest: str = ""
    os: str = ""
    os_features: str = ""
    os_version: str | None = None
    size: int = 0
    status: str = ""
    last_pulled: str | None = None
    last_pushed: str | None = None


class HubTag(Entity):
    creator: int = 0
    id: int = 0
    image_id: str | None = None
    images: list[HubTagImage] = Field(default_factory=list)
    last_updated: str | None = None
    last_updater: int = 0
    last_updater_username: str = ""
    name: str
    repository: int = 0
    full_size: int = 0
    v2: bool = True
    tag_status: str = ""
    tag_last_pushed: str | None = None
    tag_last_pulled: str | None = None


class HubWebhookHook(Entity):
    id: int = 0
    hook_url: str = ""
    active: bool = True
    last_caller: str = ""
    last_result: str = ""


class HubWebhook(Entity):
    id: int = 0
    name: str
    active: bool = True
    expect_final_callback: bool = False
    creator: str = ""
    last_updated: str | None = None
    last_caller: str = ""
    hooks: list[HubWebhookHook] = Field(default_factory=list)


class HubBuildTag(Entity):
    id: int = 0
    name: str = ""
    dockerfile_path: str = ""
    context: str = ""
    source: str = ""
    source_type: str = ""
    auto_build: bool = False


class HubBuildSettings(Entity):
    autotests: str = "OFF"
    build_forks: bool = False
    is_builder: bool = False
    build_tags: list[HubBuildTag] = Field(default_factory=list)


class HubBuildHistory(Entity):
    id: int = 0
    status: int = 0
    status_text: str = ""
    build_tag: str = ""
    cause: str = ""
    created_date: str | None = None
    last_updated: str | None = None
    build_path: str = ""
    docker_tag: str = ""
    build_code: str = ""


class Page(Entity, Generic[T]):
    """One page of a Hub listing with a synthesized next-page cursor."""

    items: list[T] = Field(default_factory=list)
    count: int = 0
    total: int | None = None
    has_more: bool = False
    next_cursor: str | None = None
