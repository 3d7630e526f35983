"""Typed inputs for backend operations that send a request body."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class RequestModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class RegistryAuth(RequestModel):
    """Registry credentials sent in the X-Registry-Auth header."""

    username: str
    password: str
    serveraddress: str | None = None


class PortBinding(RequestModel):
    host_ip: str | None = None
    host_port: str


class ContainerCreateRequest(RequestModel):
    image: str
    cmd: list[str] | None = None
    entrypoint: list[str] | None = None
    env: list[str] | None = None
    working_dir: str | None = None
    hostname: str | None = None
    user: str | None = None
    tty: bool | None = None
    open_stdin: bool | None = None
    labels: dict[str, str] | None = None
    binds: list[str] | None = None
    # "80/tcp" -> host bindings; keys are also exposed
    port_bindings: dict[str, list[PortBinding]] | None = None
    network_mode: str | None = None
    restart_policy: Literal["no", "always", "unless-stopped", "on-failure"] | None = None
    auto_remove: bool | None = None
    privileged: bool | None = None


class ContainerUpdateRequest(RequestModel):
    cpu_shares: int | None = None
    memory: int | None = None
    memory_swap: int | None = None
    cpu_period: int | None = None
    cpu_quota: int | None = None
    cpuset_cpus: str | None = None
    cpuset_mems: str | None = None


class NetworkCreateRequest(RequestModel):
    name: str
    driver: str = "bridge"
    internal: bool | None = None
    attachable: bool | None = None
    ingress: bool | None = None
    enable_ipv6: bool | None = None
    subnet: str | None = None
    gateway: str | None = None
    ip_range: str | None = None
    options: dict[str, str] | None = None
    labels: dict[str, str] | None = None


class VolumeCreateRequest(RequestModel):
    name: str | None = None
    driver: str = "local"
    driver_opts: dict[str, str] | None = None
    labels: dict[str, str] | None = None


class ExecCreateRequest(RequestModel):
    cmd: list[str]
    attach_stdin: bool = False
    attach_stdout: bool = True
    attach_stderr: bool = True
    detach_keys: str | None = None
    tty: bool = False
    env: list[str] | None = None
    privileged: bool = False
    user: str | None = None
    working_dir: str | None = None


class SwarmInitRequest(RequestModel):
    listen_addr: str = "0.0.0.0:2377"
    advertise_addr: str | None = None
    data_path_addr: str | None = None
    data_path_port: int | None = None
    default_addr_pool: list[str] | None = None
    subnet_size: int | None = None
    force_new_cluster: bool = False


class SwarmJoinRequest(RequestModel):
    remote_addrs: list[str]
    join_token: str
    listen_addr: str = "0.0.0.0:2377"
    advertise_addr: str | None = None
    data_path_addr: str | None = None


class NodeUpdateRequest(RequestModel):
    role: Literal["worker", "manager"]
    availability: Literal["active", "pause", "drain"]
    name: str | None = None
    labels: dict[str, str] | None = None


class PublishedPort(RequestModel):
    target_port: int
    published_port: int | None = None
    protocol: Literal["tcp", "udp", "sctp"] = "tcp"
    publish_mode: Literal["ingress", "host"] | None = None


class ServiceCreateRequest(RequestModel):
    name: str
    image: str
    replicas: int | None = None
    global_mode: bool = False
    cmd: list[str] | None = None
    env: list[str] | None = None
    labels: dict[str, str] | None = None
    published_ports: list[PublishedPort] = Field(default_factory=list)
    networks: list[str] | None = None
    constraints: list[str] | None = None


class ServiceUpdateRequest(RequestModel):
    image: str | None = None
    replicas: int | None = None
    env: list[str] | None = None
    labels: dict[str, str] | None = None
    force_update: bool = False


class SpecSnapshot(RequestModel):
    """Current version and wire-format spec of a swarm object.

    The engine replaces the whole spec on update, so updates start from this.
    """

    version: int
    spec: dict[str, Any]
