"""The per-call Docker backend client."""

from typing import Any

from mcp_docker_gateway.backend.containers import ContainerOperations
from mcp_docker_gateway.backend.exec import ExecOperations
from mcp_docker_gateway.backend.hub import HubOperations
from mcp_docker_gateway.backend.images import ImageOperations
from mcp_docker_gateway.backend.networks import NetworkOperations
from mcp_docker_gateway.backend.plugins import PluginOperations
from mcp_docker_gateway.backend.secrets import SecretOperations
from mcp_docker_gateway.backend.swarm import SwarmOperations
from mcp_docker_gateway.backend.system import SystemOperations
from mcp_docker_gateway.backend.volumes import VolumeOperations
from mcp_docker_gateway.credentials import has_engine_credentials, has_hub_credentials
from mcp_docker_gateway.models.requests import RegistryAuth
from mcp_docker_gateway.utils.errors import GatewayError


class DockerBackendClient(
    ContainerOperations,
    ImageOperations,
    NetworkOperations,
    VolumeOperations,
    ExecOperations,
    SystemOperations,
    SwarmOperations,
    SecretOperations,
    PluginOperations,
    HubOperations,
):
    """One tenant's view of the engine and Docker Hub for a single call.

    Instances are never shared: the Hub session token acquired by
    ``hub_login`` lives and dies with the instance.

    Example:
        ```python
        credentials = parse_tenant_credentials({"x-docker-host": "tcp://localhost:2375"})
        async with DockerBackendClient(credentials) as client:
            containers = await client.list_containers(all=True)
        ```
    """

    @property
    def has_engine(self) -> bool:
        return has_engine_credentials(self.credentials)

    @property
    def has_hub(self) -> bool:
        return has_hub_credentials(self.credentials)

    def registry_auth(
        self,
        username: str | None = None,
        password: str | None = None,
        serveraddress: str | None = None,
    ) -> RegistryAuth | None:
        """Registry credentials for one call.

        Explicit arguments win; otherwise the tenant's registry credentials
        are used. Returns ``None`` when neither is complete.
        """
        if username and password:
            return RegistryAuth(
                username=username,
                password=password,
                serveraddress=serveraddress or self.credentials.registry,
            )
        if self.credentials.registry_username and self.credentials.registry_password:
            return RegistryAuth(
                username=self.credentials.registry_username,
                password=self.credentials.registry_password,
                serveraddress=serveraddress or self.credentials.registry,
            )
        return None

    async def test_connection(self) -> dict[str, Any]:
        """Ping the engine and report the outcome instead of raising."""
        try:
            await self.ping()
        except GatewayError as e:
            return {"connected": False, "message": e.message}
        return {"connected": True, "message": "Docker daemon is responsive"}
