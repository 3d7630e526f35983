"""FastMCP server for the Docker gateway.

Builds the FastMCP app, attaches the tenant capability middleware and
registers the tool categories the deployment can serve.
"""

from fastmcp import FastMCP

from mcp_docker_gateway.config import Config
from mcp_docker_gateway.credentials import defaults_metadata, parse_tenant_credentials
from mcp_docker_gateway.middleware import TenantCapabilityMiddleware, available_capabilities
from mcp_docker_gateway.tools import TenantClientFactory, register_all_tools
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, create_fastmcp_app
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)


class GatewayServer:
    """FastMCP server exposing Docker Engine and Docker Hub operations.

    With ``multi_tenant`` (HTTP transport) every capability set is registered
    and the middleware narrows it per request. Otherwise the environment
    defaults decide once which sets are registered.
    """

    def __init__(self, config: Config, multi_tenant: bool = False) -> None:
        self.config = config
        self.multi_tenant = multi_tenant
        self.factory = TenantClientFactory(config)

        logger.info("Initializing Docker gateway server")
        self.app = create_fastmcp_app(name=config.server.server_name)

        self.capability_middleware = TenantCapabilityMiddleware(self.app, self.factory)
        # NOTE: Middleware classes are protocol-compatible but don't inherit from base class
        self.app.add_middleware(self.capability_middleware)  # type: ignore[arg-type]

        self.capabilities = self._registered_capabilities()
        self.registered_tools = register_all_tools(
            self.app, self.factory, config.tools, self.capabilities
        )
        total_tools = sum(len(tools) for tools in self.registered_tools.values())
        logger.info(
            f"Registered {total_tools} tools "
            f"(capabilities: {', '.join(sorted(c.value for c in self.capabilities))})"
        )

    def _registered_capabilities(self) -> set[Capability]:
        if self.multi_tenant:
            return set(Capability)
        defaults = parse_tenant_credentials(defaults_metadata(self.config.tenant))
        return available_capabilities(defaults)

    async def start(self) -> None:
        """Log what the default tenant can reach."""
        logger.info("Starting Docker gateway server")
        if self.multi_tenant:
            logger.info("Tenant credentials are read from X-Docker-* request headers")

        defaults = parse_tenant_credentials(defaults_metadata(self.config.tenant))
        default_capabilities = available_capabilities(defaults)
        engine = "yes" if Capability.ENGINE in default_capabilities else "no"
        hub = "yes" if Capability.HUB in default_capabilities else "no"
        logger.info(f"Default tenant: engine={engine}, hub={hub}")
        if not self.multi_tenant and Capability.ENGINE not in default_capabilities:
            logger.warning("DOCKER_HOST is not set; engine tools are not registered")

    async def stop(self) -> None:
        """Stop the server. Backend clients are per call, so nothing stays open."""
        logger.info("Stopping Docker gateway server")

    def get_app(self) -> FastMCP:
        """Get the underlying FastMCP application."""
        return self.app
