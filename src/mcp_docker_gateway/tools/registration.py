"""Tool registration for the gateway.

Categories are registered per capability: engine tools need a Docker host,
hub tools need Docker Hub credentials, utility tools need nothing.
"""

from collections.abc import Callable, Iterable
from typing import Any

from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.tools.common import TenantClientFactory
from mcp_docker_gateway.tools.containers import register_container_tools
from mcp_docker_gateway.tools.exec import register_exec_tools
from mcp_docker_gateway.tools.hub import register_hub_tools
from mcp_docker_gateway.tools.images import register_image_tools
from mcp_docker_gateway.tools.networks import register_network_tools
from mcp_docker_gateway.tools.plugins import register_plugin_tools
from mcp_docker_gateway.tools.secrets import register_secret_tools
from mcp_docker_gateway.tools.swarm import register_swarm_tools
from mcp_docker_gateway.tools.system import register_system_tools
from mcp_docker_gateway.tools.utility import register_utility_tools
from mcp_docker_gateway.tools.volumes import register_volume_tools
from mcp_docker_gateway.utils.fastmcp_helpers import Capability
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

Registrar = Callable[[Any, TenantClientFactory, ToolFilterConfig | None], list[str]]

CATEGORIES: dict[str, tuple[Capability, Registrar]] = {
    "container": (Capability.ENGINE, register_container_tools),
    "image": (Capability.ENGINE, register_image_tools),
    "network": (Capability.ENGINE, register_network_tools),
    "volume": (Capability.ENGINE, register_volume_tools),
    "exec": (Capability.ENGINE, register_exec_tools),
    "system": (Capability.ENGINE, register_system_tools),
    "swarm": (Capability.ENGINE, register_swarm_tools),
    "secret": (Capability.ENGINE, register_secret_tools),
    "plugin": (Capability.ENGINE, register_plugin_tools),
    "hub": (Capability.HUB, register_hub_tools),
    "utility": (Capability.UTILITY, register_utility_tools),
}


def register_all_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
    capabilities: Iterable[Capability] | None = None,
) -> dict[str, list[str]]:
    """Register every tool category whose capability is enabled.

    Args:
        app: FastMCP application instance
        factory: Builds the per-call backend client
        filter_config: Allow/deny configuration
        capabilities: Capability sets to register (all when None); utility
            tools are always registered

    Returns:
        Dictionary mapping category to list of registered tool names

    Example:
        ```python
        config = Config()
        app = create_fastmcp_app("mcp-docker-gateway")
        factory = TenantClientFactory(config)

        registered = register_all_tools(app, factory, config.tools, {Capability.HUB})
        print(f"Registered {sum(len(v) for v in registered.values())} tools")
        ```
    """
    enabled = set(Capability) if capabilities is None else {*capabilities, Capability.UTILITY}
    logger.info(f"Registering tools for capabilities: {sorted(c.value for c in enabled)}")

    registered: dict[str, list[str]] = {}
    for category, (capability, register) in CATEGORIES.items():
        if capability not in enabled:
            logger.debug(f"Skipping {category} tools ({capability.value} unavailable)")
            continue
        registered[category] = register(app, factory, filter_config)

    total_tools = sum(len(tools) for tools in registered.values())
    logger.info(f"Successfully registered {total_tools} tools across {len(registered)} categories")
    return registered
