"""FastMCP middleware that hides and blocks tools the caller has no credentials for.

Over HTTP every capability set is registered because tenants are only known
per request. This middleware narrows ``tools/list`` to what the current
tenant can reach and rejects ``tools/call`` for the rest with an
authentication failure envelope.
"""

from collections.abc import Iterable
from typing import Any

from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import CallNext, MiddlewareContext

from mcp_docker_gateway.credentials import (
    TenantCredentials,
    has_engine_credentials,
    has_hub_credentials,
)
from mcp_docker_gateway.formatting import format_error
from mcp_docker_gateway.tools.common import TenantClientFactory
from mcp_docker_gateway.utils.errors import AuthenticationFailure
from mcp_docker_gateway.utils.fastmcp_helpers import Capability
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

MISSING_CREDENTIALS = {
    Capability.ENGINE: (
        "Docker host not configured. Provide the X-Docker-Host header or DOCKER_HOST."
    ),
    Capability.HUB: (
        "Docker Hub credentials not configured. Provide X-Docker-Hub-Token, or "
        "X-Docker-Hub-Username and X-Docker-Hub-Password."
    ),
}


def available_capabilities(credentials: TenantCredentials) -> set[Capability]:
    """Capability sets reachable with ``credentials``; utility is always reachable."""
    capabilities = {Capability.UTILITY}
    if has_engine_credentials(credentials):
        capabilities.add(Capability.ENGINE)
    if has_hub_credentials(credentials):
        capabilities.add(Capability.HUB)
    return capabilities


def capability_from_tags(tags: Iterable[str] | None) -> Capability:
    """Capability declared by a tool's tags; untagged tools count as engine tools."""
    for tag in tags or ():
        try:
            return Capability(tag)
        except ValueError:
            continue
    return Capability.ENGINE


class TenantCapabilityMiddleware:
    """FastMCP middleware gating tools on the current tenant's credentials.

    Example:
        ```python
        app = create_fastmcp_app("mcp-docker-gateway")
        factory = TenantClientFactory(Config())
        app.add_middleware(TenantCapabilityMiddleware(app, factory))
        ```
    """

    def __init__(self, app: Any, factory: TenantClientFactory):
        self.app = app
        self.factory = factory
        logger.info("Initialized TenantCapabilityMiddleware")

    async def __call__(
        self,
        context: MiddlewareContext[Any],
        call_next: CallNext[Any, Any],
    ) -> Any:
        method = getattr(context, "method", None)
        if method == "tools/list":
            tools = await call_next(context)
            allowed = available_capabilities(self.factory.resolve_credentials())
            visible = [tool for tool in tools if capability_from_tags(tool.tags) in allowed]
            logger.debug(f"Listing {len(visible)} of {len(tools)} tools for current tenant")
            return visible

        tool_name = getattr(context.message, "name", None)
        if method == "tools/call" and tool_name:
            await self._check_call(tool_name)
        return await call_next(context)

    async def _check_call(self, tool_name: str) -> None:
        capability = await self._get_tool_capability(tool_name)
        if capability in available_capabilities(self.factory.resolve_credentials()):
            return
        logger.warning(f"Rejected {tool_name}: {capability.value} credentials missing")
        raise ToolError(format_error(AuthenticationFailure(MISSING_CREDENTIALS[capability])))

    async def _get_tool_capability(self, tool_name: str) -> Capability:
        try:
            tool = await self.app.get_tool(tool_name)
        except Exception as e:
            # Unknown tools are gated like engine tools; the server reports them afterwards
            logger.debug(f"Could not look up {tool_name}: {e}")
            return Capability.ENGINE
        fn_capability = getattr(getattr(tool, "fn", None), "_capability", None)
        if isinstance(fn_capability, Capability):
            return fn_capability
        return capability_from_tags(getattr(tool, "tags", None))
