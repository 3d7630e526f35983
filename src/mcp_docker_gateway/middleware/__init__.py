"""FastMCP middleware for the gateway."""

from mcp_docker_gateway.middleware.capabilities import (
    TenantCapabilityMiddleware,
    available_capabilities,
)

__all__ = ["TenantCapabilityMiddleware", "available_capabilities"]
