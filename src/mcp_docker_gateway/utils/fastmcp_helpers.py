"""Helper functions for FastMCP integration."""

from enum import Enum
from typing import Any

from fastmcp import FastMCP

from mcp_docker_gateway.version import __version__


class OperationSafety(str, Enum):
    """Classification of operation safety levels."""

    SAFE = "safe"  # Read-only operations (list, inspect, logs)
    MODERATE = "moderate"  # State-changing but reversible (start, stop, pull)
    DESTRUCTIVE = "destructive"  # Permanent changes (remove, prune, delete)


class Capability(str, Enum):
    """Credential set a tool needs before it can be reached."""

    ENGINE = "engine"
    HUB = "hub"
    UTILITY = "utility"


def create_fastmcp_app(name: str = "mcp-docker-gateway") -> FastMCP:
    """Create and configure a FastMCP application instance.

    Args:
        name: Application name

    Returns:
        Configured FastMCP instance
    """
    return FastMCP(
        name=name,
        version=__version__,
    )


def get_mcp_annotations(safety_level: OperationSafety) -> dict[str, Any]:
    """Get MCP annotations for a tool based on its safety level.

    Example:
        >>> get_mcp_annotations(OperationSafety.SAFE)
        {'readOnly': True, 'destructive': False}
    """
    return {
        "readOnly": safety_level == OperationSafety.SAFE,
        "destructive": safety_level == OperationSafety.DESTRUCTIVE,
    }
