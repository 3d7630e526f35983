"""MCP Docker gateway: Docker Engine and Docker Hub operations exposed as MCP tools."""

from mcp_docker_gateway.version import __version__

__all__ = ["__version__"]
