"""Server package for the Docker gateway."""

from mcp_docker_gateway.server.server import GatewayServer

__all__ = ["GatewayServer"]
