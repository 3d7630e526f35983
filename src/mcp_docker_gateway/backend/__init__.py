"""Dual-protocol client for the Docker Engine and Docker Hub APIs."""

from mcp_docker_gateway.backend.client import DockerBackendClient

__all__ = ["DockerBackendClient"]
