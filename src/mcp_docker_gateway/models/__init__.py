"""Normalized entity models shared by the backend client and the formatter."""

from mcp_docker_gateway.models.entities import Entity, Page

__all__ = ["Entity", "Page"]
