"""Shared utilities for the MCP Docker gateway."""
