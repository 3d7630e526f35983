"""Tool filtering and registration helpers.

Separated from registration.py so category modules can import it without
circular imports.
"""

from fnmatch import fnmatchcase
from typing import Any

from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.utils.fastmcp_helpers import (
    Capability,
    OperationSafety,
    get_mcp_annotations,
)
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

ToolDefinition = tuple[str, str, OperationSafety, bool, bool, Any]


def _matches(tool_name: str, patterns: list[str]) -> bool:
    return any(fnmatchcase(tool_name, pattern) for pattern in patterns)


def should_register_tool(tool_name: str, filter_config: ToolFilterConfig) -> bool:
    """Check if a tool should be registered based on allow/deny lists.

    List entries are tool names or shell-style patterns such as
    ``docker_hub_*``.

    Logic:
        1. If tool matches denied_tools -> False (deny list takes precedence)
        2. If allowed_tools is not empty and tool matches none of it -> False
        3. Otherwise -> True
    """
    if filter_config.denied_tools and _matches(tool_name, filter_config.denied_tools):
        logger.debug(f"Skipping tool {tool_name} (in deny list)")
        return False

    if filter_config.allowed_tools and not _matches(tool_name, filter_config.allowed_tools):
        logger.debug(f"Skipping tool {tool_name} (not in allow list)")
        return False

    return True


def register_tools_with_filtering(
    app: Any,
    tools: list[ToolDefinition],
    filter_config: ToolFilterConfig | None,
    capability: Capability,
) -> list[str]:
    """Register one category of tools, honoring the allow/deny lists.

    Args:
        app: FastMCP application instance
        tools: List of (name, description, safety_level, idempotent, open_world, func) tuples
        filter_config: Allow/deny configuration (None to skip filtering)
        capability: Credential set every tool in the list needs

    Returns:
        List of registered tool names
    """
    registered_names = []

    for name, description, safety_level, idempotent, open_world, func in tools:
        if filter_config and not should_register_tool(name, filter_config):
            continue

        annotations = get_mcp_annotations(safety_level)
        annotations["idempotent"] = idempotent
        annotations["openWorldInteraction"] = open_world

        # FastMCP keeps the original function as tool.fn, so attach metadata first
        func._safety_level = safety_level  # pyright: ignore[reportAttributeAccessIssue]
        func._tool_name = name  # pyright: ignore[reportAttributeAccessIssue]
        func._capability = capability  # pyright: ignore[reportAttributeAccessIssue]

        app.tool(
            name=name,
            description=description,
            annotations=annotations,
            tags={capability.value},
        )(func)

        registered_names.append(name)
        logger.debug(
            f"Registered FastMCP tool: {name} "
            f"(safety: {safety_level.value}, capability: {capability.value})"
        )

    return registered_names
