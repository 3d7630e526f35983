"""Lenient decoding of object-valued tool arguments.

Some MCP clients send mapping and list arguments as JSON strings. Tools pass
such arguments through ``parse_json_argument`` before building requests.
"""

import json
from typing import Any

from mcp_docker_gateway.utils.errors import ValidationFailure
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)


def parse_json_argument(value: Any, field_name: str = "argument") -> Any:
    """Decode ``value`` when it is a JSON string; return anything else unchanged.

    Raises:
        ValidationFailure: If ``value`` is a string that is not valid JSON
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise ValidationFailure(
            f"Invalid JSON for {field_name}: {value[:100]}. Expected an object or array. {e}",
            field_errors={field_name: str(e)},
        ) from e
    logger.debug(f"Decoded JSON string argument for {field_name}")
    return parsed
