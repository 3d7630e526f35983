"""Response formatting for tool results.

A result is rendered either as indented JSON (``json``) or as a Markdown
projection (``markdown``). Markdown tables are chosen by an entity-type tag
through ``TABLE_LAYOUTS``; unknown tags fall back to a generic layout built
from the first item's keys. Rendering is pure: the same input, format and
``now`` always produce the same text.
"""

import json
import re
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from mcp_docker_gateway.models.entities import Entity
from mcp_docker_gateway.utils.errors import GatewayError

NO_ITEMS = "_No items found._"
GENERIC_MAX_COLUMNS = 5
GENERIC_CELL_WIDTH = 30
SHORT_ID_LENGTH = 12
RELATIVE_TIME_MAX_DAYS = 7
BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


class ResponseFormat(str, Enum):
    """Output format requested by the caller."""

    JSON = "json"
    MARKDOWN = "markdown"


class ToolResponse(BaseModel):
    """Text payload handed back to the protocol layer."""

    text: str
    is_error: bool = False


# Value helpers


def to_jsonable(data: Any) -> Any:
    """Convert entities (and containers of entities) to plain JSON values."""
    if isinstance(data, Entity):
        return data.to_payload()
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    if isinstance(data, list | tuple):
        return [to_jsonable(item) for item in data]
    return data


def format_bytes(size: int | float | None) -> str:
    """Render a byte count as B/KB/MB/GB/TB with one decimal place."""
    if not size or size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {BYTE_UNITS[unit]}"


_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: Any) -> datetime | None:
    """Accept epoch seconds or an RFC 3339 string (nanosecond precision allowed)."""
    if isinstance(value, bool) or value in (None, "", 0):
        return None
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value, tz=UTC)
    if isinstance(value, str):
        text = _FRACTION.sub(r"\1", value.strip()).replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def format_relative_time(value: Any, now: datetime | None = None) -> str:
    """Render a timestamp relative to ``now`` when under a week old.

    Older timestamps render as an ISO date (``YYYY-MM-DD``); unparseable
    values render as ``-``.
    """
    moment = parse_timestamp(value)
    if moment is None:
        return "-"
    current = now or datetime.now(UTC)
    seconds = int((current - moment).total_seconds())
    if seconds < 60:
        return "Just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    if days < RELATIVE_TIME_MAX_DAYS:
        return f"{days} day{'s' if days != 1 else ''} ago"
    return moment.date().isoformat()


def _short_id(value: Any) -> str:
    text = str(value or "")
    if text.startswith("sha256:"):
        text = text[len("sha256:") :]
    return text[:SHORT_ID_LENGTH]


def _get(item: dict[str, Any], *path: str) -> Any:
    current: Any = item
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value).replace("|", "\\|").replace("\n", " ")


def title_case(key: str) -> str:
    """``createdAt`` -> ``Created At``."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", key).replace("_", " ")
    return " ".join(word[:1].upper() + word[1:] for word in spaced.split())


# Per-entity table layouts


def _container_ports(ports: Any) -> str:
    rendered = []
    for port in ports or []:
        private = f"{port.get('privatePort')}/{port.get('type', 'tcp')}"
        public = port.get("publicPort")
        rendered.append(f"{public}->{private}" if public else private)
    return ", ".join(rendered)


def _container_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    names = ", ".join(name.lstrip("/") for name in item.get("names") or [])
    return [
        _short_id(item.get("id")),
        names,
        item.get("image"),
        item.get("status"),
        item.get("state"),
        _container_ports(item.get("ports")),
    ]


def _image_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [
        _short_id(item.get("id")),
        ", ".join(item.get("repoTags") or []) or "<none>",
        format_bytes(item.get("size")),
        format_relative_time(item.get("created"), now),
    ]


def _network_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [
        _short_id(item.get("id")),
        item.get("name"),
        item.get("driver"),
        item.get("scope"),
        item.get("internal"),
    ]


def _volume_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [item.get("name"), item.get("driver"), item.get("scope"), item.get("mountpoint")]


def _service_mode(spec: dict[str, Any]) -> str:
    mode = spec.get("mode") or {}
    if "global" in mode:
        return "global"
    replicas = _get(mode, "replicated", "replicas")
    return f"replicated ({replicas if replicas is not None else 1})"


def _service_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    spec = item.get("spec") or {}
    return [
        _short_id(item.get("id")),
        spec.get("name"),
        _service_mode(spec),
        _get(spec, "taskTemplate", "containerSpec", "image"),
        format_relative_time(item.get("updatedAt"), now),
    ]


def _node_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [
        _short_id(item.get("id")),
        _get(item, "description", "hostname"),
        _get(item, "spec", "role"),
        _get(item, "spec", "availability"),
        _get(item, "status", "state"),
    ]


def _task_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [
        _short_id(item.get("id")),
        _short_id(item.get("serviceId")),
        _short_id(item.get("nodeId")) or "-",
        item.get("desiredState"),
        _get(item, "status", "state"),
    ]


def _swarm_object_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [
        _short_id(item.get("id")),
        _get(item, "spec", "name"),
        format_relative_time(item.get("createdAt"), now),
        format_relative_time(item.get("updatedAt"), now),
    ]


def _plugin_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [
        _short_id(item.get("id")),
        item.get("name"),
        item.get("enabled"),
        item.get("pluginReference"),
    ]


def _hub_repository_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [
        f"{item.get('namespace')}/{item.get('name')}",
        item.get("starCount"),
        item.get("pullCount"),
        item.get("isPrivate"),
        format_relative_time(item.get("lastUpdated"), now),
    ]


def _hub_tag_row(item: dict[str, Any], now: datetime | None = None) -> list[Any]:
    return [
        item.get("name"),
        format_bytes(item.get("fullSize")),
        format_relative_time(item.get("tagLastPushed") or item.get("lastUpdated"), now),
        item.get("tagStatus"),
    ]


TableLayout = tuple[str, Sequence[str], Callable[[dict[str, Any], datetime | None], list[Any]]]

# entity-type tag -> (heading, columns, row builder)
TABLE_LAYOUTS: dict[str, TableLayout] = {
    "container": (
        "Containers",
        ("ID", "Names", "Image", "Status", "State", "Ports"),
        _container_row,
    ),
    "image": ("Images", ("ID", "RepoTags", "Size", "Created"), _image_row),
    "network": ("Networks", ("ID", "Name", "Driver", "Scope", "Internal"), _network_row),
    "volume": ("Volumes", ("Name", "Driver", "Scope", "Mountpoint"), _volume_row),
    "service": ("Services", ("ID", "Name", "Mode", "Image", "Updated"), _service_row),
    "node": ("Nodes", ("ID", "Hostname", "Role", "Availability", "State"), _node_row),
    "task": ("Tasks", ("ID", "Service", "Node", "Desired State", "State"), _task_row),
    "secret": ("Secrets", ("ID", "Name", "Created", "Updated"), _swarm_object_row),
    "config": ("Configs", ("ID", "Name", "Created", "Updated"), _swarm_object_row),
    "plugin": ("Plugins", ("ID", "Name", "Enabled", "Reference"), _plugin_row),
    "hub_repository": (
        "Repositories",
        ("Repository", "Stars", "Pulls", "Private", "Updated"),
        _hub_repository_row,
    ),
    "hub_tag": ("Tags", ("Tag", "Size", "Last Pushed", "Status"), _hub_tag_row),
}


def _table(columns: Sequence[str], rows: list[list[Any]]) -> str:
    lines = [
        "| " + " | ".join(columns) + " |",
        "|" + "|".join("---" for _ in columns) + "|",
    ]
    lines.extend("| " + " | ".join(_cell(value) for value in row) + " |" for row in rows)
    return "\n".join(lines)


def _generic_table(items: list[Any]) -> str:
    first = items[0]
    if not isinstance(first, dict):
        return "\n".join(f"- {_cell(item)}" for item in items)
    columns = list(first)[:GENERIC_MAX_COLUMNS]

    def clip(value: Any) -> str:
        text = value if isinstance(value, str) else json.dumps(value, default=str)
        return text[:GENERIC_CELL_WIDTH]

    rows = [
        [clip(item.get(column)) if isinstance(item, dict) else "" for column in columns]
        for item in items
    ]
    return _table([title_case(column) for column in columns], rows)


def _heading(entity_type: str | None, plural: bool) -> str:
    if entity_type in TABLE_LAYOUTS:
        heading = TABLE_LAYOUTS[entity_type][0]
        if plural:
            return heading
        return heading[:-3] + "y" if heading.endswith("ies") else heading.rstrip("s")
    if entity_type:
        return title_case(entity_type.replace("_", " "))
    return "Results" if plural else "Result"


def format_list_markdown(
    items: list[Any],
    entity_type: str | None,
    total: int | None = None,
    has_more: bool = False,
    next_cursor: str | None = None,
    now: datetime | None = None,
) -> str:
    """Render a listing as a Markdown table with a count header."""
    lines = [f"## {_heading(entity_type, plural=True)}", ""]
    if total is not None:
        lines.append(f"**Total:** {total} | **Showing:** {len(items)}")
    else:
        lines.append(f"**Showing:** {len(items)}")
    if has_more:
        lines.append(f"**More available:** Yes (cursor: `{next_cursor}`)")
    lines.append("")

    if not items:
        lines.append(NO_ITEMS)
    elif entity_type in TABLE_LAYOUTS and all(isinstance(item, dict) for item in items):
        _, columns, row = TABLE_LAYOUTS[entity_type]
        lines.append(_table(columns, [row(item, now) for item in items]))
    else:
        lines.append(_generic_table(items))
    return "\n".join(lines)


def format_object_markdown(item: dict[str, Any], entity_type: str | None) -> str:
    """Render one object as ``**Key:** value`` lines; nested values as JSON blocks."""
    lines = [f"## {_heading(entity_type, plural=False)}", ""]
    for key, value in item.items():
        label = title_case(key)
        if isinstance(value, dict | list) and value:
            lines.append(f"**{label}:**")
            lines.append("```json")
            lines.append(json.dumps(value, indent=2, default=str))
            lines.append("```")
        elif isinstance(value, dict | list):
            lines.append(f"**{label}:** -")
        else:
            lines.append(f"**{label}:** {_cell(value)}")
    return "\n".join(lines)


def _is_page(payload: Any) -> bool:
    return isinstance(payload, dict) and "items" in payload and "hasMore" in payload


def format_markdown(payload: Any, entity_type: str | None, now: datetime | None = None) -> str:
    if _is_page(payload):
        return format_list_markdown(
            payload["items"],
            entity_type,
            total=payload.get("total"),
            has_more=bool(payload.get("hasMore")),
            next_cursor=payload.get("nextCursor"),
            now=now,
        )
    if isinstance(payload, list):
        return format_list_markdown(payload, entity_type, now=now)
    if isinstance(payload, dict):
        return format_object_markdown(payload, entity_type)
    if payload is None:
        return NO_ITEMS
    return str(payload)


def format_response(
    data: Any,
    fmt: ResponseFormat | str = ResponseFormat.JSON,
    entity_type: str | None = None,
    now: datetime | None = None,
) -> str:
    """Render a result in the requested format.

    Relative times in Markdown tables are measured from ``now``, which
    defaults to the current time.
    """
    payload = to_jsonable(data)
    if ResponseFormat(fmt) == ResponseFormat.MARKDOWN:
        return format_markdown(payload, entity_type, now)
    return json.dumps(payload, indent=2, default=str)


def format_success(message: str, **extra: Any) -> str:
    """Envelope for action tools: ``{"success": true, "message": ...}``."""
    body: dict[str, Any] = {"success": True, "message": message}
    body.update({key: to_jsonable(value) for key, value in extra.items()})
    return json.dumps(body, indent=2, default=str)


def format_error(error: GatewayError) -> str:
    """Failure envelope carrying the message and normalized error details."""
    suffix = " (retryable)" if error.retryable else ""
    body = {"error": f"Error: {error.message}{suffix}", "details": error.details()}
    return json.dumps(body, indent=2, default=str)
