"""System-wide engine operations."""

import json
import time
from typing import Any

from mcp_docker_gateway.backend.transport import BackendTransport, encode_filters
from mcp_docker_gateway.mappers import map_auth_result, map_document, map_system_event
from mcp_docker_gateway.models.entities import AuthResult, SystemEvent
from mcp_docker_gateway.models.requests import RegistryAuth
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)


def parse_event_stream(raw: str | None) -> list[dict[str, Any]]:
    """Decode the engine's newline-delimited JSON event stream, skipping non-object lines."""
    events: list[dict[str, Any]] = []
    for line in (raw or "").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            event = json.loads(line)
        except ValueError:
            logger.debug("Skipping undecodable event line")
            continue
        if isinstance(event, dict):
            events.append(event)
    return events


class SystemOperations(BackendTransport):
    async def get_system_info(self) -> dict[str, Any]:
        raw = await self._engine_request("GET", "/info")
        return map_document(raw)

    async def get_version(self) -> dict[str, Any]:
        raw = await self._engine_request("GET", "/version")
        return map_document(raw)

    async def ping(self) -> str:
        raw = await self._engine_request("GET", "/_ping", expect="text")
        return raw or ""

    async def get_disk_usage(self) -> dict[str, Any]:
        raw = await self._engine_request("GET", "/system/df")
        return map_document(raw)

    async def get_events(
        self,
        since: str | None = None,
        until: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[SystemEvent]:
        """Return the events of a bounded time window.

        Without ``until`` the engine would keep the stream open, so the window
        is closed at the current time.
        """
        params: dict[str, Any] = {
            "since": since,
            "until": until if until is not None else str(int(time.time())),
        }
        params.update(encode_filters(filters))
        raw = await self._engine_request("GET", "/events", params=params, expect="text")
        return [map_system_event(event) for event in parse_event_stream(raw)]

    async def auth(self, credentials: RegistryAuth) -> AuthResult:
        """Validate registry credentials with the engine."""
        raw = await self._engine_request(
            "POST", "/auth", json_body=credentials.model_dump(exclude_none=True)
        )
        return map_auth_result(raw or {})
