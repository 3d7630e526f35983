"""Decoding of engine attach/log streams and pull/push progress streams."""

import json
import struct
from typing import Any

from mcp_docker_gateway.utils.errors import (
    AuthenticationFailure,
    GatewayError,
    GenericBackendError,
    NotFound,
)

STREAM_HEADER_SIZE = 8
STREAM_TYPES = (0, 1, 2)  # stdin, stdout, stderr

# Substrings of registry errors reported inside pull/push streams
AUTH_MARKERS = ("denied", "unauthorized", "authentication required")
NOT_FOUND_MARKERS = ("manifest unknown", "not found", "does not exist")


def is_multiplexed(payload: bytes) -> bool:
    """Check whether ``payload`` starts with an engine stream frame header."""
    return (
        len(payload) >= STREAM_HEADER_SIZE
        and payload[0] in STREAM_TYPES
        and payload[1:4] == b"\x00\x00\x00"
    )


def demultiplex(payload: bytes) -> str:
    """Strip stream frame headers and return the joined text.

    Containers without a TTY answer logs and exec output as a sequence of
    frames: one byte stream type, three zero bytes, a big-endian uint32 size
    and then ``size`` bytes of data. TTY output is raw and returned as is.
    """
    if not is_multiplexed(payload):
        return payload.decode("utf-8", errors="replace")

    chunks: list[bytes] = []
    offset = 0
    while offset + STREAM_HEADER_SIZE <= len(payload):
        (size,) = struct.unpack(">I", payload[offset + 4 : offset + STREAM_HEADER_SIZE])
        start = offset + STREAM_HEADER_SIZE
        chunks.append(payload[start : start + size])
        offset = start + size
    if offset < len(payload):
        chunks.append(payload[offset:])
    return b"".join(chunks).decode("utf-8", errors="replace")


def split_progress(raw: Any) -> list[Any]:
    """Split a pull/push answer into its progress lines.

    The engine streams one JSON document per line; lines that are not JSON
    are kept as plain strings.
    """
    if raw is None:
        return []
    if isinstance(raw, dict):
        return [raw]
    if isinstance(raw, list):
        return raw
    documents: list[Any] = []
    for line in str(raw).splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            documents.append(json.loads(line))
        except ValueError:
            documents.append(line)
    return documents


def progress_error(documents: list[Any]) -> GatewayError | None:
    """Return the failure reported inside a successful pull/push response.

    Registry failures (unknown manifest, denied push) arrive as an ``error``
    line in a 200 response rather than as an HTTP status.
    """
    for document in documents:
        if not isinstance(document, dict):
            continue
        detail = document.get("errorDetail")
        message = document.get("error")
        if not message and isinstance(detail, dict):
            message = detail.get("message")
        if not message:
            continue
        lowered = str(message).lower()
        if any(marker in lowered for marker in AUTH_MARKERS):
            return AuthenticationFailure(str(message))
        if any(marker in lowered for marker in NOT_FOUND_MARKERS):
            return NotFound(str(message))
        return GenericBackendError(str(message))
    return None


def progress_text(documents: list[Any]) -> str:
    """Render progress lines as text, without the per-chunk progress bars."""
    lines = []
    for document in documents:
        if not isinstance(document, dict):
            lines.append(str(document))
            continue
        if document.get("progress") or not document.get("status"):
            continue
        status = str(document["status"])
        lines.append(f"{document['id']}: {status}" if document.get("id") else status)
    return "\n".join(lines)


def check_progress(raw: Any) -> str:
    """Raise the failure reported in a pull/push stream, else return its text."""
    documents = split_progress(raw)
    error = progress_error(documents)
    if error is not None:
        raise error
    return progress_text(documents)
