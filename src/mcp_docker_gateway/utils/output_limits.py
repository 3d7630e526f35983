"""Output limiting for tool responses.

Tool payloads are returned to a language model, so a single response is
capped at the configured character limit.
JSON payloads are shortened by dropping list items (or, failing that, by
replacing the document with a preview) so they still parse; other text is
cut and followed by a hint.
"""

import json
from typing import Any

from humanfriendly import format_size  # type: ignore[import-untyped]

from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

TRUNCATION_HINT = (
    "Response truncated from {original} to {limit} characters ({size}). "
    "Narrow the request with filters, a smaller page size or a lower tail value."
)


def truncate_text(text: str, max_chars: int) -> tuple[str, bool]:
    """Truncate text to a maximum number of characters.

    Args:
        text: Text to truncate
        max_chars: Maximum characters allowed (0 = no limit)

    Returns:
        Tuple of (truncated_text, was_truncated)
    """
    if max_chars <= 0 or len(text) <= max_chars:
        return text, False
    return text[:max_chars], True


def create_truncation_metadata(original_chars: int, truncated_chars: int) -> dict[str, Any]:
    """Describe a truncation for inclusion in logs or responses."""
    return {
        "truncated": True,
        "original_chars": original_chars,
        "truncated_chars": truncated_chars,
        "original_size_human": format_size(original_chars),
    }


def apply_character_limit(text: str, max_chars: int) -> str:
    """Cap ``text`` at ``max_chars`` and append a hint when it was cut."""
    truncated, was_truncated = truncate_text(text, max_chars)
    if not was_truncated:
        return text

    metadata = create_truncation_metadata(len(text), len(truncated))
    logger.debug(f"Truncated tool response: {metadata}")
    hint = TRUNCATION_HINT.format(
        original=metadata["original_chars"],
        limit=max_chars,
        size=metadata["original_size_human"],
    )
    return f"{truncated}\n\n{hint}"


def truncate_list(items: list[Any], max_items: int) -> tuple[list[Any], bool]:
    """Keep the first ``max_items`` items of a list."""
    if len(items) <= max_items:
        return items, False
    return items[:max_items], True


def _render(document: Any) -> str:
    return json.dumps(document, indent=2, default=str)


def _shrunk(document: Any, items: list[Any], original_count: int, message: str) -> Any:
    notice = {"truncated": True, "originalCount": original_count, "message": message}
    if isinstance(document, list):
        return {"items": items, "count": len(items), **notice}
    return {**document, "items": items, "count": len(items), **notice}


def limit_json_document(document: Any, text: str, max_chars: int) -> str:
    """Fit a parsed JSON response into ``max_chars`` while keeping it valid JSON.

    A top-level list (or the ``items`` list of a page) is cut to the longest
    prefix that fits; the result is an object carrying the kept items and a
    truncation notice. Documents without such a list become a preview object.
    """
    metadata = create_truncation_metadata(len(text), max_chars)
    hint = TRUNCATION_HINT.format(
        original=metadata["original_chars"],
        limit=max_chars,
        size=metadata["original_size_human"],
    )
    if isinstance(document, list):
        items = document
    elif isinstance(document, dict) and isinstance(document.get("items"), list):
        items = document["items"]
    else:
        items = None

    if items is not None:
        low, high = 0, len(items)
        while low < high:
            middle = (low + high + 1) // 2
            kept, _ = truncate_list(items, middle)
            if len(_render(_shrunk(document, kept, len(items), hint))) <= max_chars:
                low = middle
            else:
                high = middle - 1
        if low > 0:
            kept, _ = truncate_list(items, low)
            logger.debug(f"Truncated JSON list response to {low} of {len(items)} items")
            return _render(_shrunk(document, kept, len(items), hint))

    logger.debug(f"Replaced JSON response with a preview: {metadata}")
    preview_chars = max_chars
    while True:
        preview, _ = truncate_text(text, preview_chars)
        rendered = _render({"truncated": True, "message": hint, "preview": preview})
        overflow = len(rendered) - max_chars
        if overflow <= 0 or preview_chars == 0:
            return rendered
        preview_chars = max(0, preview_chars - overflow)


def limit_response(text: str, max_chars: int) -> str:
    """Apply the character limit to a tool response of any format."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    try:
        document = json.loads(text)
    except ValueError:
        return apply_character_limit(text, max_chars)
    if not isinstance(document, dict | list):
        return apply_character_limit(text, max_chars)
    return limit_json_document(document, text, max_chars)
