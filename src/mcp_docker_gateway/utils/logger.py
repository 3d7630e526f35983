"""Logging configuration using loguru.

Every record carries a ``component`` extra naming the module that logged it.
Extras whose key looks like a credential are masked before any sink sees them.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from mcp_docker_gateway.config import ServerConfig

REDACTED = "***"
SECRET_KEY_MARKERS = ("token", "password", "authorization", "registry_auth", "secret")

FILE_ROTATION = "10 MB"
FILE_RETENTION = "7 days"


def _is_secret_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SECRET_KEY_MARKERS)


def redact_extra(record: Any) -> None:
    """Mask credential-like values bound to a record."""
    extra = record["extra"]
    for key in list(extra):
        if _is_secret_key(key) and extra[key]:
            extra[key] = REDACTED


def _sink_options(config: ServerConfig) -> dict[str, Any]:
    if config.json_logging:
        return {"serialize": True, "diagnose": False}
    # diagnose prints local variables, which may hold tenant tokens
    return {"format": config.log_format, "diagnose": config.debug_mode}


def setup_logger(config: ServerConfig, log_file: Path | None = None) -> None:
    """Configure the gateway's loguru sinks.

    Args:
        config: Server configuration (level, format, JSON switch)
        log_file: Optional path of a rotating log file

    """
    logger.remove()
    logger.configure(extra={"component": "gateway"}, patcher=redact_extra)

    options = _sink_options(config)
    logger.add(
        sys.stderr,
        level=config.log_level,
        colorize=not config.json_logging,
        backtrace=True,
        **options,
    )
    if log_file:
        logger.add(
            log_file,
            level=config.log_level,
            rotation=FILE_ROTATION,
            retention=FILE_RETENTION,
            compression="zip",
            backtrace=True,
            **options,
        )

    logger.info(
        "Logger initialized: level={}, json={}, file={}",
        config.log_level,
        config.json_logging,
        log_file or "-",
    )


def get_logger(name: str | None = None) -> Any:
    """Return the shared logger bound to the calling module's name."""
    return logger.bind(component=name or "gateway")
