"""Docker gateway entry point."""

import asyncio
import os
from enum import Enum
from pathlib import Path
from typing import Any

import typer

from mcp_docker_gateway.config import Config
from mcp_docker_gateway.server import GatewayServer
from mcp_docker_gateway.utils.logger import get_logger, setup_logger
from mcp_docker_gateway.version import __version__


class Transport(str, Enum):
    """Supported transport types."""

    stdio = "stdio"
    http = "http"


SHUTDOWN_COMPLETE_MSG = "Docker gateway shutdown complete"


def run_server(
    logger: Any,
    gateway: GatewayServer,
    transport: Transport,
    host: str,
    port: int,
) -> None:
    """Run the gateway with the given transport.

    FastMCP's ``run()`` is synchronous, so startup and shutdown run in their
    own event loops around it.
    """
    asyncio.run(gateway.start())
    try:
        if transport == Transport.http:
            logger.info(f"Starting FastMCP server with HTTP transport on http://{host}:{port}")
            if host not in ("127.0.0.1", "localhost", "::1"):
                logger.warning(
                    "Serving HTTP on a non-localhost address. Tenant credentials travel in "
                    "request headers; terminate TLS in a reverse proxy."
                )
            gateway.get_app().run(transport="http", host=host, port=port)
        else:
            logger.info("Starting FastMCP server with stdio transport")
            gateway.get_app().run(transport="stdio")
    finally:
        asyncio.run(gateway.stop())
        logger.info(SHUTDOWN_COMPLETE_MSG)


app = typer.Typer(
    name="mcp-docker-gateway",
    help="Multi-tenant Docker Engine and Docker Hub MCP gateway",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"mcp-docker-gateway {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(  # noqa: B008
    transport: Transport = typer.Option(
        Transport.stdio,
        "--transport",
        help="Transport type",
    ),
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        help="Host to bind server",
    ),
    port: int = typer.Option(
        8000,
        "--port",
        help="Port to bind server",
    ),
    version: bool = typer.Option(  # noqa: ARG001
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Run the Docker gateway with the specified transport."""
    config = Config()

    log_path = os.getenv("MCP_GATEWAY_LOG_PATH")
    log_file = Path(log_path) if log_path else Path("mcp_docker_gateway.log")
    setup_logger(config.server, log_file)

    logger = get_logger(__name__)
    logger.info(f"Docker gateway v{__version__}")
    logger.info(f"Configuration: {config}")

    gateway = GatewayServer(config, multi_tenant=transport == Transport.http)

    try:
        run_server(logger, gateway, transport, host, port)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        raise


if __name__ == "__main__":
    app()
