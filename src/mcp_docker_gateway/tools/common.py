"""Shared plumbing for tool functions.

Every tool resolves the caller's tenant, builds a fresh backend client, runs
one operation and turns the outcome into the response envelope. Failures
never escape as raw exceptions: classified errors become a failure envelope
and the protocol error marker is set by raising ``ToolError`` with it.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Annotated, Any

import httpx
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_headers
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent
from pydantic import Field, ValidationError

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import Config
from mcp_docker_gateway.credentials import (
    TenantCredentials,
    parse_tenant_credentials,
    select_metadata,
)
from mcp_docker_gateway.formatting import ResponseFormat, ToolResponse, format_error
from mcp_docker_gateway.utils.errors import (
    GatewayError,
    UnexpectedError,
    ValidationFailure,
    describe_error_for_logging,
)
from mcp_docker_gateway.utils.logger import get_logger
from mcp_docker_gateway.utils.output_limits import limit_response

logger = get_logger(__name__)

# Common field descriptions
DESC_CONTAINER_ID = "Container ID or name"
DESC_IMAGE_NAME = "Image name or ID"
DESC_NETWORK_ID = "Network ID or name"
DESC_VOLUME_NAME = "Volume name"
DESC_NAMESPACE = "Docker Hub namespace (user or organization)"
DESC_REPOSITORY = "Repository name"
DESC_FILTERS = (
    "Filters as key-value pairs, values may be lists. "
    "Example: {'status': ['running'], 'label': 'env=prod'}"
)

FormatArg = Annotated[
    ResponseFormat,
    Field(description="Output format: 'json' for structured data, 'markdown' for tables"),
]
FiltersArg = Annotated[dict[str, Any] | str | None, Field(description=DESC_FILTERS)]
LabelsArg = Annotated[
    dict[str, str] | str | None,
    Field(description="Labels as key-value pairs. Example: {'env': 'prod'}"),
]

HeadersProvider = Callable[[], Mapping[str, str]]
Operation = Callable[[DockerBackendClient], Awaitable[str]]


class TenantClientFactory:
    """Builds one backend client per tool call from the caller's credentials.

    Over HTTP the tenant comes from the request's ``X-Docker-*`` headers;
    otherwise the environment defaults in ``config.tenant`` apply.
    """

    def __init__(
        self,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
        headers_provider: HeadersProvider | None = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self._headers_provider = headers_provider or get_http_headers

    @property
    def character_limit(self) -> int:
        return self.config.server.character_limit

    def resolve_credentials(self) -> TenantCredentials:
        """Credentials of the tenant behind the current call."""
        metadata = select_metadata(self._headers_provider(), self.config.tenant)
        return parse_tenant_credentials(metadata)

    def create_client(self, credentials: TenantCredentials | None = None) -> DockerBackendClient:
        return DockerBackendClient(
            credentials or self.resolve_credentials(),
            engine_config=self.config.engine,
            hub_config=self.config.hub,
            transport=self.transport,
        )


def _failure(tool_name: str, error: GatewayError) -> ToolResponse:
    level = "ERROR" if error.retryable else "WARNING"
    logger.log(level, f"Tool {tool_name} failed: {describe_error_for_logging(error)}")
    return ToolResponse(text=format_error(error), is_error=True)


async def execute(
    factory: TenantClientFactory, tool_name: str, operation: Operation
) -> ToolResponse:
    """Run ``operation`` against a fresh client and capture its outcome."""
    logger.info(f"Executing tool {tool_name}")
    try:
        async with factory.create_client() as client:
            text = await operation(client)
    except GatewayError as e:
        return _failure(tool_name, e)
    except ValidationError as e:
        field_errors = {
            ".".join(str(part) for part in error["loc"]): error["msg"] for error in e.errors()
        }
        return _failure(
            tool_name,
            ValidationFailure(f"Invalid arguments for {tool_name}", field_errors=field_errors),
        )
    except Exception as e:
        logger.exception(f"Unexpected error in tool {tool_name}")
        return ToolResponse(text=format_error(UnexpectedError(str(e))), is_error=True)

    return ToolResponse(text=limit_response(text, factory.character_limit))


def to_tool_result(response: ToolResponse) -> ToolResult:
    """Hand a response to FastMCP, setting the error marker for failures."""
    if response.is_error:
        raise ToolError(response.text)
    return ToolResult(content=[TextContent(type="text", text=response.text)])


async def run_tool(
    factory: TenantClientFactory, tool_name: str, operation: Operation
) -> ToolResult:
    return to_tool_result(await execute(factory, tool_name, operation))


def text_or_placeholder(text: str, placeholder: str) -> str:
    return text if text.strip() else placeholder
