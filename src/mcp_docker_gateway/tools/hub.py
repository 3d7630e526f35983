"""FastMCP Docker Hub tools.

Listings are paged by page number; the response carries ``hasMore`` and the
next page number as ``nextCursor``. Webhook, build and tag deletion tools
need Hub credentials (a token, username and password, or a session from
``docker_hub_login`` in the same call).
"""

from typing import Annotated, Any, Literal

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.tools.common import (
    DESC_NAMESPACE,
    DESC_REPOSITORY,
    FiltersArg,
    FormatArg,
    TenantClientFactory,
    run_tool,
)
from mcp_docker_gateway.tools.filters import ToolDefinition, register_tools_with_filtering
from mcp_docker_gateway.utils.fastmcp_helpers import Capability, OperationSafety
from mcp_docker_gateway.utils.json_parsing import parse_json_argument
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

NamespaceArg = Annotated[str, Field(min_length=1, description=DESC_NAMESPACE)]
RepositoryArg = Annotated[str, Field(min_length=1, description=DESC_REPOSITORY)]
PageArg = Annotated[int, Field(ge=1, description="Page number, starting at 1")]
PageSizeArg = Annotated[
    int | None, Field(ge=1, le=100, description="Items per page (default 25)")
]


def resolve_page_size(factory: TenantClientFactory, page_size: int | None) -> int:
    """Requested page size, defaulted and capped by the Hub settings."""
    hub = factory.config.hub
    return min(page_size or hub.default_page_size, hub.max_page_size)


def create_hub_login_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_login(
        username: Annotated[str, Field(description="Docker Hub username")],
        password: Annotated[str, Field(description="Docker Hub password or access token")],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            token = await client.hub_login(username, password)
            return format_success("Logged in to Docker Hub", tokenLength=len(token))

        return await run_tool(factory, "docker_hub_login", operation)

    return (
        "docker_hub_login",
        "Log in to Docker Hub and verify the credentials",
        OperationSafety.SAFE,
        True,
        True,
        hub_login,
    )


def create_hub_list_repos_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_list_repos(
        namespace: NamespaceArg,
        page: PageArg = 1,
        page_size: PageSizeArg = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            result = await client.list_repositories(
                namespace,
                page=page,
                page_size=resolve_page_size(factory, page_size),
                filters=parse_json_argument(filters, "filters"),
            )
            logger.info(f"Listed {result.count} repositories in {namespace} (page {page})")
            return format_response(result, format, "hub_repository")

        return await run_tool(factory, "docker_hub_list_repos", operation)

    return (
        "docker_hub_list_repos",
        "List repositories in a Docker Hub namespace",
        OperationSafety.SAFE,
        True,
        True,
        hub_list_repos,
    )


def create_hub_get_repo_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_get_repo(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            repo = await client.get_repository(namespace, repository)
            return format_response(repo, format, "hub_repository")

        return await run_tool(factory, "docker_hub_get_repo", operation)

    return (
        "docker_hub_get_repo",
        "Get details of a Docker Hub repository",
        OperationSafety.SAFE,
        True,
        True,
        hub_get_repo,
    )


def create_hub_list_tags_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_list_tags(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        page: PageArg = 1,
        page_size: PageSizeArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            result = await client.list_tags(
                namespace,
                repository,
                page=page,
                page_size=resolve_page_size(factory, page_size),
            )
            return format_response(result, format, "hub_tag")

        return await run_tool(factory, "docker_hub_list_tags", operation)

    return (
        "docker_hub_list_tags",
        "List tags of a Docker Hub repository",
        OperationSafety.SAFE,
        True,
        True,
        hub_list_tags,
    )


def create_hub_get_tag_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_get_tag(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        tag: Annotated[str, Field(min_length=1, description="Tag name")],
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(
                await client.get_tag(namespace, repository, tag), format, "hub_tag"
            )

        return await run_tool(factory, "docker_hub_get_tag", operation)

    return (
        "docker_hub_get_tag",
        "Get details of a tag, including per-platform images",
        OperationSafety.SAFE,
        True,
        True,
        hub_get_tag,
    )


def create_hub_delete_tag_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_delete_tag(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        tag: Annotated[str, Field(min_length=1, description="Tag name")],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.delete_tag(namespace, repository, tag)
            return format_success(f"Tag {namespace}/{repository}:{tag} deleted")

        return await run_tool(factory, "docker_hub_delete_tag", operation)

    return (
        "docker_hub_delete_tag",
        "Delete a tag from a Docker Hub repository",
        OperationSafety.DESTRUCTIVE,
        True,
        True,
        hub_delete_tag,
    )


def create_hub_list_webhooks_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_list_webhooks(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            webhooks = await client.list_webhooks(namespace, repository)
            return format_response(webhooks, format, "hub_webhook")

        return await run_tool(factory, "docker_hub_list_webhooks", operation)

    return (
        "docker_hub_list_webhooks",
        "List webhooks of a Docker Hub repository",
        OperationSafety.SAFE,
        True,
        True,
        hub_list_webhooks,
    )


def create_hub_create_webhook_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_create_webhook(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        name: Annotated[str, Field(min_length=1, description="Webhook name")],
        webhook_url: Annotated[
            str, Field(pattern=r"^https?://", description="URL called on every push")
        ],
        expect_final_callback: Annotated[
            bool, Field(description="Wait for the hook to call back before finishing")
        ] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            webhook = await client.create_webhook(
                namespace,
                repository,
                name,
                webhook_url,
                expect_final_callback=expect_final_callback,
            )
            return format_success(f"Webhook {name} created", webhook=webhook)

        return await run_tool(factory, "docker_hub_create_webhook", operation)

    return (
        "docker_hub_create_webhook",
        "Create a webhook on a Docker Hub repository",
        OperationSafety.MODERATE,
        False,
        True,
        hub_create_webhook,
    )


def create_hub_delete_webhook_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_delete_webhook(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        webhook_id: Annotated[int, Field(description="Webhook ID")],
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.delete_webhook(namespace, repository, webhook_id)
            return format_success(f"Webhook {webhook_id} deleted")

        return await run_tool(factory, "docker_hub_delete_webhook", operation)

    return (
        "docker_hub_delete_webhook",
        "Delete a webhook from a Docker Hub repository",
        OperationSafety.DESTRUCTIVE,
        True,
        True,
        hub_delete_webhook,
    )


def create_hub_build_settings_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_build_settings(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            settings = await client.get_build_settings(namespace, repository)
            return format_response(settings, format, "hub_build_settings")

        return await run_tool(factory, "docker_hub_build_settings", operation)

    return (
        "docker_hub_build_settings",
        "Get the automated build settings of a repository",
        OperationSafety.SAFE,
        True,
        True,
        hub_build_settings,
    )


def create_hub_build_history_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_build_history(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        page: PageArg = 1,
        page_size: PageSizeArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            history = await client.get_build_history(
                namespace,
                repository,
                page=page,
                page_size=resolve_page_size(factory, page_size),
            )
            return format_response(history, format, "hub_build")

        return await run_tool(factory, "docker_hub_build_history", operation)

    return (
        "docker_hub_build_history",
        "Get the automated build history of a repository",
        OperationSafety.SAFE,
        True,
        True,
        hub_build_history,
    )


def create_hub_trigger_build_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def hub_trigger_build(
        namespace: NamespaceArg,
        repository: RepositoryArg,
        source_type: Annotated[
            Literal["Branch", "Tag"], Field(description="Kind of source reference")
        ] = "Branch",
        source_name: Annotated[str, Field(description="Branch or tag name")] = "main",
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.trigger_build(
                namespace, repository, source_type=source_type, source_name=source_name
            )
            return format_success(
                f"Build triggered for {namespace}/{repository} from {source_type} {source_name}"
            )

        return await run_tool(factory, "docker_hub_trigger_build", operation)

    return (
        "docker_hub_trigger_build",
        "Trigger an automated build of a repository",
        OperationSafety.MODERATE,
        False,
        True,
        hub_trigger_build,
    )


def register_hub_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register all Docker Hub tools with FastMCP."""
    tools = [
        create_hub_login_tool(factory),
        create_hub_list_repos_tool(factory),
        create_hub_get_repo_tool(factory),
        create_hub_list_tags_tool(factory),
        create_hub_get_tag_tool(factory),
        create_hub_delete_tag_tool(factory),
        create_hub_list_webhooks_tool(factory),
        create_hub_create_webhook_tool(factory),
        create_hub_delete_webhook_tool(factory),
        create_hub_build_settings_tool(factory),
        create_hub_build_history_tool(factory),
        create_hub_trigger_build_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.HUB)
