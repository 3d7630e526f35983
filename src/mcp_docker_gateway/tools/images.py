"""FastMCP image tools."""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from mcp_docker_gateway.backend import DockerBackendClient
from mcp_docker_gateway.config import ToolFilterConfig
from mcp_docker_gateway.formatting import ResponseFormat, format_response, format_success
from mcp_docker_gateway.tools.common import (
    DESC_IMAGE_NAME,
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

ImageNameArg = Annotated[str, Field(description=DESC_IMAGE_NAME)]
RegistryUserArg = Annotated[
    str | None,
    Field(description="Registry username (defaults to the tenant's registry credentials)"),
]
RegistryPasswordArg = Annotated[str | None, Field(description="Registry password or token")]


def create_list_images_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def list_images(
        all: Annotated[  # noqa: A002
            bool, Field(description="Include intermediate images")
        ] = False,
        dangling: Annotated[
            bool | None, Field(description="Only dangling (true) or only tagged (false) images")
        ] = None,
        filters: FiltersArg = None,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            parsed = dict(parse_json_argument(filters, "filters") or {})
            if dangling is not None:
                parsed["dangling"] = [str(dangling).lower()]
            images = await client.list_images(all=all, filters=parsed)
            logger.info(f"Found {len(images)} images")
            return format_response(images, format, "image")

        return await run_tool(factory, "docker_list_images", operation)

    return (
        "docker_list_images",
        "List Docker images",
        OperationSafety.SAFE,
        True,
        False,
        list_images,
    )


def create_inspect_image_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def inspect_image(
        name: ImageNameArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.inspect_image(name), format, "image_details")

        return await run_tool(factory, "docker_inspect_image", operation)

    return (
        "docker_inspect_image",
        "Get low-level information about an image",
        OperationSafety.SAFE,
        True,
        False,
        inspect_image,
    )


def create_image_history_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def get_image_history(
        name: ImageNameArg,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            return format_response(await client.get_image_history(name), format, "image_layer")

        return await run_tool(factory, "docker_get_image_history", operation)

    return (
        "docker_get_image_history",
        "Show the layer history of an image",
        OperationSafety.SAFE,
        True,
        False,
        get_image_history,
    )


def create_pull_image_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def pull_image(
        image: Annotated[str, Field(description="Image name, e.g. 'nginx' or 'ghcr.io/org/app'")],
        tag: Annotated[str, Field(description="Tag to pull")] = "latest",
        username: RegistryUserArg = None,
        password: RegistryPasswordArg = None,
        platform: Annotated[
            str | None, Field(description="Platform in os[/arch[/variant]] form")
        ] = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            output = await client.pull_image(
                image, tag=tag, auth=client.registry_auth(username, password), platform=platform
            )
            logger.info(f"Pulled image {image}:{tag}")
            return format_success(f"Image {image}:{tag} pulled", output=output)

        return await run_tool(factory, "docker_pull_image", operation)

    return (
        "docker_pull_image",
        "Pull an image from a registry",
        OperationSafety.MODERATE,
        True,
        True,  # talks to a registry
        pull_image,
    )


def create_push_image_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def push_image(
        name: Annotated[str, Field(description="Image name including the registry/repository")],
        tag: Annotated[str | None, Field(description="Tag to push (all tags if omitted)")] = None,
        username: RegistryUserArg = None,
        password: RegistryPasswordArg = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            output = await client.push_image(
                name, tag=tag, auth=client.registry_auth(username, password)
            )
            return format_success(f"Image {name}{':' + tag if tag else ''} pushed", output=output)

        return await run_tool(factory, "docker_push_image", operation)

    return (
        "docker_push_image",
        "Push an image to a registry",
        OperationSafety.MODERATE,
        True,
        True,
        push_image,
    )


def create_tag_image_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def tag_image(
        name: ImageNameArg,
        repo: Annotated[str, Field(description="Target repository, e.g. 'myorg/app'")],
        tag: Annotated[str, Field(description="Target tag")] = "latest",
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            await client.tag_image(name, repo, tag)
            return format_success(f"Image {name} tagged as {repo}:{tag}")

        return await run_tool(factory, "docker_tag_image", operation)

    return (
        "docker_tag_image",
        "Create a tag that refers to an existing image",
        OperationSafety.MODERATE,
        True,
        False,
        tag_image,
    )


def create_remove_image_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def remove_image(
        name: ImageNameArg,
        force: Annotated[
            bool, Field(description="Remove even if used by stopped containers")
        ] = False,
        no_prune: Annotated[bool, Field(description="Keep untagged parent images")] = False,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            deleted = await client.remove_image(name, force=force, no_prune=no_prune)
            return format_success(f"Image {name} removed", deleted=deleted)

        return await run_tool(factory, "docker_remove_image", operation)

    return (
        "docker_remove_image",
        "Remove an image",
        OperationSafety.DESTRUCTIVE,
        True,
        False,
        remove_image,
    )


def create_search_images_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def search_images(
        term: Annotated[str, Field(min_length=1, description="Search term")],
        limit: Annotated[int, Field(ge=1, le=100, description="Maximum results")] = 25,
        format: FormatArg = ResponseFormat.JSON,  # noqa: A002
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            results = await client.search_images(term, limit=limit)
            return format_response(results, format, "search_result")

        return await run_tool(factory, "docker_search_images", operation)

    return (
        "docker_search_images",
        "Search Docker Hub for images through the engine",
        OperationSafety.SAFE,
        True,
        True,
        search_images,
    )


def create_prune_images_tool(factory: TenantClientFactory) -> ToolDefinition:
    async def prune_images(
        dangling: Annotated[
            bool, Field(description="Only remove dangling images (false removes all unused)")
        ] = True,
        filters: FiltersArg = None,
    ) -> ToolResult:
        async def operation(client: DockerBackendClient) -> str:
            parsed = dict(parse_json_argument(filters, "filters") or {})
            parsed["dangling"] = [str(dangling).lower()]
            result = await client.prune_images(parsed)
            return format_success(
                f"Pruned {len(result.images_deleted)} images",
                imagesDeleted=result.images_deleted,
                spaceReclaimed=result.space_reclaimed,
            )

        return await run_tool(factory, "docker_prune_images", operation)

    return (
        "docker_prune_images",
        "Remove unused images",
        OperationSafety.DESTRUCTIVE,
        False,
        False,
        prune_images,
    )


def register_image_tools(
    app: Any,
    factory: TenantClientFactory,
    filter_config: ToolFilterConfig | None = None,
) -> list[str]:
    """Register all image tools with FastMCP."""
    tools = [
        create_list_images_tool(factory),
        create_inspect_image_tool(factory),
        create_image_history_tool(factory),
        create_pull_image_tool(factory),
        create_push_image_tool(factory),
        create_tag_image_tool(factory),
        create_remove_image_tool(factory),
        create_search_images_tool(factory),
        create_prune_images_tool(factory),
    ]
    return register_tools_with_filtering(app, tools, filter_config, Capability.ENGINE)
