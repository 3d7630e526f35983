"""Docker Hub repository, tag, webhook and build operations.

Listings are page-number based; ``Page.next_cursor`` is the next page number.
Operations on webhooks, builds and tag deletion need an authenticated caller
and fail before any request when no Hub credentials are available.
"""

from typing import Any

from mcp_docker_gateway.backend.transport import BackendTransport, FilterStyle, encode_filters
from mcp_docker_gateway.mappers import (
    map_hub_build_history,
    map_hub_build_settings,
    map_hub_page,
    map_hub_repository,
    map_hub_tag,
    map_hub_webhook,
)
from mcp_docker_gateway.models.entities import (
    HubBuildHistory,
    HubBuildSettings,
    HubRepository,
    HubTag,
    HubWebhook,
    Page,
)


def _repo_path(namespace: str, repository: str) -> str:
    return f"/repositories/{namespace}/{repository}"


def _page_params(
    page: int, page_size: int, filters: dict[str, Any] | None = None
) -> dict[str, Any]:
    params: dict[str, Any] = {"page": page, "page_size": page_size}
    params.update(encode_filters(filters, FilterStyle.HUB))
    return params


class HubOperations(BackendTransport):
    async def list_repositories(
        self,
        namespace: str,
        page: int = 1,
        page_size: int = 25,
        filters: dict[str, Any] | None = None,
    ) -> Page[HubRepository]:
        raw = await self._hub_request(
            "GET", f"/repositories/{namespace}/", params=_page_params(page, page_size, filters)
        )
        return map_hub_page(raw or {}, page, map_hub_repository)

    async def get_repository(self, namespace: str, repository: str) -> HubRepository:
        raw = await self._hub_request("GET", f"{_repo_path(namespace, repository)}/")
        return map_hub_repository(raw or {})

    async def list_tags(
        self,
        namespace: str,
        repository: str,
        page: int = 1,
        page_size: int = 25,
    ) -> Page[HubTag]:
        raw = await self._hub_request(
            "GET",
            f"{_repo_path(namespace, repository)}/tags/",
            params=_page_params(page, page_size),
        )
        return map_hub_page(raw or {}, page, map_hub_tag)

    async def get_tag(self, namespace: str, repository: str, tag: str) -> HubTag:
        raw = await self._hub_request("GET", f"{_repo_path(namespace, repository)}/tags/{tag}/")
        return map_hub_tag(raw or {})

    async def delete_tag(self, namespace: str, repository: str, tag: str) -> None:
        await self._hub_request(
            "DELETE",
            f"{_repo_path(namespace, repository)}/tags/{tag}/",
            require_auth=True,
        )

    async def list_webhooks(self, namespace: str, repository: str) -> list[HubWebhook]:
        raw = await self._hub_request(
            "GET", f"{_repo_path(namespace, repository)}/webhooks/", require_auth=True
        )
        results = raw.get("results") if isinstance(raw, dict) else None
        return [map_hub_webhook(item) for item in results or [] if isinstance(item, dict)]

    async def create_webhook(
        self,
        namespace: str,
        repository: str,
        name: str,
        webhook_url: str,
        expect_final_callback: bool = False,
    ) -> HubWebhook:
        raw = await self._hub_request(
            "POST",
            f"{_repo_path(namespace, repository)}/webhooks/",
            json_body={
                "name": name,
                "expect_final_callback": expect_final_callback,
                "webhooks": [{"name": name, "hook_url": webhook_url}],
            },
            require_auth=True,
        )
        return map_hub_webhook(raw or {})

    async def delete_webhook(self, namespace: str, repository: str, webhook_id: int) -> None:
        await self._hub_request(
            "DELETE",
            f"{_repo_path(namespace, repository)}/webhooks/{webhook_id}/",
            require_auth=True,
        )

    async def get_build_settings(self, namespace: str, repository: str) -> HubBuildSettings:
        raw = await self._hub_request(
            "GET", f"{_repo_path(namespace, repository)}/autobuild/", require_auth=True
        )
        return map_hub_build_settings(raw or {})

    async def get_build_history(
        self,
        namespace: str,
        repository: str,
        page: int = 1,
        page_size: int = 25,
    ) -> Page[HubBuildHistory]:
        raw = await self._hub_request(
            "GET",
            f"{_repo_path(namespace, repository)}/buildhistory/",
            params=_page_params(page, page_size),
            require_auth=True,
        )
        return map_hub_page(raw or {}, page, map_hub_build_history)

    async def trigger_build(
        self,
        namespace: str,
        repository: str,
        source_type: str = "Branch",
        source_name: str = "main",
    ) -> None:
        await self._hub_request(
            "POST",
            f"{_repo_path(namespace, repository)}/autobuild/trigger-build/",
            json_body={"source_type": source_type, "source_name": source_name},
            require_auth=True,
        )
