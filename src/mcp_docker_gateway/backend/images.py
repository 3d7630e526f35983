"""Image operations against the engine API."""

from typing import Any

from mcp_docker_gateway.backend.transport import (
    BackendTransport,
    encode_filters,
    registry_auth_header,
)
from mcp_docker_gateway.mappers import (
    map_document,
    map_image,
    map_image_delete_entry,
    map_image_history_entry,
    map_image_prune,
    map_image_search_result,
    map_many,
)
from mcp_docker_gateway.models.entities import (
    Image,
    ImageDeleteEntry,
    ImageHistoryEntry,
    ImagePruneResult,
    ImageSearchResult,
)
from mcp_docker_gateway.models.requests import RegistryAuth
from mcp_docker_gateway.utils.streams import check_progress


class ImageOperations(BackendTransport):
    async def list_images(
        self,
        all: bool = False,  # noqa: A002 - mirrors the engine parameter
        filters: dict[str, Any] | None = None,
        digests: bool = False,
    ) -> list[Image]:
        params: dict[str, Any] = {"all": all, "digests": digests or None}
        params.update(encode_filters(filters))
        raw = await self._engine_request("GET", "/images/json", params=params)
        return map_many(raw, map_image)

    async def inspect_image(self, name: str) -> dict[str, Any]:
        raw = await self._engine_request("GET", f"/images/{name}/json")
        return map_document(raw)

    async def get_image_history(self, name: str) -> list[ImageHistoryEntry]:
        raw = await self._engine_request("GET", f"/images/{name}/history")
        return map_many(raw, map_image_history_entry)

    async def pull_image(
        self,
        image: str,
        tag: str = "latest",
        auth: RegistryAuth | None = None,
        platform: str | None = None,
    ) -> str:
        """Pull an image and return the engine's progress output."""
        raw = await self._engine_request(
            "POST",
            "/images/create",
            params={"fromImage": image, "tag": tag, "platform": platform},
            headers=registry_auth_header(auth),
        )
        return check_progress(raw)

    async def push_image(
        self,
        name: str,
        tag: str | None = None,
        auth: RegistryAuth | None = None,
    ) -> str:
        raw = await self._engine_request(
            "POST",
            f"/images/{name}/push",
            params={"tag": tag},
            headers=registry_auth_header(auth),
        )
        return check_progress(raw)

    async def tag_image(self, name: str, repo: str, tag: str = "latest") -> None:
        await self._engine_request(
            "POST", f"/images/{name}/tag", params={"repo": repo, "tag": tag}
        )

    async def remove_image(
        self,
        name: str,
        force: bool = False,
        no_prune: bool = False,
    ) -> list[ImageDeleteEntry]:
        raw = await self._engine_request(
            "DELETE", f"/images/{name}", params={"force": force, "noprune": no_prune}
        )
        return map_many(raw, map_image_delete_entry)

    async def search_images(
        self,
        term: str,
        limit: int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[ImageSearchResult]:
        params: dict[str, Any] = {"term": term, "limit": limit}
        params.update(encode_filters(filters))
        raw = await self._engine_request("GET", "/images/search", params=params)
        return map_many(raw, map_image_search_result)

    async def prune_images(self, filters: dict[str, Any] | None = None) -> ImagePruneResult:
        raw = await self._engine_request("POST", "/images/prune", params=encode_filters(filters))
        return map_image_prune(raw or {})
