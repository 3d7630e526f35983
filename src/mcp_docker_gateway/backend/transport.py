"""HTTP transport shared by every backend operation.

One ``BackendTransport`` serves one tenant for one call. It owns two private
request helpers, one per upstream API, and the in-memory Hub session token.
"""

import base64
import json
import ssl
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import httpx

from mcp_docker_gateway.config import EngineConfig, HubConfig
from mcp_docker_gateway.credentials import TenantCredentials
from mcp_docker_gateway.models.requests import RegistryAuth
from mcp_docker_gateway.utils.errors import (
    AuthenticationFailure,
    ConnectionFailure,
    RateLimitExceeded,
    error_from_status,
    extract_upstream_message,
    parse_retry_after,
)
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

REGISTRY_AUTH_HEADER = "X-Registry-Auth"

ResponseKind = Literal["auto", "text", "bytes"]


class FilterStyle(str, Enum):
    """Query encoding conventions of the two backends."""

    ENGINE = "engine"  # one JSON-encoded ``filters`` parameter
    HUB = "hub"  # flat query parameters


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_query(params: dict[str, Any] | None) -> dict[str, str]:
    """Drop absent parameters and render the rest as query strings."""
    if not params:
        return {}
    return {key: _query_value(value) for key, value in params.items() if value is not None}


def encode_filters(
    filters: dict[str, Any] | None,
    style: FilterStyle = FilterStyle.ENGINE,
) -> dict[str, str]:
    """Encode a filter mapping for the given backend.

    Engine filters become ``{"filters": '{"key": ["v1", "v2"]}'}``; scalar
    values are wrapped in a list. Hub filters become flat parameters with
    multiple values joined by commas. Empty filters encode to ``{}``.
    """
    if not filters:
        return {}

    normalized: dict[str, list[str]] = {}
    for key, value in filters.items():
        if value is None:
            continue
        values = value if isinstance(value, list | tuple | set) else [value]
        rendered = [_query_value(item) for item in values if item is not None]
        if rendered:
            normalized[key] = rendered

    if not normalized:
        return {}
    if style == FilterStyle.HUB:
        return {key: ",".join(values) for key, values in normalized.items()}
    return {"filters": json.dumps(normalized, separators=(",", ":"), sort_keys=True)}


def registry_auth_header(auth: RegistryAuth | None) -> dict[str, str]:
    """Build the X-Registry-Auth header, or nothing when no credentials were given."""
    if auth is None:
        return {}
    payload = auth.model_dump(exclude_none=True)
    encoded = base64.urlsafe_b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
    return {REGISTRY_AUTH_HEADER: encoded}


def decode_response(response: httpx.Response, expect: ResponseKind = "auto") -> Any:
    """Decode a successful upstream response.

    204 and empty bodies yield ``None``; JSON content types are parsed;
    anything else (and JSON progress streams that are not one document) is
    returned as text.
    """
    if response.status_code == 204 or not response.content:
        return None
    if expect == "bytes":
        return response.content
    if expect == "text":
        return response.text
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


class BackendTransport:
    """Request helpers for the engine and Hub APIs of one tenant."""

    def __init__(
        self,
        credentials: TenantCredentials,
        engine_config: EngineConfig | None = None,
        hub_config: HubConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self.engine_config = engine_config or EngineConfig()
        self.hub_config = hub_config or HubConfig()
        self._transport = transport
        self.engine_base_url = credentials.engine_base_url.rstrip("/")
        self.api_version = self._resolve_api_version(credentials.api_version)
        self.hub_session_token: str | None = None
        self._engine_http: httpx.AsyncClient | None = None
        self._hub_http: httpx.AsyncClient | None = None

    def _resolve_api_version(self, override: str | None) -> str:
        if not override:
            return self.engine_config.api_version
        override = override.strip()
        return override if override.startswith("v") else f"v{override}"

    def _engine_ssl(self) -> ssl.SSLContext | bool:
        """TLS settings for an https engine endpoint.

        With a cert path the docker CLI layout is used: ``ca.pem`` for
        verification, ``cert.pem``/``key.pem`` for the client certificate.
        """
        cert_path = self.credentials.cert_path
        if not cert_path:
            return self.credentials.tls_verify
        directory = Path(cert_path)
        if self.credentials.tls_verify:
            context = ssl.create_default_context(cafile=str(directory / "ca.pem"))
        else:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        context.load_cert_chain(str(directory / "cert.pem"), str(directory / "key.pem"))
        return context

    def _engine_client(self) -> httpx.AsyncClient:
        if self._engine_http is None:
            verify: ssl.SSLContext | bool = True
            if self.engine_base_url.startswith("https://"):
                try:
                    verify = self._engine_ssl()
                except (OSError, ssl.SSLError) as e:
                    raise ConnectionFailure(f"Failed to load Docker TLS certificates: {e}") from e
            self._engine_http = httpx.AsyncClient(
                transport=self._transport,
                timeout=self.engine_config.timeout,
                verify=verify,
                headers={"Content-Type": "application/json"},
            )
        return self._engine_http

    def _hub_client(self) -> httpx.AsyncClient:
        if self._hub_http is None:
            self._hub_http = httpx.AsyncClient(
                transport=self._transport,
                timeout=self.hub_config.timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._hub_http

    async def _engine_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        expect: ResponseKind = "auto",
    ) -> Any:
        """Issue one engine API request and decode the response."""
        if not self.engine_base_url:
            raise ConnectionFailure(
                "Docker host not configured. Provide the X-Docker-Host header or set DOCKER_HOST."
            )

        url = f"{self.engine_base_url}/{self.api_version}{path}"
        logger.debug(f"Engine request: {method} {path}")
        try:
            response = await self._engine_client().request(
                method,
                url,
                params=encode_query(params),
                json=json_body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise ConnectionFailure(f"Failed to connect to Docker: {e}") from e

        if response.is_error:
            raise error_from_status(response.status_code, response.text)
        return decode_response(response, expect)

    async def _hub_token(self, login: bool = False) -> str | None:
        """Bearer token for Hub calls: session token first, then static credentials.

        A tenant that supplied only a username and password is logged in when
        ``login`` is set, i.e. for operations that require authentication;
        public reads stay a single anonymous request. The token lives on this
        instance only.
        """
        if self.hub_session_token:
            return self.hub_session_token
        if self.credentials.hub_token:
            return self.credentials.hub_token
        if login and self.credentials.hub_username and self.credentials.hub_password:
            return await self.hub_login(
                self.credentials.hub_username, self.credentials.hub_password
            )
        return None

    async def _hub_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        require_auth: bool = False,
    ) -> Any:
        """Issue one Hub API request and decode the response."""
        token = await self._hub_token(login=require_auth)
        if require_auth and not token:
            raise AuthenticationFailure(
                "Docker Hub authentication required. Call docker_hub_login or provide "
                "the X-Docker-Hub-Token header."
            )
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return await self._send_hub(
            method, path, params=params, json_body=json_body, headers=headers
        )

    async def _send_hub(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        url = f"{self.hub_config.api_url}{path}"
        logger.debug(f"Hub request: {method} {path}")
        try:
            response = await self._hub_client().request(
                method,
                url,
                params=encode_query(params),
                json=json_body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise ConnectionFailure(f"Failed to connect to Docker Hub: {e}") from e

        if response.status_code == 429:
            retry_after = parse_retry_after(response.headers.get("retry-after"))
            raise RateLimitExceeded(
                f"Docker Hub rate limit exceeded. Retry after {retry_after} seconds.",
                retry_after_seconds=retry_after,
                status_code=429,
            )
        if response.status_code in (401, 403):
            message = extract_upstream_message(response.text, response.status_code)
            raise AuthenticationFailure(
                f"Docker Hub authentication failed: {message}", response.status_code
            )
        if response.is_error:
            raise error_from_status(response.status_code, response.text)
        return decode_response(response)

    async def hub_login(self, username: str, password: str) -> str:
        """Exchange Hub credentials for a session token held by this instance."""
        result = await self._send_hub(
            "POST",
            "/users/login",
            json_body={"username": username, "password": password},
        )
        token = result.get("token") if isinstance(result, dict) else None
        if not token:
            raise AuthenticationFailure("Docker Hub login did not return a token")
        self.hub_session_token = token
        logger.info(f"Logged in to Docker Hub as {username}")
        return token

    async def aclose(self) -> None:
        """Close both HTTP connection pools."""
        for client in (self._engine_http, self._hub_http):
            if client is not None:
                await client.aclose()
        self._engine_http = None
        self._hub_http = None

    async def __aenter__(self) -> "BackendTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
