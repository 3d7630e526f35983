"""Per-call tenant credential resolution.

Credentials are rebuilt from caller metadata on every tool invocation and
never cached. Over HTTP the metadata is the request's ``X-Docker-*``
headers; without them the process environment (``TenantDefaults``) applies.
"""

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from mcp_docker_gateway.config import TenantDefaults
from mcp_docker_gateway.utils.logger import get_logger

logger = get_logger(__name__)

HEADER_HOST = "x-docker-host"
HEADER_TLS_VERIFY = "x-docker-tls-verify"
HEADER_CERT_PATH = "x-docker-cert-path"
HEADER_API_VERSION = "x-docker-api-version"
HEADER_HUB_TOKEN = "x-docker-hub-token"
HEADER_HUB_USERNAME = "x-docker-hub-username"
HEADER_HUB_PASSWORD = "x-docker-hub-password"
HEADER_REGISTRY = "x-docker-registry"
HEADER_REGISTRY_USERNAME = "x-docker-registry-username"
HEADER_REGISTRY_PASSWORD = "x-docker-registry-password"

# Tenant header name -> TenantDefaults attribute
METADATA_FIELDS: dict[str, str] = {
    HEADER_HOST: "docker_host",
    HEADER_TLS_VERIFY: "tls_verify",
    HEADER_CERT_PATH: "cert_path",
    HEADER_API_VERSION: "api_version",
    HEADER_HUB_TOKEN: "hub_token",
    HEADER_HUB_USERNAME: "hub_username",
    HEADER_HUB_PASSWORD: "hub_password",
    HEADER_REGISTRY: "registry",
    HEADER_REGISTRY_USERNAME: "registry_username",
    HEADER_REGISTRY_PASSWORD: "registry_password",
}

TENANT_HEADER_PREFIX = "x-docker-"


class TenantCredentials(BaseModel):
    """Credentials and endpoints for one tenant on one call."""

    model_config = ConfigDict(frozen=True)

    docker_host: str = ""
    tls_verify: bool = False
    cert_path: str | None = None
    api_version: str | None = None
    hub_token: str | None = None
    hub_username: str | None = None
    hub_password: str | None = None
    registry: str | None = None
    registry_username: str | None = None
    registry_password: str | None = None

    @property
    def engine_base_url(self) -> str:
        """Engine base URL derived from the raw host string."""
        return resolve_engine_base_url(self.docker_host)

    def __repr__(self) -> str:
        """Return representation without secrets."""
        return (
            f"TenantCredentials(docker_host={self.docker_host!r}, "
            f"hub_token={'***' if self.hub_token else None}, "
            f"hub_username={self.hub_username!r}, registry={self.registry!r})"
        )

    __str__ = __repr__


def resolve_engine_base_url(host: str | None) -> str:
    """Translate a Docker host string into an HTTP base URL.

    ``tcp://h:p`` becomes ``http://h:p``, explicit ``http(s)://`` URLs pass
    through unchanged, any other non-empty value gets an ``http://`` prefix,
    and an empty or absent host yields ``""`` (engine disabled).
    """
    if not host:
        return ""
    if host.startswith("tcp://"):
        return "http://" + host[len("tcp://") :]
    if host.startswith(("http://", "https://")):
        return host
    return f"http://{host}"


def _normalize(metadata: Mapping[str, str]) -> dict[str, str]:
    return {str(key).lower(): value for key, value in metadata.items() if value is not None}


def parse_tenant_credentials(metadata: Mapping[str, str]) -> TenantCredentials:
    """Build ``TenantCredentials`` from named metadata values.

    Header names are matched case-insensitively. Missing values never raise;
    availability is queried afterwards with the two predicates below.
    """
    values = _normalize(metadata)

    def optional(name: str) -> str | None:
        return values.get(name) or None

    return TenantCredentials(
        docker_host=values.get(HEADER_HOST, ""),
        tls_verify=values.get(HEADER_TLS_VERIFY) == "1",
        cert_path=optional(HEADER_CERT_PATH),
        api_version=optional(HEADER_API_VERSION),
        hub_token=optional(HEADER_HUB_TOKEN),
        hub_username=optional(HEADER_HUB_USERNAME),
        hub_password=optional(HEADER_HUB_PASSWORD),
        registry=optional(HEADER_REGISTRY),
        registry_username=optional(HEADER_REGISTRY_USERNAME),
        registry_password=optional(HEADER_REGISTRY_PASSWORD),
    )


def has_engine_credentials(credentials: TenantCredentials) -> bool:
    """Engine operations are available iff a host was supplied."""
    return bool(credentials.docker_host)


def has_hub_credentials(credentials: TenantCredentials) -> bool:
    """Hub operations are available with a token, or a username and password."""
    return bool(credentials.hub_token) or bool(
        credentials.hub_username and credentials.hub_password
    )


def defaults_metadata(defaults: TenantDefaults) -> dict[str, str]:
    """Return the environment defaults keyed by their tenant header names."""
    values = {header: getattr(defaults, attr) for header, attr in METADATA_FIELDS.items()}
    return {header: value for header, value in values.items() if value}


def select_metadata(
    headers: Mapping[str, str] | None,
    defaults: TenantDefaults,
) -> dict[str, str]:
    """Pick the tenant metadata source for the current call.

    Request headers win as soon as any ``X-Docker-*`` header is present, so a
    tenant never inherits part of the process environment's credentials.
    """
    if headers:
        tenant_headers = {
            key: value
            for key, value in _normalize(headers).items()
            if key.startswith(TENANT_HEADER_PREFIX)
        }
        if tenant_headers:
            return tenant_headers
    return defaults_metadata(defaults)
