"""Unit tests for per-call tenant credential resolution."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mcp_docker_gateway.config import TenantDefaults
from mcp_docker_gateway.credentials import (
    HEADER_HOST,
    HEADER_HUB_PASSWORD,
    HEADER_HUB_TOKEN,
    HEADER_HUB_USERNAME,
    TenantCredentials,
    has_engine_credentials,
    has_hub_credentials,
    parse_tenant_credentials,
    resolve_engine_base_url,
    select_metadata,
)


def _defaults(**values: str) -> TenantDefaults:
    fields = dict.fromkeys(TenantDefaults.model_fields, "")
    fields.update(values)
    return TenantDefaults(**fields)


class TestResolveEngineBaseUrl:
    """Test translation of Docker host strings into base URLs."""

    @pytest.mark.parametrize(
        "host,expected",
        [
            ("tcp://localhost:2375", "http://localhost:2375"),
            ("tcp://10.0.0.5:2376", "http://10.0.0.5:2376"),
            ("http://docker.internal:2375", "http://docker.internal:2375"),
            ("https://docker.internal:2376", "https://docker.internal:2376"),
            ("docker.internal:2375", "http://docker.internal:2375"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_host_forms(self, host, expected):
        """Test each supported host form."""
        assert resolve_engine_base_url(host) == expected

    @given(st.from_regex(r"[a-z0-9.]{1,20}:[0-9]{2,5}", fullmatch=True))
    def test_tcp_scheme_always_becomes_http(self, address: str) -> None:
        """Test that tcp:// is rewritten to http:// for any address."""
        assert resolve_engine_base_url(f"tcp://{address}") == f"http://{address}"


class TestParseTenantCredentials:
    """Test building credentials from named metadata."""

    def test_full_metadata(self):
        """Test that every header lands on its field."""
        credentials = parse_tenant_credentials(
            {
                "X-Docker-Host": "tcp://localhost:2375",
                "X-Docker-TLS-Verify": "1",
                "X-Docker-Cert-Path": "/certs",
                "X-Docker-API-Version": "1.43",
                "X-Docker-Hub-Token": "tok",
                "X-Docker-Registry": "registry.example.com",
                "X-Docker-Registry-Username": "ci",
                "X-Docker-Registry-Password": "secret",
            }
        )
        assert credentials.docker_host == "tcp://localhost:2375"
        assert credentials.engine_base_url == "http://localhost:2375"
        assert credentials.tls_verify is True
        assert credentials.cert_path == "/certs"
        assert credentials.api_version == "1.43"
        assert credentials.hub_token == "tok"
        assert credentials.registry == "registry.example.com"
        assert credentials.registry_username == "ci"
        assert credentials.registry_password == "secret"

    def test_empty_metadata_never_raises(self):
        """Test that missing metadata yields empty credentials."""
        credentials = parse_tenant_credentials({})
        assert credentials.docker_host == ""
        assert credentials.tls_verify is False
        assert credentials.hub_token is None

    @pytest.mark.parametrize("value", ["0", "true", "yes", ""])
    def test_tls_verify_only_for_one(self, value):
        """Test that only the literal '1' enables TLS verification."""
        credentials = parse_tenant_credentials({"x-docker-tls-verify": value})
        assert credentials.tls_verify is False

    def test_repr_hides_secrets(self):
        """Test that tokens and passwords never appear in the representation."""
        credentials = parse_tenant_credentials(
            {HEADER_HUB_TOKEN: "super-secret", HEADER_HUB_PASSWORD: "hunter2"}
        )
        assert "super-secret" not in repr(credentials)
        assert "hunter2" not in str(credentials)


class TestCapabilityPredicates:
    """Test engine and Hub availability for every credential combination."""

    @pytest.mark.parametrize(
        "metadata,engine,hub",
        [
            ({}, False, False),
            ({HEADER_HOST: "tcp://h:2375"}, True, False),
            ({HEADER_HUB_TOKEN: "t"}, False, True),
            ({HEADER_HOST: "tcp://h:2375", HEADER_HUB_TOKEN: "t"}, True, True),
            ({HEADER_HUB_USERNAME: "u", HEADER_HUB_PASSWORD: "p"}, False, True),
            ({HEADER_HUB_USERNAME: "u"}, False, False),
            ({HEADER_HUB_PASSWORD: "p"}, False, False),
        ],
    )
    def test_combinations(self, metadata, engine, hub):
        """Test the availability predicates."""
        credentials = parse_tenant_credentials(metadata)
        assert has_engine_credentials(credentials) is engine
        assert has_hub_credentials(credentials) is hub

    @given(
        host=st.text(max_size=20),
        token=st.text(max_size=20),
        username=st.text(max_size=10),
        password=st.text(max_size=10),
    )
    def test_predicates_follow_presence(
        self, host: str, token: str, username: str, password: str
    ) -> None:
        """Test that availability depends only on which values are non-empty."""
        credentials = TenantCredentials(
            docker_host=host,
            hub_token=token or None,
            hub_username=username or None,
            hub_password=password or None,
        )
        assert has_engine_credentials(credentials) is bool(host)
        assert has_hub_credentials(credentials) is (bool(token) or bool(username and password))


class TestSelectMetadata:
    """Test choosing between request headers and environment defaults."""

    def test_headers_win_when_present(self):
        """Test that any X-Docker-* header disables environment defaults."""
        defaults = _defaults(docker_host="tcp://env:2375", hub_token="env-token")
        metadata = select_metadata({"X-Docker-Hub-Token": "req-token"}, defaults)
        credentials = parse_tenant_credentials(metadata)
        assert credentials.hub_token == "req-token"
        assert credentials.docker_host == ""

    def test_unrelated_headers_fall_back_to_defaults(self):
        """Test that non-tenant headers do not count as tenant metadata."""
        defaults = _defaults(docker_host="tcp://env:2375")
        metadata = select_metadata({"authorization": "Bearer x"}, defaults)
        assert metadata == {HEADER_HOST: "tcp://env:2375"}

    def test_no_headers_uses_defaults(self):
        """Test the stdio path without any request headers."""
        defaults = _defaults(hub_username="user", hub_password="pass")
        credentials = parse_tenant_credentials(select_metadata(None, defaults))
        assert has_hub_credentials(credentials) is True
        assert has_engine_credentials(credentials) is False
