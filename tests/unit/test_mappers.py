"""Unit tests for upstream-to-entity mappers and request body builders."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mcp_docker_gateway.mappers import (
    apply_service_update,
    map_container,
    map_hub_page,
    map_hub_repository,
    map_hub_tag,
    map_network,
    map_node,
    map_volume,
    map_wait_result,
    unmap_container_create,
    unmap_network_create,
    unmap_service_create,
)
from mcp_docker_gateway.models.requests import (
    ContainerCreateRequest,
    NetworkCreateRequest,
    PortBinding,
    PublishedPort,
    ServiceCreateRequest,
    ServiceUpdateRequest,
)


class TestMapContainer:
    """Test the container listing mapper."""

    def test_full_entry(self):
        """Test a typical listing entry."""
        container = map_container(
            {
                "Id": "abc123",
                "Names": ["/web"],
                "Image": "nginx:latest",
                "ImageID": "sha256:def",
                "Command": "nginx -g 'daemon off;'",
                "Created": 1700000000,
                "State": "running",
                "Status": "Up 5 minutes",
                "Ports": [{"IP": "0.0.0.0", "PrivatePort": 80, "PublicPort": 8080, "Type": "tcp"}],
                "Labels": {"com.example.team": "web"},
                "NetworkSettings": {"Networks": {"bridge": {"IPAddress": "172.17.0.2"}}},
            }
        )
        assert container.id == "abc123"
        assert container.names == ["/web"]
        assert container.ports[0].public_port == 8080
        assert container.labels == {"com.example.team": "web"}
        assert container.network_settings == {"networks": {"bridge": {"ipAddress": "172.17.0.2"}}}

        payload = container.to_payload()
        assert payload["imageId"] == "sha256:def"
        assert payload["ports"][0]["privatePort"] == 80

    def test_null_fields_become_defaults(self):
        """Test that nulls never leak into entities."""
        container = map_container({"Id": "x", "Names": None, "Ports": None, "Labels": None})
        assert container.names == []
        assert container.ports == []
        assert container.labels == {}
        assert container.created == 0


class TestMapNetworkAndVolume:
    """Test the network and volume mappers."""

    def test_network_ipam_and_containers(self):
        """Test nested IPAM configuration and attached containers."""
        network = map_network(
            {
                "Name": "app",
                "Id": "net1",
                "Driver": "bridge",
                "IPAM": {"Driver": "default", "Config": [{"Subnet": "10.0.0.0/24"}]},
                "Containers": {"c1": {"Name": "web", "IPv4Address": "10.0.0.2/24"}},
            }
        )
        assert network.ipam.config[0].subnet == "10.0.0.0/24"
        assert network.containers["c1"].name == "web"
        assert network.containers["c1"].ipv4_address == "10.0.0.2/24"

    def test_network_without_ipam(self):
        """Test that a missing IPAM block gets the default driver."""
        assert map_network({"Name": "n", "Id": "i"}).ipam.driver == "default"

    def test_volume_usage_data(self):
        """Test optional usage data."""
        volume = map_volume({"Name": "data", "UsageData": {"Size": 1024, "RefCount": 2}})
        assert volume.usage_data is not None
        assert volume.usage_data.ref_count == 2
        assert map_volume({"Name": "data"}).usage_data is None


def test_wait_result_error_message():
    """Test that the nested error message is flattened."""
    result = map_wait_result({"StatusCode": 137, "Error": {"Message": "killed"}})
    assert result.status_code == 137
    assert result.error == "killed"
    assert map_wait_result({"StatusCode": 0}).error is None


def test_node_version_and_spec():
    """Test swarm node mapping keeps the version index."""
    node = map_node({"ID": "n1", "Version": {"Index": 42}, "Spec": {"Role": "manager"}})
    assert node.version.index == 42
    assert node.spec == {"role": "manager"}
    assert node.manager_status is None


class TestMapHubPage:
    """Test Hub page mapping and the synthesized cursor."""

    def test_more_pages(self):
        """Test that a next URL yields the next page number as cursor."""
        page = map_hub_page(
            {
                "count": 60,
                "next": "https://hub.docker.com/v2/repositories/library/?page=3",
                "results": [{"name": "nginx"}, {"name": "redis"}],
            },
            2,
            map_hub_repository,
        )
        assert page.count == 2
        assert page.total == 60
        assert page.has_more is True
        assert page.next_cursor == "3"
        assert [repo.name for repo in page.items] == ["nginx", "redis"]

    def test_last_page(self):
        """Test that no next URL ends pagination."""
        page = map_hub_page({"count": 1, "next": None, "results": [{"name": "v1"}]}, 1, map_hub_tag)
        assert page.has_more is False
        assert page.next_cursor is None

    def test_missing_count(self):
        """Test that a missing count yields no total."""
        page = map_hub_page({"results": []}, 1, map_hub_tag)
        assert page.total is None
        assert page.items == []

    @given(st.integers(min_value=1, max_value=10_000))
    def test_cursor_is_next_page(self, page_number: int) -> None:
        """Test the cursor for any page number."""
        page = map_hub_page({"next": "x", "results": []}, page_number, map_hub_tag)
        assert page.next_cursor == str(page_number + 1)

    def test_payload_uses_camel_case(self):
        """Test serialized page field names."""
        payload = map_hub_page({"next": "x", "results": []}, 1, map_hub_tag).to_payload()
        assert payload["hasMore"] is True
        assert payload["nextCursor"] == "2"


def test_hub_tag_images():
    """Test per-platform images of a tag."""
    tag = map_hub_tag(
        {
            "name": "latest",
            "full_size": 1000,
            "images": [{"architecture": "amd64", "os": "linux", "digest": "sha256:a"}],
        }
    )
    assert tag.images[0].architecture == "amd64"
    assert tag.full_size == 1000


class TestRequestBodies:
    """Test translation of typed requests into engine wire bodies."""

    def test_container_create_ports_exposed_and_bound(self):
        """Test that bound ports are also exposed."""
        body = unmap_container_create(
            ContainerCreateRequest(
                image="nginx",
                env=["A=1"],
                port_bindings={"80/tcp": [PortBinding(host_port="8080")]},
                restart_policy="always",
            )
        )
        assert body["Image"] == "nginx"
        assert body["Env"] == ["A=1"]
        assert body["ExposedPorts"] == {"80/tcp": {}}
        assert body["HostConfig"]["PortBindings"] == {"80/tcp": [{"HostPort": "8080"}]}
        assert body["HostConfig"]["RestartPolicy"] == {"Name": "always"}
        assert "Cmd" not in body

    def test_container_create_minimal(self):
        """Test that an image-only request has no host config."""
        assert unmap_container_create(ContainerCreateRequest(image="alpine")) == {
            "Image": "alpine"
        }

    def test_network_create_ipam(self):
        """Test that subnet settings become one IPAM config entry."""
        body = unmap_network_create(
            NetworkCreateRequest(name="app", subnet="10.1.0.0/16", gateway="10.1.0.1")
        )
        assert body["IPAM"] == {
            "Driver": "default",
            "Config": [{"Subnet": "10.1.0.0/16", "Gateway": "10.1.0.1"}],
        }
        assert body["Driver"] == "bridge"

    @pytest.mark.parametrize(
        "global_mode,replicas,expected",
        [
            (False, None, {"Replicated": {"Replicas": 1}}),
            (False, 3, {"Replicated": {"Replicas": 3}}),
            (True, 3, {"Global": {}}),
        ],
    )
    def test_service_mode(self, global_mode, replicas, expected):
        """Test replicated and global service modes."""
        body = unmap_service_create(
            ServiceCreateRequest(name="web", image="nginx", replicas=replicas, global_mode=global_mode)
        )
        assert body["Mode"] == expected

    def test_service_ports_and_networks(self):
        """Test endpoint ports and network attachments."""
        body = unmap_service_create(
            ServiceCreateRequest(
                name="web",
                image="nginx",
                networks=["frontend"],
                published_ports=[PublishedPort(target_port=80, published_port=8080)],
            )
        )
        assert body["TaskTemplate"]["Networks"] == [{"Target": "frontend"}]
        assert body["EndpointSpec"]["Ports"] == [
            {"Protocol": "tcp", "TargetPort": 80, "PublishedPort": 8080}
        ]

    def test_apply_service_update_keeps_other_fields(self):
        """Test that an update only touches the requested fields."""
        spec = {
            "Name": "web",
            "TaskTemplate": {"ContainerSpec": {"Image": "nginx:1", "Args": ["-x"]}, "ForceUpdate": 2},
            "Mode": {"Replicated": {"Replicas": 1}},
        }
        updated = apply_service_update(
            spec, ServiceUpdateRequest(image="nginx:2", replicas=4, force_update=True)
        )
        assert updated["TaskTemplate"]["ContainerSpec"] == {"Image": "nginx:2", "Args": ["-x"]}
        assert updated["TaskTemplate"]["ForceUpdate"] == 3
        assert updated["Mode"] == {"Replicated": {"Replicas": 4}}
        assert updated["Name"] == "web"
        assert spec["TaskTemplate"]["ContainerSpec"]["Image"] == "nginx:1"
