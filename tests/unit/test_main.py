"""Unit tests for __main__.py entry point."""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from typer.testing import CliRunner

from mcp_docker_gateway.__main__ import SHUTDOWN_COMPLETE_MSG, Transport, app, run_server
from mcp_docker_gateway.version import __version__


@pytest.fixture
def mock_logger():
    """Create a mock logger."""
    return Mock()


@pytest.fixture
def mock_gateway():
    """Create a mock GatewayServer whose app records run() calls."""
    gateway = Mock()
    gateway.start = AsyncMock()
    gateway.stop = AsyncMock()
    gateway.get_app.return_value = Mock()
    return gateway


class TestRunServer:
    """Test the run_server function."""

    def test_stdio(self, mock_logger, mock_gateway):
        """Test stdio transport flow."""
        run_server(mock_logger, mock_gateway, Transport.stdio, "127.0.0.1", 8000)

        mock_gateway.get_app.return_value.run.assert_called_once_with(transport="stdio")
        mock_gateway.start.assert_awaited_once()
        mock_gateway.stop.assert_awaited_once()
        mock_logger.info.assert_any_call(SHUTDOWN_COMPLETE_MSG)

    def test_http_localhost(self, mock_logger, mock_gateway):
        """Test HTTP transport on localhost without a warning."""
        run_server(mock_logger, mock_gateway, Transport.http, "127.0.0.1", 8000)

        mock_gateway.get_app.return_value.run.assert_called_once_with(
            transport="http", host="127.0.0.1", port=8000
        )
        mock_logger.warning.assert_not_called()

    def test_http_public_address_warns(self, mock_logger, mock_gateway):
        """Test the warning for non-localhost binds."""
        run_server(mock_logger, mock_gateway, Transport.http, "0.0.0.0", 8080)

        mock_logger.warning.assert_called_once()
        assert "non-localhost" in mock_logger.warning.call_args[0][0]

    def test_stop_runs_after_failure(self, mock_logger, mock_gateway):
        """Test that shutdown happens even if the app raises."""
        mock_gateway.get_app.return_value.run.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            run_server(mock_logger, mock_gateway, Transport.stdio, "127.0.0.1", 8000)

        mock_gateway.stop.assert_awaited_once()


class TestCli:
    """Test the typer command line."""

    def test_version(self):
        """Test --version prints and exits."""
        result = CliRunner().invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"mcp-docker-gateway {__version__}" in result.output

    @patch("mcp_docker_gateway.__main__.run_server")
    @patch("mcp_docker_gateway.__main__.setup_logger")
    @patch("mcp_docker_gateway.__main__.GatewayServer")
    def test_http_is_multi_tenant(self, mock_server_cls, _mock_setup, mock_run):
        """Test that the HTTP transport serves many tenants."""
        result = CliRunner().invoke(app, ["--transport", "http", "--port", "9000"])

        assert result.exit_code == 0
        assert mock_server_cls.call_args.kwargs["multi_tenant"] is True
        args = mock_run.call_args[0]
        assert args[2] == Transport.http
        assert args[4] == 9000

    @patch("mcp_docker_gateway.__main__.run_server")
    @patch("mcp_docker_gateway.__main__.setup_logger")
    @patch("mcp_docker_gateway.__main__.GatewayServer")
    def test_stdio_is_single_tenant(self, mock_server_cls, _mock_setup, _mock_run):
        """Test the default stdio transport."""
        result = CliRunner().invoke(app, [])

        assert result.exit_code == 0
        assert mock_server_cls.call_args.kwargs["multi_tenant"] is False
