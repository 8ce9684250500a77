"""
Tests for the main entry point and CLI commands.
"""

from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import pytest
from typer.testing import CliRunner

from upload_relay.infrastructure.config.models import ApplicationConfig
from upload_relay.main import cli, run_application


class TestMainCLI:
    """Test cases for the CLI."""

    def setup_method(self) -> None:
        self.runner = CliRunner()

    def test_cli_help_command(self) -> None:
        result = self.runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Streaming multipart upload server" in result.output

    @patch('upload_relay.main.ConfigLoader')
    @patch('upload_relay.main.setup_logging')
    @patch('upload_relay.main.asyncio.run')
    def test_start_command_basic(self, mock_run: Mock, mock_setup_logging: Mock,
                                 mock_config_loader: Mock) -> None:
        config = ApplicationConfig()
        mock_config_loader.return_value.load_config.return_value = config

        result = self.runner.invoke(cli, ["start"])

        assert result.exit_code == 0
        mock_config_loader.return_value.load_config.assert_called_once_with(None)
        mock_setup_logging.assert_called_once_with(config.logging)
        mock_run.assert_called_once()
        mock_run.call_args.args[0].close()

    @patch('upload_relay.main.ConfigLoader')
    @patch('upload_relay.main.setup_logging')
    @patch('upload_relay.main.asyncio.run')
    def test_start_command_with_options(self, mock_run: Mock, mock_setup_logging: Mock,
                                        mock_config_loader: Mock) -> None:
        config = ApplicationConfig()
        mock_config_loader.return_value.load_config.return_value = config

        result = self.runner.invoke(cli, [
            "start", "--host", "127.0.0.1", "--port", "9000",
            "--storage-root", "/srv/uploads", "--log-level", "warning"
        ])

        assert result.exit_code == 0
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9000
        assert config.upload.storage_root == "/srv/uploads"
        assert config.logging.level == "WARNING"
        mock_run.call_args.args[0].close()

    @patch('upload_relay.main.ConfigLoader')
    @patch('upload_relay.main.setup_logging')
    @patch('upload_relay.main.asyncio.run')
    def test_start_command_debug(self, mock_run: Mock, mock_setup_logging: Mock,
                                 mock_config_loader: Mock) -> None:
        config = ApplicationConfig()
        mock_config_loader.return_value.load_config.return_value = config

        result = self.runner.invoke(cli, ["start", "--debug"])

        assert result.exit_code == 0
        assert config.debug is True
        assert config.logging.level == "DEBUG"
        mock_run.call_args.args[0].close()

    @patch('upload_relay.main.ConfigLoader')
    @patch('upload_relay.main.setup_logging')
    @patch('upload_relay.main.asyncio.run')
    def test_start_command_failure(self, mock_run: Mock, mock_setup_logging: Mock,
                                   mock_config_loader: Mock) -> None:
        mock_config_loader.return_value.load_config.return_value = ApplicationConfig()

        def fail(coro: object) -> None:
            coro.close()
            raise OSError("address already in use")

        mock_run.side_effect = fail

        result = self.runner.invoke(cli, ["start"])

        assert result.exit_code == 1

    def test_init_config(self, tmp_path: Path) -> None:
        output = tmp_path / "config.yaml"

        result = self.runner.invoke(cli, ["init-config", "--output", str(output)])

        assert result.exit_code == 0
        assert "Wrote default configuration" in result.output
        assert "storage_root: downloads" in output.read_text()

    def test_init_config_unwritable(self, tmp_path: Path) -> None:
        result = self.runner.invoke(cli, ["init-config", "-o", str(tmp_path / "missing" / "c.yaml")])

        assert result.exit_code == 1

    def test_validate_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("upload:\n  storage_root: /srv/files\n")

        with patch.dict('os.environ', {}, clear=True):
            result = self.runner.invoke(cli, ["validate-config", str(config_file)])

        assert result.exit_code == 0
        assert f"{config_file}: OK" in result.output
        assert "/srv/files" in result.output
        assert "200ms" in result.output

    def test_validate_config_invalid(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("server:\n  port: 70000\n")

        with patch.dict('os.environ', {}, clear=True):
            result = self.runner.invoke(cli, ["validate-config", str(config_file)])

        assert result.exit_code == 1

    def test_validate_config_missing_file(self, tmp_path: Path) -> None:
        result = self.runner.invoke(cli, ["validate-config", str(tmp_path / "absent.yaml")])

        assert result.exit_code == 1

    @staticmethod
    def _serve_report(mock_session_cls: Mock, report: dict) -> Mock:
        response = Mock(status=200)
        response.json = AsyncMock(return_value=report)
        session = Mock()
        session.get.return_value.__aenter__ = AsyncMock(return_value=response)
        session.get.return_value.__aexit__ = AsyncMock(return_value=None)
        mock_session_cls.return_value.__aenter__ = AsyncMock(return_value=session)
        mock_session_cls.return_value.__aexit__ = AsyncMock(return_value=None)
        return session

    @patch('upload_relay.main.aiohttp.ClientSession')
    def test_health_check_healthy(self, mock_session_cls: Mock) -> None:
        session = self._serve_report(mock_session_cls, {
            "status": "healthy",
            "components": {"connections": {"details": {"active_connections": 2}}}
        })

        result = self.runner.invoke(cli, ["health-check", "--port", "3100"])

        assert result.exit_code == 0
        assert "http://localhost:3100/health: healthy (2 active connection(s))" in result.output
        session.get.assert_called_once_with("http://localhost:3100/health")

    @patch('upload_relay.main.aiohttp.ClientSession')
    def test_health_check_unhealthy(self, mock_session_cls: Mock) -> None:
        self._serve_report(mock_session_cls, {"status": "unhealthy"})

        result = self.runner.invoke(cli, ["health-check"])

        assert result.exit_code == 1
        assert "unhealthy" in result.output

    @patch('upload_relay.main.aiohttp.ClientSession')
    def test_health_check_unreachable(self, mock_session_cls: Mock) -> None:
        mock_session_cls.return_value.__aenter__ = AsyncMock(
            side_effect=ConnectionRefusedError("refused"))
        mock_session_cls.return_value.__aexit__ = AsyncMock(return_value=None)

        result = self.runner.invoke(cli, ["health-check"])

        assert result.exit_code == 1
        assert "Health check failed" in result.output


class TestRunApplication:
    """Test cases for run_application."""

    @pytest.mark.asyncio
    @patch('upload_relay.main.uvicorn.Server')
    @patch('upload_relay.main.uvicorn.Config')
    async def test_run_application(self, mock_config_cls: Mock, mock_server_cls: Mock) -> None:
        mock_server_cls.return_value.serve = AsyncMock()
        config = ApplicationConfig()

        await run_application(config)

        kwargs = mock_config_cls.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 3000
        assert kwargs["log_level"] == "info"
        mock_server_cls.return_value.serve.assert_awaited_once()
