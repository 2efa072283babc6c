"""Tests for the node launcher CLI."""

from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from node_launcher import cli
from node_launcher.core.errors import ErrorKind, RuntimeAPIError
from node_launcher.core.schemas import Volume

runner = CliRunner()


@pytest.fixture
def container_runner(monkeypatch) -> MagicMock:
    instance = MagicMock()
    instance.start.return_value.container_id = "0123456789abcdef"
    factory = MagicMock(return_value=instance)
    monkeypatch.setattr(cli, "ContainerRunner", factory)
    return instance


class TestRunCommand:
    """Tests for `node-launcher run`."""

    def test_starts_waits_and_cleans_up(self, container_runner):
        result = runner.invoke(
            cli.app,
            [
                "run",
                "--name", "node:1",
                "--image", "arangodb/arangodb:3.11",
                "-p", "8529",
                "-v", "/host/data:/data",
                "--log-level", "WARNING",
                "arangod",
                "--",
                "--server.endpoint=tcp://0.0.0.0:8529",
            ],
        )

        assert result.exit_code == 0, result.output
        container_runner.start.assert_called_once_with(
            "arangod",
            ["--server.endpoint=tcp://0.0.0.0:8529"],
            [Volume(host_path="/host/data", container_path="/data")],
            [8529],
            "node:1",
        )
        container_runner.start.return_value.wait.assert_called_once()
        container_runner.cleanup.assert_called_once()
        container_runner.close.assert_called_once()

    def test_start_failure_still_cleans_up(self, container_runner):
        container_runner.start.side_effect = RuntimeAPIError("pull failed", ErrorKind.TRANSIENT)

        result = runner.invoke(
            cli.app, ["run", "--name", "n", "--image", "arangodb", "--log-level", "WARNING", "x"]
        )

        assert result.exit_code == 1
        container_runner.cleanup.assert_called_once()
        container_runner.close.assert_called_once()

    def test_missing_image(self, container_runner):
        result = runner.invoke(cli.app, ["run", "--name", "n", "--log-level", "WARNING", "x"])

        assert result.exit_code == 1
        container_runner.start.assert_not_called()

    def test_config_file_with_override(self, container_runner, monkeypatch, tmp_path):
        path = tmp_path / "runner.yaml"
        path.write_text("image: arangodb:3.10\nuser: arangodb\n")
        factory = cli.ContainerRunner

        result = runner.invoke(
            cli.app,
            ["run", "--name", "n", "-c", str(path), "--image", "arangodb:3.11",
             "--log-level", "WARNING", "x"],
        )

        assert result.exit_code == 0, result.output
        config = factory.call_args.args[0]
        assert config.image == "arangodb:3.11"
        assert config.user == "arangodb"


class TestJoinCommand:
    """Tests for `node-launcher join-command`."""

    def test_prints_instructions(self):
        result = runner.invoke(
            cli.app, ["join-command", "--index", "2", "--master-ip", "10.0.0.1"]
        )

        assert result.exit_code == 0
        assert "docker volume create arangodb2" in result.output
        assert "--join=10.0.0.1" in result.output
