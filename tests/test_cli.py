"""Tests for the command line interface."""

import socket

import pytest
from typer.testing import CliRunner

from socks5_proxy.cmd import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


class TestServe:
    """Test cases for the serve command."""

    def test_username_without_password(self):
        result = runner.invoke(cli.app, ["serve", "--username", "alice"])
        assert result.exit_code == 2
        assert "Invalid configuration" in result.output

    def test_password_from_environment(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(cli, "run_server", lambda config: captured.setdefault("config", config))

        result = runner.invoke(
            cli.app,
            ["serve", "--port", "1081"],
            env={"SOCKS5_PROXY_USERNAME": "alice", "SOCKS5_PROXY_PASSWORD": "secret"},
        )

        assert result.exit_code == 0
        assert captured["config"].port == 1081
        assert captured["config"].credentials == (b"alice", b"secret")

    def test_bind_failure_exits(self):
        with socket.create_server(("127.0.0.1", 0)) as busy:
            port = busy.getsockname()[1]
            result = runner.invoke(cli.app, ["serve", "--host", "127.0.0.1", "--port", str(port)])

        assert result.exit_code == 1
        assert "cannot listen" in result.output
