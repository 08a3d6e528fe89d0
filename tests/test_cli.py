import pytest
from typer.testing import CliRunner

from tcpbridge.cli import main as cli_main
from tcpbridge.config import config
from tcpbridge.models.enums import LogLevel

runner = CliRunner()


@pytest.fixture
def fake_server(monkeypatch):
    calls = []

    async def _start_server(*args):
        calls.append(args)

    monkeypatch.setattr(cli_main, "start_server", _start_server)
    monkeypatch.setattr(cli_main, "configure_logging", lambda level: None)
    for field in (
        "LISTEN_HOST",
        "LISTEN_PORT",
        "UPSTREAM_HOST",
        "UPSTREAM_PORT",
        "RATE_CHECK_SECONDS",
        "IDLE_TIMEOUT_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.setattr(config, field, getattr(config, field))
    return calls


def test_serve_starts_server_with_options(fake_server):
    result = runner.invoke(
        cli_main.app,
        [
            "serve",
            "example.com",
            "80",
            "--listen-port",
            "9100",
            "--rate-check",
            "2",
            "--idle-timeout",
            "60",
            "--log-level",
            "debug",
        ],
    )

    assert result.exit_code == 0, result.output
    assert fake_server == [("127.0.0.1", 9100, "example.com", 80, 2, 60)]
    assert config.UPSTREAM_HOST == "example.com"
    assert config.IDLE_TIMEOUT_SECONDS == 60
    assert config.LOG_LEVEL is LogLevel.DEBUG


@pytest.mark.parametrize(
    "options",
    [["--rate-check", "0"], ["--rate-check", "300"], ["--idle-timeout", "0"]],
)
def test_serve_rejects_invalid_timing(fake_server, options):
    result = runner.invoke(cli_main.app, ["serve", "example.com", "80", *options])

    assert result.exit_code == 1
    assert fake_server == []


def test_serve_help_lists_timing_options():
    result = runner.invoke(cli_main.app, ["serve", "--help"])

    assert result.exit_code == 0
    assert "--rate-check" in result.output
    assert "--idle-timeout" in result.output
