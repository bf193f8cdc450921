"""Tests for the wiretrace command."""

from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest
from typer.testing import CliRunner

from wiretrace import __version__
from wiretrace.cli import app
from wiretrace.cli.main import parse_header


@pytest.fixture
def runner() -> CliRunner:
    """Create a Typer test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("COLORS", "LOG_LEVEL", "JSON_INDENT", "SKIP_HEADERS", "TIME"):
        monkeypatch.delenv(f"WIRETRACE_{name}", raising=False)


@pytest.fixture
def requests_seen(monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
    """Route the command through a mock transport, recording requests."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, headers={"Content-Type": "application/json"}, content=b'{"ok":true}'
        )

    monkeypatch.setattr(
        "wiretrace.cli.main.create_transport", lambda: httpx.MockTransport(handler)
    )
    return seen


@patch("wiretrace.cli.main.setup_logging")
def test_prints_trace(
    mock_setup_logging: MagicMock, runner: CliRunner, requests_seen: list[httpx.Request]
) -> None:
    result = runner.invoke(
        app,
        [
            "post",
            "http://example.com/items",
            "-H",
            "Content-Type: application/json",
            "-d",
            '{"name":"wire"}',
            "--json-indent",
            "2",
        ],
    )

    assert result.exit_code == 0, result.output
    assert requests_seen[0].method == "POST"
    assert requests_seen[0].content == b'{"name":"wire"}'
    assert "* Request to http://example.com/items\n" in result.output
    assert "> POST /items HTTP/1.1\n" in result.output
    assert '{\n  "name": "wire"\n}\n' in result.output
    assert "< HTTP/1.1 200 OK\n" in result.output
    assert '{\n  "ok": true\n}\n' in result.output
    mock_setup_logging.assert_called_once_with("WARNING")


@patch("wiretrace.cli.main.setup_logging")
def test_no_response_body(
    mock_setup_logging: MagicMock, runner: CliRunner, requests_seen: list[httpx.Request]
) -> None:
    result = runner.invoke(app, ["GET", "http://example.com/", "--no-response-body"])

    assert result.exit_code == 0, result.output
    assert "< Content-Type: application/json\n" in result.output
    assert '"ok"' not in result.output


@patch("wiretrace.cli.main.setup_logging")
def test_colors_flag(
    mock_setup_logging: MagicMock, runner: CliRunner, requests_seen: list[httpx.Request]
) -> None:
    result = runner.invoke(app, ["GET", "http://example.com/", "--colors"])

    assert result.exit_code == 0, result.output
    assert "\x1b[34;1mGET\x1b[0m" in result.output


@patch("wiretrace.cli.main.setup_logging")
def test_log_level_option(
    mock_setup_logging: MagicMock, runner: CliRunner, requests_seen: list[httpx.Request]
) -> None:
    result = runner.invoke(app, ["GET", "http://example.com/", "--log-level", "debug"])

    assert result.exit_code == 0, result.output
    mock_setup_logging.assert_called_once_with("DEBUG")


@patch("wiretrace.cli.main.setup_logging")
def test_transport_error(
    mock_setup_logging: MagicMock, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    monkeypatch.setattr(
        "wiretrace.cli.main.create_transport", lambda: httpx.MockTransport(handler)
    )

    result = runner.invoke(app, ["GET", "http://example.com/"])

    assert result.exit_code == 1
    assert "* cannot complete request: connection refused" in result.output
    assert "Error:" in result.output


def test_invalid_settings(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WIRETRACE_LOG_LEVEL", "LOUD")

    result = runner.invoke(app, ["GET", "http://example.com/"])

    assert result.exit_code == 2
    assert "Configuration error" in result.output


@patch("wiretrace.cli.main.setup_logging")
def test_invalid_header(
    mock_setup_logging: MagicMock, runner: CliRunner, requests_seen: list[httpx.Request]
) -> None:
    result = runner.invoke(app, ["GET", "http://example.com/", "-H", "no-colon"])

    assert result.exit_code == 2
    assert requests_seen == []


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"wiretrace {__version__}" in result.output


def test_parse_header() -> None:
    assert parse_header("X-Api-Key:  abc ") == ("X-Api-Key", "abc")
    assert parse_header("Accept: a:b") == ("Accept", "a:b")
