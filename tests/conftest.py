"""Shared test fixtures for wiretrace tests.

Fixtures build loggers writing to in-memory sinks so tests can compare the
exact trace text.
"""

import io

import pytest
import structlog

from wiretrace import Logger


def pytest_configure(config: pytest.Config) -> None:
    """Keep wiretrace's own diagnostics out of the captured output."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(30),  # WARNING
    )


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def trace(output: io.StringIO) -> Logger:
    """Logger with every toggle on, no colors."""
    return Logger(
        tls=True,
        request_header=True,
        request_body=True,
        response_header=True,
        response_body=True,
        output=output,
    )


@pytest.fixture
def quiet_client_headers() -> set[str]:
    """Default httpx client headers whose values depend on the httpx version."""
    return {"accept", "accept-encoding", "connection", "user-agent"}
