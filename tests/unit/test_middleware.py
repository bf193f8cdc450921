"""Tests for the ASGI logging middleware."""

import io
from typing import Any

import httpx
import pytest

from wiretrace import Logger, LoggingMiddleware


async def echo_app(scope: dict[str, Any], receive: Any, send: Any) -> None:
    """Answer 201 with the request body, or a JSON document when empty."""
    body = b""
    while True:
        message = await receive()
        body += message.get("body", b"")
        if not message.get("more_body", False):
            break

    await send(
        {
            "type": "http.response.start",
            "status": 201,
            "headers": [(b"content-type", b"application/json")],
        }
    )
    if body:
        await send({"type": "http.response.body", "body": body})
        return
    await send({"type": "http.response.body", "body": b'{"id":', "more_body": True})
    await send({"type": "http.response.body", "body": b"7}"})


@pytest.fixture
def server_trace(output: io.StringIO, quiet_client_headers: set[str]) -> Logger:
    return Logger(
        request_header=True,
        request_body=True,
        response_header=True,
        response_body=True,
        skip_headers=quiet_client_headers,
        output=output,
    )


def make_client(trace: Logger) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=trace.middleware(echo_app))
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")


async def test_request_and_response(server_trace: Logger, output: io.StringIO) -> None:
    async with make_client(server_trace) as client:
        response = await client.get("/items?page=2")

    assert response.status_code == 201
    assert response.json() == {"id": 7}
    assert output.getvalue() == (
        "* Request from 127.0.0.1:123\n"
        "> GET /items?page=2 HTTP/1.1\n"
        "> Host: testserver\n"
        "\n"
        "< HTTP/1.1 201 Created\n"
        "< Content-Type: application/json\n"
        "\n"
        "{\n"
        '    "id": 7\n'
        "}\n"
        "\n"
    )


async def test_request_body_is_replayed(server_trace: Logger, output: io.StringIO) -> None:
    async with make_client(server_trace) as client:
        response = await client.post(
            "/echo", content=b'["x"]', headers={"Content-Type": "application/json"}
        )

    assert response.content == b'["x"]'
    text = output.getvalue()
    assert "> POST /echo HTTP/1.1\n" in text
    assert "> Content-Length: 5\n" in text
    assert '> Content-Type: application/json\n\n[\n    "x"\n]\n\n' in text
    assert text.endswith('< Content-Type: application/json\n\n[\n    "x"\n]\n\n')


async def test_filtered_request(server_trace: Logger, output: io.StringIO) -> None:
    server_trace.set_filter(lambda request: request.url.path.startswith("/items"))

    async with make_client(server_trace) as client:
        response = await client.get("/items")

    assert response.status_code == 201
    assert output.getvalue() == ""


async def test_filter_error(server_trace: Logger, output: io.StringIO) -> None:
    def deny(request: httpx.Request) -> bool:
        raise ValueError("denied")

    server_trace.set_filter(deny)

    async with make_client(server_trace) as client:
        response = await client.get("/items")

    assert response.status_code == 201
    assert output.getvalue() == "> error: denied\n"


async def test_skip_request_info(output: io.StringIO) -> None:
    trace = Logger(request_header=True, skip_request_info=True, output=output)

    async with make_client(trace) as client:
        await client.get("/")

    assert output.getvalue().startswith("> GET / HTTP/1.1\n")


async def test_non_http_scope_passes_through(server_trace: Logger, output: io.StringIO) -> None:
    scopes: list[str] = []

    async def app(scope: dict[str, Any], receive: Any, send: Any) -> None:
        scopes.append(scope["type"])

    async def receive() -> dict[str, Any]:
        return {"type": "lifespan.startup"}

    async def send(message: dict[str, Any]) -> None:
        pass

    middleware = LoggingMiddleware(app, server_trace)
    await middleware({"type": "lifespan"}, receive, send)

    assert scopes == ["lifespan"]
    assert output.getvalue() == ""
