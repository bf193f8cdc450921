"""ASGI middleware printing incoming requests and their responses."""

import time
from collections.abc import Awaitable, Callable, MutableMapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from wiretrace.filters import NO_SKIP
from wiretrace.printer import Printer
from wiretrace.transport import format_duration


if TYPE_CHECKING:
    from wiretrace.logger import Logger


logger = structlog.get_logger(__name__)

Scope = MutableMapping[str, Any]
Message = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]


class LoggingMiddleware:
    """ASGI middleware printing the HTTP traffic of an application."""

    def __init__(self, app: Callable[..., Any], trace: "Logger | None" = None) -> None:
        from wiretrace.logger import Logger

        self.app = app
        self.trace = trace or Logger()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        # Only handle HTTP requests
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        config = self.trace.config
        printer = Printer(config)
        request = self._build_request(scope)

        result = printer.check_filter(request)
        if result.skip:
            await self.app(scope, receive, send)
            return
        if result.error is not None:
            self.trace.write(printer.render_request(request, filtered=result))
            await self.app(scope, receive, send)
            return

        if config.request_body:
            receive = await self._buffer_request_body(request, receive)

        info = []
        if not config.skip_request_info:
            info.append(f"Request from {self._client_address(scope)}")
        if config.time:
            info.append(f"Request at {datetime.now().astimezone().isoformat(' ', 'seconds')}")
        self.trace.write(printer.render_request(request, info=info, filtered=result))

        start = time.perf_counter()
        await self.app(scope, receive, self._wrap_send(send, request, printer, start))

    def _build_request(self, scope: Scope) -> httpx.Request:
        headers = [(name, value) for name, value in scope.get("headers", [])]
        host = next(
            (value.decode("latin-1") for name, value in headers if name.lower() == b"host"),
            None,
        )
        if host is None:
            server = scope.get("server") or ("localhost", None)
            host = server[0] if server[1] is None else f"{server[0]}:{server[1]}"

        raw_path = scope.get("raw_path") or scope.get("path", "/").encode("utf-8")
        query_string = scope.get("query_string", b"")
        target = raw_path.decode("latin-1")
        if query_string:
            target += "?" + query_string.decode("latin-1")

        http_version = scope.get("http_version", "1.1")
        # A stream keeps httpx from adding framing headers the client never sent
        return httpx.Request(
            scope.get("method", "GET"),
            f"{scope.get('scheme', 'http')}://{host}{target}",
            headers=headers,
            stream=httpx.ByteStream(b""),
            extensions={"http_version": f"HTTP/{http_version}".encode("ascii")},
        )

    async def _buffer_request_body(self, request: httpx.Request, receive: Receive) -> Receive:
        """Read the request body up front and replay it to the application."""
        messages: list[Message] = []
        chunks: list[bytes] = []
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break

        request.stream = httpx.ByteStream(b"".join(chunks))
        request.read()

        async def replay() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        return replay

    def _client_address(self, scope: Scope) -> str:
        client = scope.get("client")
        if not client:
            return "unknown"
        host, port = client
        return f"{host}:{port}"

    def _wrap_send(
        self, send: Send, request: httpx.Request, printer: Printer, start: float
    ) -> Send:
        config = self.trace.config
        status = 200
        raw_headers: list[tuple[bytes, bytes]] = []
        chunks: list[bytes] = []
        size = 0
        collected = 0

        async def wrapped(message: Message) -> None:
            nonlocal status, raw_headers, size, collected

            if message["type"] == "http.response.start":
                status = message["status"]
                raw_headers = list(message.get("headers", []))

            elif message["type"] == "http.response.body":
                body = message.get("body", b"")
                size += len(body)
                if config.response_body and collected <= config.max_response_body:
                    chunks.append(body)
                    collected += len(body)
                if not message.get("more_body", False):
                    self._print_response(
                        printer, request, status, raw_headers, b"".join(chunks), size, start
                    )

            await send(message)

        return wrapped

    def _print_response(
        self,
        printer: Printer,
        request: httpx.Request,
        status: int,
        raw_headers: list[tuple[bytes, bytes]],
        raw_body: bytes,
        size: int,
        start: float,
    ) -> None:
        response = httpx.Response(
            status,
            headers=raw_headers,
            stream=httpx.ByteStream(raw_body),
            request=request,
            extensions={"http_version": request.extensions["http_version"]},
        )
        body = raw_body
        if size == len(raw_body):
            try:
                body = response.read()
            except httpx.DecodingError as e:
                logger.debug(
                    "response_body_decode_failed",
                    path=request.url.path,
                    error=str(e),
                    category="middleware",
                )

        info = []
        if self.trace.config.time:
            info.append(f"Request took {format_duration(time.perf_counter() - start)}")
        self.trace.write(
            printer.render_response(
                response, body=body, body_size=size, info=info, filtered=NO_SKIP
            )
        )
