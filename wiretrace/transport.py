"""HTTPX transport wrappers printing the traffic of a client."""

import time
from collections.abc import AsyncIterator, Iterator
from datetime import datetime
from typing import TYPE_CHECKING

import httpx
import structlog

from wiretrace.filters import FilterResult
from wiretrace.printer import Printer
from wiretrace.render import Renderer
from wiretrace.utils.tls import TLSInfo, extract_tls_info


if TYPE_CHECKING:
    from wiretrace.logger import Logger


logger = structlog.get_logger(__name__)


def format_duration(seconds: float) -> str:
    """Human readable duration: ``850µs``, ``12.34ms``, ``1.502s``."""
    if seconds < 0.001:
        return f"{seconds * 1_000_000:.0f}µs"
    if seconds < 1:
        return f"{seconds * 1000:.2f}ms"
    return f"{seconds:.3f}s"


class TraceExchange:
    """State of one request/response exchange going through a transport."""

    def __init__(self, trace: "Logger", request: httpx.Request) -> None:
        self.trace = trace
        self.config = trace.config
        self.printer = Printer(trace.config)
        self.request = request
        self.result: FilterResult = self.printer.check_filter(request)
        self.start = time.perf_counter()
        self.tls: TLSInfo | None = None
        self._finished = False

    @property
    def skipped(self) -> bool:
        """Whether nothing more is printed for this exchange."""
        return self.result.skip or self.result.error is not None

    @property
    def reads_request_body(self) -> bool:
        return not self.skipped and self.config.request_body

    @property
    def collects_response_body(self) -> bool:
        return self.config.response_body

    def print_request(self) -> None:
        info = []
        if not self.config.skip_request_info:
            info.append(f"Request to {self.request.url}")
        if self.config.time:
            info.append(f"Request at {datetime.now().astimezone().isoformat(' ', 'seconds')}")
        self.start = time.perf_counter()
        self.trace.write(
            self.printer.render_request(self.request, info=info, filtered=self.result)
        )

    def print_failure(self, error: Exception) -> None:
        if self.skipped:
            return
        renderer = Renderer(self.config.colors)
        renderer.info(f"cannot complete request: {error}")
        self.trace.write(renderer.finish())

    def attach(self, response: httpx.Response) -> None:
        """Record connection details of the response before it is streamed."""
        try:
            response.request
        except RuntimeError:
            response.request = self.request
        if self.config.tls:
            self.tls = extract_tls_info(response)

    def finish(
        self,
        response: httpx.Response,
        raw_body: bytes,
        body_size: int,
        complete: bool,
    ) -> None:
        """Print the response once its stream is closed."""
        body: bytes | None = None
        if complete and self.collects_response_body:
            body = self._decode(response, raw_body, body_size)
        self.print_response(response, body=body, body_size=body_size)

    def print_response(
        self,
        response: httpx.Response,
        body: bytes | None = None,
        body_size: int | None = None,
    ) -> None:
        if self._finished:
            return
        self._finished = True

        info = []
        if self.config.time:
            info.append(f"Request took {format_duration(time.perf_counter() - self.start)}")

        self.trace.write(
            self.printer.render_response(
                response,
                body=body,
                body_size=body_size,
                tls=self.tls,
                info=info,
                filtered=self.result,
            )
        )

    def _decode(self, response: httpx.Response, raw_body: bytes, body_size: int) -> bytes:
        # Bodies over the limit are only partially collected and never printed
        if body_size > len(raw_body) or not raw_body:
            return raw_body
        try:
            return httpx.Response(
                response.status_code, headers=response.headers, content=raw_body
            ).content
        except httpx.DecodingError as e:
            logger.debug(
                "response_body_decode_failed",
                url=str(self.request.url),
                error=str(e),
                category="http",
            )
            return raw_body


class _BodyCollector:
    """Keeps the beginning of a streamed body, up to the configured limit."""

    def __init__(self, exchange: TraceExchange) -> None:
        self.exchange = exchange
        self.enabled = exchange.collects_response_body
        self.limit = exchange.config.max_response_body
        self.chunks: list[bytes] = []
        self.collected = 0
        self.size = 0
        self.complete = False

    def add(self, chunk: bytes) -> None:
        self.size += len(chunk)
        if not self.enabled or self.collected > self.limit:
            return
        self.chunks.append(chunk)
        self.collected += len(chunk)

    def finish(self, response: httpx.Response) -> None:
        self.exchange.finish(response, b"".join(self.chunks), self.size, self.complete)


class LoggingResponseStream(httpx.SyncByteStream):
    """Passes response chunks through unchanged, printing on close."""

    def __init__(
        self, stream: httpx.SyncByteStream, response: httpx.Response, exchange: TraceExchange
    ) -> None:
        self.stream = stream
        self.response = response
        self.collector = _BodyCollector(exchange)

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self.stream:
            self.collector.add(chunk)
            yield chunk
        self.collector.complete = True

    def close(self) -> None:
        try:
            self.stream.close()
        finally:
            self.collector.finish(self.response)


class AsyncLoggingResponseStream(httpx.AsyncByteStream):
    """Async counterpart of LoggingResponseStream."""

    def __init__(
        self, stream: httpx.AsyncByteStream, response: httpx.Response, exchange: TraceExchange
    ) -> None:
        self.stream = stream
        self.response = response
        self.collector = _BodyCollector(exchange)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self.stream:
            self.collector.add(chunk)
            yield chunk
        self.collector.complete = True

    async def aclose(self) -> None:
        try:
            await self.stream.aclose()
        finally:
            self.collector.finish(self.response)


class LoggingTransport(httpx.BaseTransport):
    """Wraps an HTTPX transport to print requests and responses."""

    def __init__(
        self, wrapped: httpx.BaseTransport | None = None, trace: "Logger | None" = None
    ) -> None:
        from wiretrace.logger import Logger

        self.wrapped = wrapped or httpx.HTTPTransport()
        self.trace = trace or Logger()
        logger.debug(
            "logging_transport_initialized",
            wrapped=type(self.wrapped).__name__,
            category="http",
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        exchange = TraceExchange(self.trace, request)
        if exchange.reads_request_body:
            request.read()
        exchange.print_request()

        try:
            response = self.wrapped.handle_request(request)
        except Exception as e:
            exchange.print_failure(e)
            raise

        if exchange.skipped:
            return response

        exchange.attach(response)
        if response.is_stream_consumed:
            # Body already loaded, e.g. by httpx.MockTransport
            exchange.print_response(response)
            return response

        response.stream = LoggingResponseStream(response.stream, response, exchange)  # type: ignore[arg-type]
        return response

    def close(self) -> None:
        self.wrapped.close()

    def __enter__(self) -> "LoggingTransport":
        self.wrapped.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self.wrapped.__exit__(*args)  # type: ignore[arg-type]


class AsyncLoggingTransport(httpx.AsyncBaseTransport):
    """Wraps an async HTTPX transport to print requests and responses."""

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport | None = None,
        trace: "Logger | None" = None,
    ) -> None:
        from wiretrace.logger import Logger

        self.wrapped = wrapped or httpx.AsyncHTTPTransport()
        self.trace = trace or Logger()
        logger.debug(
            "async_logging_transport_initialized",
            wrapped=type(self.wrapped).__name__,
            category="http",
        )

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        exchange = TraceExchange(self.trace, request)
        if exchange.reads_request_body:
            await request.aread()
        exchange.print_request()

        try:
            response = await self.wrapped.handle_async_request(request)
        except Exception as e:
            exchange.print_failure(e)
            raise

        if exchange.skipped:
            return response

        exchange.attach(response)
        if response.is_stream_consumed:
            # Body already loaded, e.g. by httpx.MockTransport
            exchange.print_response(response)
            return response

        response.stream = AsyncLoggingResponseStream(response.stream, response, exchange)  # type: ignore[arg-type]
        return response

    async def aclose(self) -> None:
        await self.wrapped.aclose()

    async def __aenter__(self) -> "AsyncLoggingTransport":
        await self.wrapped.__aenter__()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.wrapped.__aexit__(*args)  # type: ignore[arg-type]
