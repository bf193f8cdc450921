"""Logger facade holding the configuration and the output sink."""

import io
import sys
from collections.abc import Callable
from typing import Any

import httpx

from wiretrace.config import LoggerConfig, TraceSettings, load_settings
from wiretrace.filters import BodyFilter, Filter
from wiretrace.printer import Printer


class Logger:
    """Prints HTTP requests and responses to an output sink.

    Example:
        >>> trace = Logger(request_header=True, response_header=True)
        >>> client = httpx.Client(transport=trace.transport())

    The sink receives one ``write()`` per event. The logger does no locking:
    when several threads log through the same logger, the sink must
    serialize writes itself. Configure the logger before first use.
    """

    def __init__(self, config: LoggerConfig | None = None, **options: Any) -> None:
        if config is not None:
            options = {**dict(config), **options}
        self.config = LoggerConfig(**options)

    @classmethod
    def from_settings(cls, settings: TraceSettings | None = None, **overrides: Any) -> "Logger":
        """Create a logger from environment based settings."""
        settings = settings or load_settings()
        return cls(settings.to_config(**overrides))

    def _update(self, **changes: Any) -> None:
        # Re-validate so the setters get the same checks as the constructor
        self.config = LoggerConfig(**{**dict(self.config), **changes})

    def set_output(self, output: Any) -> None:
        """Replace the sink. ``None`` restores ``sys.stderr``."""
        self._update(output=output)

    def set_filter(self, filter: Filter | None) -> None:
        self._update(filter=filter)

    def set_body_filter(self, body_filter: BodyFilter | None) -> None:
        self._update(body_filter=body_filter)

    def skip_header(self, *names: str) -> None:
        """Never print the given headers (case-insensitive)."""
        self._update(skip_headers=self.config.skip_headers | {n.lower() for n in names})

    def set_formatters(self, formatters: list[Any]) -> None:
        self._update(formatters=tuple(formatters))

    def printer(self) -> Printer:
        return Printer(self.config)

    def print_request(self, request: httpx.Request | None) -> None:
        """Print a request.

        A ``None`` request prints ``> error: null request``.
        """
        self.write(self.printer().render_request(request))

    def print_response(
        self, response: httpx.Response | None, body: bytes | None = None
    ) -> None:
        """Print a response.

        Args:
            response: The response, ``None`` prints ``< error: null response``
            body: Decoded body to print instead of ``response.content``
        """
        self.write(self.printer().render_response(response, body=body))

    def write(self, data: bytes) -> None:
        """Write a rendered block to the sink."""
        if not data:
            return
        output = self.config.output if self.config.output is not None else sys.stderr
        if isinstance(output, io.TextIOBase):
            output.write(data.decode("utf-8", errors="replace"))
        else:
            output.write(data)
        flush: Callable[[], Any] | None = getattr(output, "flush", None)
        if flush is not None:
            flush()

    def transport(self, wrapped: httpx.BaseTransport | None = None) -> httpx.BaseTransport:
        """Wrap a transport so an ``httpx.Client`` logs its traffic."""
        from wiretrace.transport import LoggingTransport

        return LoggingTransport(wrapped, self)

    def async_transport(
        self, wrapped: httpx.AsyncBaseTransport | None = None
    ) -> httpx.AsyncBaseTransport:
        """Wrap a transport so an ``httpx.AsyncClient`` logs its traffic."""
        from wiretrace.transport import AsyncLoggingTransport

        return AsyncLoggingTransport(wrapped, self)

    def middleware(self, app: Callable[..., Any]) -> Callable[..., Any]:
        """Wrap an ASGI application so incoming requests are logged."""
        from wiretrace.middleware import LoggingMiddleware

        return LoggingMiddleware(app, self)
