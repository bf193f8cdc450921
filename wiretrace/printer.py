"""Request/response printer.

The printer turns one ``httpx.Request`` or ``httpx.Response`` into the bytes
of a trace block. Every event goes through the same steps:

1. a missing request or response renders a single error line;
2. the user filter runs and may skip the event (nothing is rendered) or
   fail (a single error line is rendered);
3. otherwise the start line, headers and body are rendered according to the
   configuration, and the block is terminated by a blank line.

Rendering never raises because of the event itself: formatter failures fall
back to the raw body and hook failures become visible lines.
"""

from collections.abc import Sequence

import httpx

from wiretrace.config import LoggerConfig
from wiretrace.filters import FilterResult, run_filter
from wiretrace.formatters import FormatterRegistry
from wiretrace.render import REQUEST_PREFIX, RESPONSE_PREFIX, Renderer
from wiretrace.utils.body import decode_body, is_binary, is_binary_media_type
from wiretrace.utils.headers import printable_headers
from wiretrace.utils.tls import TLSInfo, extract_tls_info


DEFAULT_PROTOCOL = "HTTP/1.1"

NULL_REQUEST = "null request"
NULL_RESPONSE = "null response"


class Printer:
    """Renders trace blocks for a given configuration."""

    def __init__(self, config: LoggerConfig) -> None:
        self.config = config
        self.registry = FormatterRegistry(config.formatters)

    def check_filter(self, request: httpx.Request | None) -> FilterResult:
        """Run the configured filter against ``request``."""
        if request is None:
            return FilterResult()
        return run_filter(self.config.filter, request)

    def render_error(self, prefix: str, message: str) -> bytes:
        renderer = Renderer(self.config.colors)
        renderer.error(prefix, message)
        return renderer.finish(terminate=False)

    def render_request(
        self,
        request: httpx.Request | None,
        info: Sequence[str] = (),
        filtered: FilterResult | None = None,
    ) -> bytes:
        """Render a request block.

        Args:
            request: The request to print
            info: Extra ``*`` lines printed before the request line
            filtered: Result of a filter check already made by the caller
        """
        if request is None:
            return self.render_error(REQUEST_PREFIX, NULL_REQUEST)

        result = filtered if filtered is not None else self.check_filter(request)
        if result.skip:
            return b""
        if result.error is not None:
            return self.render_error(REQUEST_PREFIX, result.error)

        config = self.config
        renderer = Renderer(config.colors)
        for line in info:
            renderer.info(line)

        try:
            body: bytes | None = request.content
            streaming = False
        except httpx.RequestNotRead:
            body, streaming = None, True

        if config.request_header:
            renderer.request_line(
                request.method, self._request_target(request), _request_protocol(request)
            )
            exclude = {"host"}
            if not body and request.headers.get("content-length") == "0":
                exclude.add("content-length")
            if "host" not in config.skip_headers:
                host = request.headers.get("host") or request.url.netloc.decode("ascii")
                if host:
                    renderer.header(REQUEST_PREFIX, "Host", host)
            self._render_headers(renderer, REQUEST_PREFIX, request.headers, exclude)

        if config.request_body:
            self._render_body(
                renderer,
                request.headers,
                body,
                config.max_request_body,
                separate=config.request_header,
                streaming=streaming,
            )

        return renderer.finish()

    def render_response(
        self,
        response: httpx.Response | None,
        body: bytes | None = None,
        body_size: int | None = None,
        tls: TLSInfo | None = None,
        info: Sequence[str] = (),
        filtered: FilterResult | None = None,
    ) -> bytes:
        """Render a response block.

        Args:
            response: The response to print
            body: Decoded body captured by the caller; defaults to the
                response content when it was read
            body_size: Size of the whole body when ``body`` only holds its
                beginning
            tls: TLS details; extracted from the response when omitted
            info: Extra ``*`` lines printed after the TLS details
            filtered: Result of a filter check already made by the caller
        """
        if response is None:
            return self.render_error(RESPONSE_PREFIX, NULL_RESPONSE)

        request = _response_request(response)
        result = filtered if filtered is not None else self.check_filter(request)
        if result.skip:
            return b""
        if result.error is not None:
            return self.render_error(RESPONSE_PREFIX, result.error)

        config = self.config
        renderer = Renderer(config.colors)

        if config.tls:
            if tls is None:
                tls = extract_tls_info(response)
            if tls is not None:
                for line in tls.lines():
                    renderer.info(line)
        for line in info:
            renderer.info(line)

        if config.response_header:
            status = f"{response.status_code} {response.reason_phrase}".strip()
            renderer.status_line(response.http_version, status)
            self._render_headers(renderer, RESPONSE_PREFIX, response.headers)

        if config.response_body and not (request is not None and request.method == "HEAD"):
            streaming = False
            if body is None:
                try:
                    body = response.content
                except httpx.ResponseNotRead:
                    streaming = True
            self._render_body(
                renderer,
                response.headers,
                body,
                config.max_response_body,
                separate=config.response_header,
                streaming=streaming,
                size=body_size,
            )

        return renderer.finish()

    def _request_target(self, request: httpx.Request) -> str:
        target = request.url.raw_path.decode("ascii")
        return target or "/"

    def _render_headers(
        self,
        renderer: Renderer,
        prefix: str,
        headers: httpx.Headers,
        exclude: set[str] | None = None,
    ) -> None:
        for key, value in printable_headers(
            headers,
            skip=self.config.skip_headers,
            sanitize=not self.config.skip_sanitize,
            exclude=exclude or (),
        ):
            renderer.header(prefix, key, value)

    def _render_body(
        self,
        renderer: Renderer,
        headers: httpx.Headers,
        body: bytes | None,
        max_body: int,
        separate: bool,
        streaming: bool = False,
        size: int | None = None,
    ) -> None:
        if streaming:
            renderer.info("body is a stream, not printed")
            return
        if not body:
            return

        result = run_filter(self.config.body_filter, headers)
        if result.error is not None:
            renderer.info(f"cannot filter body: {result.error}")
            return
        if result.skip:
            return

        size = len(body) if size is None else size
        if size > max_body:
            renderer.info(
                f"body is too long ({size} bytes) to print, "
                f"skipping (longer than {max_body} bytes)"
            )
            return

        content_type = headers.get("content-type")
        if is_binary_media_type(content_type) or is_binary(body):
            renderer.info("body contains binary data")
            return

        formatted = self.registry.format(content_type, body)
        if separate:
            renderer.blank()
        renderer.body(decode_body(formatted if formatted is not None else body))


def _request_protocol(request: httpx.Request) -> str:
    version = request.extensions.get("http_version", DEFAULT_PROTOCOL)
    if isinstance(version, bytes):
        return version.decode("ascii", errors="replace")
    return str(version)


def _response_request(response: httpx.Response) -> httpx.Request | None:
    try:
        return response.request
    except RuntimeError:
        return None
