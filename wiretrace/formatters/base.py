"""Body formatter protocol and registry."""

import io
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

import structlog


logger = structlog.get_logger(__name__)


def parse_media_type(content_type: str | None) -> str:
    """Return the lowercased media type without parameters.

    ``"Application/JSON; charset=utf-8"`` becomes ``"application/json"``.
    """
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


@runtime_checkable
class Formatter(Protocol):
    """Turns a raw body into a human readable one."""

    def match(self, media_type: str) -> bool:
        """Whether this formatter handles the given media type."""
        ...

    def format(self, buffer: Any, src: bytes) -> None:
        """Write the formatted ``src`` to ``buffer``. Raise on failure."""
        ...


class MediaTypeFormatter:
    """Base for formatters selected by exact media type or prefix."""

    media_types: frozenset[str] = frozenset()
    prefixes: tuple[str, ...] = ()

    def match(self, media_type: str) -> bool:
        media_type = parse_media_type(media_type)
        if media_type in self.media_types:
            return True
        return any(media_type.startswith(prefix) for prefix in self.prefixes)

    def format(self, buffer: Any, src: bytes) -> None:
        raise NotImplementedError


class FormatterRegistry:
    """Ordered formatters; the first match wins."""

    def __init__(self, formatters: Iterable[Formatter] = ()) -> None:
        self.formatters: list[Formatter] = list(formatters)

    def register(self, formatter: Formatter) -> None:
        """Append a formatter, checked after the existing ones."""
        self.formatters.append(formatter)

    def find(self, content_type: str | None) -> Formatter | None:
        media_type = parse_media_type(content_type)
        if not media_type:
            return None
        for formatter in self.formatters:
            if formatter.match(media_type):
                return formatter
        return None

    def format(self, content_type: str | None, body: bytes) -> bytes | None:
        """Format ``body`` with the matching formatter.

        Returns None when no formatter matches or the formatter fails, in
        which case the caller prints the raw body.
        """
        formatter = self.find(content_type)
        if formatter is None:
            return None

        buffer = io.BytesIO()
        try:
            formatter.format(buffer, body)
        except Exception as e:
            logger.debug(
                "body_formatter_failed",
                formatter=type(formatter).__name__,
                content_type=content_type,
                error=str(e),
                category="format",
            )
            return None
        return buffer.getvalue()
