"""Filter hooks deciding whether an event, or its body, is printed."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from wiretrace.formatters import parse_media_type


logger = structlog.get_logger(__name__)

Filter = Callable[[httpx.Request], bool]
BodyFilter = Callable[[httpx.Headers], bool]


@dataclass(frozen=True)
class FilterResult:
    """Outcome of a filter hook.

    ``error`` is set when the hook raised; ``skip`` is then False.
    """

    skip: bool = False
    error: str | None = None


NO_SKIP = FilterResult()


def run_filter(hook: Callable[[Any], bool] | None, subject: Any) -> FilterResult:
    """Call a user hook and turn its outcome into a FilterResult.

    A missing hook never skips. Exceptions raised by the hook are captured
    as the result's error.
    """
    if hook is None:
        return NO_SKIP
    try:
        skip = bool(hook(subject))
    except Exception as e:
        logger.debug(
            "filter_hook_failed",
            hook=getattr(hook, "__name__", type(hook).__name__),
            error=str(e),
            category="filter",
        )
        return FilterResult(error=str(e) or type(e).__name__)
    return FilterResult(skip=skip)


def skip_paths(*prefixes: str) -> Filter:
    """Build a filter skipping requests whose path starts with a prefix."""

    def _filter(request: httpx.Request) -> bool:
        path = request.url.path
        return any(path.startswith(prefix) for prefix in prefixes)

    return _filter


def skip_media_types(*media_types: str) -> BodyFilter:
    """Build a body filter omitting bodies of the given media types.

    Entries ending with ``/`` match every subtype, e.g. ``"image/"``.
    """
    wanted = tuple(media_type.lower() for media_type in media_types)

    def _filter(headers: httpx.Headers) -> bool:
        media_type = parse_media_type(headers.get("content-type"))
        return any(
            media_type.startswith(w) if w.endswith("/") else media_type == w
            for w in wanted
        )

    return _filter
