"""JSON formatter for pretty-printing structured bodies."""

import io
import json
import re
from typing import Any

from wiretrace.exceptions import FormatterError

from .base import MediaTypeFormatter, parse_media_type


# Strings, structural characters and bare literals (numbers, true, false, null)
_TOKEN_RE = re.compile(r'"(?:[^"\\]|\\.)*"|[{}\[\],:]|[^\s{}\[\],:"]+')


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def indent_json(text: str, indent: str) -> str:
    """Re-indent a valid JSON document without touching its tokens.

    Strings, numbers and keys are copied exactly as written, duplicate keys
    included. Empty objects and arrays stay on one line.
    """
    out: list[str] = []
    depth = 0
    pending_newline = False

    for match in _TOKEN_RE.finditer(text):
        token = match.group()
        if token in ("}", "]"):
            depth -= 1
            if not pending_newline:
                out.append("\n" + indent * depth)
            pending_newline = False
            out.append(token)
            continue

        if pending_newline:
            out.append("\n" + indent * depth)
            pending_newline = False

        if token in ("{", "["):
            out.append(token)
            depth += 1
            pending_newline = True
        elif token == ",":
            out.append(",\n" + indent * depth)
        elif token == ":":
            out.append(": ")
        else:
            out.append(token)

    return "".join(out)


class JSONFormatter(MediaTypeFormatter):
    """Re-indents JSON bodies.

    Matches ``application/json``, ``text/json`` and any ``+json`` structured
    syntax suffix such as ``application/problem+json``.
    """

    media_types = frozenset({"application/json", "text/json"})

    def __init__(self, indent: int = 4) -> None:
        self.indent = indent

    def match(self, media_type: str) -> bool:
        return super().match(media_type) or parse_media_type(media_type).endswith(
            "+json"
        )

    def format(self, buffer: Any, src: bytes) -> None:
        """Write the re-indented ``src`` to ``buffer``.

        Only whitespace between tokens changes: literals are kept as sent.

        Raises:
            FormatterError: If ``buffer`` is not an ``io.BytesIO`` or ``src``
                is not valid JSON. Nothing is written in either case.
        """
        if not isinstance(buffer, io.BytesIO):
            raise FormatterError("underlying writer for JSONFormatter must be io.BytesIO")

        try:
            text = src.decode(json.detect_encoding(src))
            json.loads(text, parse_constant=_reject_constant)
        except (ValueError, UnicodeDecodeError) as e:
            raise FormatterError(
                f"invalid JSON body: {e}", details={"body_size": len(src)}
            ) from e

        buffer.write(indent_json(text, " " * self.indent).encode("utf-8"))
