"""Line renderer turning trace fields into text lines."""

import re


# ANSI SGR sequences used for each semantic role
BOLD_BLUE = "\x1b[34;1m"
BLUE = "\x1b[34m"
YELLOW = "\x1b[33m"
RED = "\x1b[31m"
GREY = "\x1b[90m"
RESET = "\x1b[0m"

METHOD_STYLE = BOLD_BLUE
PATH_STYLE = YELLOW
PROTOCOL_STYLE = BLUE
STATUS_STYLE = RED
HEADER_KEY_STYLE = BOLD_BLUE
HEADER_SEPARATOR_STYLE = RED
HEADER_VALUE_STYLE = YELLOW
ERROR_STYLE = RED
INFO_STYLE = GREY

REQUEST_PREFIX = ">"
RESPONSE_PREFIX = "<"
INFO_PREFIX = "*"

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI SGR sequences from ``text``."""
    return _ANSI_RE.sub("", text)


class Renderer:
    """Builds the text block of a single event.

    Lines accumulate in memory; ``finish()`` returns the whole block so the
    sink receives one write per event.
    """

    def __init__(self, colors: bool = False) -> None:
        self.colors = colors
        self._lines: list[str] = []

    def __bool__(self) -> bool:
        return bool(self._lines)

    def style(self, text: str, style: str) -> str:
        if not self.colors or not text:
            return text
        return f"{style}{text}{RESET}"

    def request_line(self, method: str, target: str, protocol: str) -> None:
        """``> METHOD /path HTTP/1.1``"""
        self._lines.append(
            f"{REQUEST_PREFIX} {self.style(method, METHOD_STYLE)} "
            f"{self.style(target, PATH_STYLE)} {self.style(protocol, PROTOCOL_STYLE)}\n"
        )

    def status_line(self, protocol: str, status: str) -> None:
        """``< HTTP/1.1 200 OK``"""
        self._lines.append(
            f"{RESPONSE_PREFIX} {self.style(protocol, PROTOCOL_STYLE)} "
            f"{self.style(status, STATUS_STYLE)}\n"
        )

    def header(self, prefix: str, key: str, value: str) -> None:
        """``> Key: value``"""
        self._lines.append(
            f"{prefix} {self.style(key, HEADER_KEY_STYLE)}"
            f"{self.style(':', HEADER_SEPARATOR_STYLE)} "
            f"{self.style(value, HEADER_VALUE_STYLE)}\n"
        )

    def info(self, message: str) -> None:
        """``* message``"""
        self._lines.append(f"{INFO_PREFIX} {self.style(message, INFO_STYLE)}\n")

    def error(self, prefix: str, message: str) -> None:
        """``> error: message``"""
        self._lines.append(f"{prefix} {self.style(f'error: {message}', ERROR_STYLE)}\n")

    def body(self, text: str) -> None:
        # Trailing line breaks collapse into the block terminator
        text = text.rstrip("\r\n")
        if not text:
            return
        self._lines.append(text + "\n")

    def blank(self) -> None:
        self._lines.append("\n")

    def finish(self, terminate: bool = True) -> bytes:
        """Return the rendered block.

        A non-empty block ends with exactly one blank line unless
        ``terminate`` is False. An empty block renders as nothing.
        """
        if not self._lines:
            return b""
        if terminate and self._lines[-1] != "\n":
            self._lines.append("\n")
        return "".join(self._lines).encode("utf-8")
