"""Tests for the line renderer."""

from wiretrace.render import (
    GREY,
    RED,
    RESET,
    RESPONSE_PREFIX,
    Renderer,
    strip_ansi,
)


def test_plain_lines() -> None:
    renderer = Renderer()
    renderer.request_line("GET", "/a?b=1", "HTTP/1.1")
    renderer.header(">", "Accept", "*/*")

    assert renderer.finish() == b"> GET /a?b=1 HTTP/1.1\n> Accept: */*\n\n"


def test_status_line_colors() -> None:
    renderer = Renderer(colors=True)
    renderer.status_line("HTTP/2", "404 Not Found")

    assert renderer.finish(terminate=False) == (
        b"< \x1b[34mHTTP/2\x1b[0m \x1b[31m404 Not Found\x1b[0m\n"
    )


def test_info_is_grey() -> None:
    renderer = Renderer(colors=True)
    renderer.info("body contains binary data")

    assert renderer.finish(terminate=False).decode() == (
        f"* {GREY}body contains binary data{RESET}\n"
    )


def test_error_line() -> None:
    plain = Renderer()
    plain.error(RESPONSE_PREFIX, "null response")
    colored = Renderer(colors=True)
    colored.error(RESPONSE_PREFIX, "null response")

    assert plain.finish(terminate=False) == b"< error: null response\n"
    assert colored.finish(terminate=False).decode() == f"< {RED}error: null response{RESET}\n"


def test_empty_values_are_not_styled() -> None:
    renderer = Renderer(colors=True)

    assert renderer.style("", RED) == ""


def test_body_gets_trailing_newline() -> None:
    renderer = Renderer()
    renderer.body("no newline")
    renderer.body("")

    assert renderer.finish() == b"no newline\n\n"


def test_body_trailing_blank_lines_collapse() -> None:
    renderer = Renderer()
    renderer.body("x\n\n")

    assert renderer.finish() == b"x\n\n"

    crlf = Renderer()
    crlf.body("line\r\n\r\n")

    assert crlf.finish() == b"line\n\n"


def test_finish_does_not_double_the_terminator() -> None:
    renderer = Renderer()
    renderer.header("<", "Server", "test")
    renderer.blank()

    assert renderer.finish() == b"< Server: test\n\n"


def test_empty_block_renders_nothing() -> None:
    renderer = Renderer(colors=True)

    assert not renderer
    assert renderer.finish() == b""


def test_strip_ansi() -> None:
    renderer = Renderer(colors=True)
    renderer.request_line("DELETE", "/x", "HTTP/1.1")
    renderer.header(">", "Host", "example.com")

    plain = Renderer()
    plain.request_line("DELETE", "/x", "HTTP/1.1")
    plain.header(">", "Host", "example.com")

    assert strip_ansi(renderer.finish().decode()) == plain.finish().decode()
