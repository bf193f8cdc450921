"""Tests for body inspection helpers."""

import pytest

from wiretrace.utils.body import decode_body, is_binary, is_binary_media_type


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("image/png", True),
        ("audio/ogg", True),
        ("application/octet-stream", True),
        ("application/pdf; name=a.pdf", True),
        ("image/svg+xml", False),
        ("text/plain", False),
        ("application/json", False),
        (None, False),
    ],
)
def test_is_binary_media_type(content_type: str | None, expected: bool) -> None:
    assert is_binary_media_type(content_type) is expected


def test_text_is_not_binary() -> None:
    assert not is_binary("héllo wörld".encode())
    assert not is_binary(b"")


def test_nul_byte_is_binary() -> None:
    assert is_binary(b"abc\x00def")


def test_invalid_utf8_is_binary() -> None:
    assert is_binary(b"\x89PNG\r\n\x1a\n")


def test_bom_is_text() -> None:
    assert not is_binary("hi".encode("utf-16"))
    assert not is_binary(b"\xef\xbb\xbfhi")


def test_character_cut_by_sniff_window_is_text() -> None:
    body = b"a" * 511 + "é".encode() + b"tail"

    assert not is_binary(body)


def test_decode_body() -> None:
    assert decode_body(b"\xef\xbb\xbfhi") == "hi"
    assert decode_body("hi".encode("utf-16")) == "hi"
    assert decode_body(b"bad \xff byte") == "bad � byte"
