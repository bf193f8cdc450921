"""Body inspection helpers."""

from wiretrace.formatters import parse_media_type


# Media types that are never printed as text
BINARY_MEDIA_TYPES = {
    "application/octet-stream",
    "application/pdf",
    "application/zip",
    "application/gzip",
    "application/x-gzip",
    "application/x-tar",
    "application/x-7z-compressed",
    "application/x-rar-compressed",
    "application/vnd.ms-fontobject",
    "application/wasm",
    "application/protobuf",
    "application/x-protobuf",
    "application/grpc",
    "application/msgpack",
    "application/x-msgpack",
}

BINARY_MEDIA_PREFIXES = ("image/", "audio/", "video/", "font/")

# Text-friendly image formats
TEXT_MEDIA_TYPES = {"image/svg+xml"}

SNIFF_LENGTH = 512


def is_binary_media_type(content_type: str | None) -> bool:
    media_type = parse_media_type(content_type)
    if not media_type or media_type in TEXT_MEDIA_TYPES:
        return False
    if media_type in BINARY_MEDIA_TYPES:
        return True
    return media_type.startswith(BINARY_MEDIA_PREFIXES)


def is_binary(body: bytes) -> bool:
    """Sniff the start of ``body`` for binary content.

    Bodies with a UTF-8 or UTF-16 byte order mark are text. Otherwise a NUL
    byte or an invalid UTF-8 sequence means binary.
    """
    head = body[:SNIFF_LENGTH]
    if head.startswith((b"\xef\xbb\xbf", b"\xfe\xff", b"\xff\xfe")):
        return False
    if b"\x00" in head:
        return True
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character cut by the sniff window is still text
        return not (len(head) == SNIFF_LENGTH and e.start >= len(head) - 3)
    return False


def decode_body(body: bytes) -> str:
    """Decode a body for printing, replacing undecodable bytes."""
    if body.startswith((b"\xfe\xff", b"\xff\xfe")):
        return body.decode("utf-16", errors="replace")
    return body.decode("utf-8-sig", errors="replace")
