"""Body formatters."""

from .base import Formatter, FormatterRegistry, MediaTypeFormatter, parse_media_type
from .json import JSONFormatter


__all__ = [
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "MediaTypeFormatter",
    "parse_media_type",
]
