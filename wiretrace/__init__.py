"""wiretrace - human readable traces of HTTP requests and responses."""

from .config import LoggerConfig, TraceSettings
from .exceptions import ConfigurationError, FormatterError, WiretraceError
from .filters import FilterResult, skip_media_types, skip_paths
from .formatters import Formatter, FormatterRegistry, JSONFormatter, MediaTypeFormatter
from .logger import Logger
from .middleware import LoggingMiddleware
from .printer import Printer
from .transport import AsyncLoggingTransport, LoggingTransport


__version__ = "0.1.0"

__all__ = [
    "AsyncLoggingTransport",
    "ConfigurationError",
    "FilterResult",
    "Formatter",
    "FormatterError",
    "FormatterRegistry",
    "JSONFormatter",
    "Logger",
    "LoggerConfig",
    "LoggingMiddleware",
    "LoggingTransport",
    "MediaTypeFormatter",
    "Printer",
    "TraceSettings",
    "WiretraceError",
    "__version__",
]
