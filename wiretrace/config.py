"""Configuration for the HTTP trace logger."""

from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wiretrace.exceptions import ConfigurationError
from wiretrace.formatters import JSONFormatter


DEFAULT_MAX_BODY = 4 * 1024 * 1024  # 4MB


def _default_formatters() -> tuple[Any, ...]:
    return (JSONFormatter(),)


class LoggerConfig(BaseModel):
    """Immutable configuration of a Logger.

    Set it up once before the first request is logged. Changing the logger
    configuration while requests are being printed is not supported.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    time: bool = Field(
        default=False,
        description="Print the time a request was sent and how long it took",
    )

    tls: bool = Field(
        default=False,
        description="Print TLS connection details of responses",
    )

    request_header: bool = Field(
        default=False,
        description="Print the request line and request headers",
    )

    request_body: bool = Field(
        default=False,
        description="Print the request body",
    )

    response_header: bool = Field(
        default=False,
        description="Print the status line and response headers",
    )

    response_body: bool = Field(
        default=False,
        description="Print the response body",
    )

    skip_request_info: bool = Field(
        default=False,
        description="Omit the '* Request to' and '* Request from' lines",
    )

    colors: bool = Field(
        default=False,
        description="Style the output with ANSI escape sequences",
    )

    skip_sanitize: bool = Field(
        default=False,
        description="Print credentials in Authorization and cookie headers as-is",
    )

    max_request_body: int = Field(
        default=DEFAULT_MAX_BODY,
        description="Request bodies larger than this (in bytes) are not printed",
    )

    max_response_body: int = Field(
        default=DEFAULT_MAX_BODY,
        description="Response bodies larger than this (in bytes) are not printed",
    )

    skip_headers: frozenset[str] = Field(
        default_factory=frozenset,
        description="Header names (case-insensitive) that are never printed",
    )

    filter: Callable[[httpx.Request], bool] | None = Field(
        default=None,
        description="Return True to skip logging a request and its response",
    )

    body_filter: Callable[[httpx.Headers], bool] | None = Field(
        default=None,
        description="Return True to omit the body of a request or response",
    )

    formatters: tuple[Any, ...] = Field(
        default_factory=_default_formatters,
        description="Body formatters, checked in order",
    )

    output: Any = Field(
        default=None,
        description="Sink for the trace, sys.stderr when unset",
    )

    @field_validator("max_request_body", "max_response_body")
    @classmethod
    def validate_max_body(cls, v: int) -> int:
        """Body limits must not be negative."""
        if v < 0:
            raise ValueError(f"Invalid body limit: {v}. Must be >= 0")
        return v

    @field_validator("skip_headers", mode="before")
    @classmethod
    def normalize_skip_headers(cls, v: Any) -> frozenset[str]:
        """Store skipped header names lowercased."""
        if isinstance(v, str):
            v = [v]
        return frozenset(name.strip().lower() for name in v)

    @field_validator("formatters", mode="before")
    @classmethod
    def validate_formatters(cls, v: Any) -> tuple[Any, ...]:
        """Every formatter must expose match() and format()."""
        formatters = tuple(v)
        for formatter in formatters:
            if not (
                callable(getattr(formatter, "match", None))
                and callable(getattr(formatter, "format", None))
            ):
                raise ValueError(
                    f"Invalid formatter: {formatter!r}. Must define match() and format()"
                )
        return formatters


class TraceSettings(BaseSettings):
    """Logger settings loaded from the environment.

    Every field maps to a ``WIRETRACE_`` prefixed environment variable, for
    example ``WIRETRACE_COLORS=true`` or ``WIRETRACE_MAX_RESPONSE_BODY=1024``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WIRETRACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    time: bool = False
    tls: bool = True
    request_header: bool = True
    request_body: bool = True
    response_header: bool = True
    response_body: bool = True
    skip_request_info: bool = False
    colors: bool = False
    skip_sanitize: bool = False
    max_request_body: int = DEFAULT_MAX_BODY
    max_response_body: int = DEFAULT_MAX_BODY
    skip_headers: list[str] = Field(default_factory=list)
    json_indent: int = Field(default=4, ge=0)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        upper_v = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    def to_config(self, **overrides: Any) -> LoggerConfig:
        """Build a LoggerConfig from these settings."""
        values: dict[str, Any] = self.model_dump(exclude={"json_indent", "log_level"})
        values["formatters"] = (JSONFormatter(indent=self.json_indent),)
        values.update(overrides)
        return LoggerConfig(**values)


def load_settings(**overrides: Any) -> TraceSettings:
    """Load settings from the environment, applying explicit overrides.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    try:
        return TraceSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid wiretrace settings: {e}", details={"errors": e.errors()}
        ) from e
