"""Rich logging configuration for wiretrace diagnostics.

The HTTP trace itself is written straight to the logger's sink; this module
only configures where wiretrace's own structlog events go.
"""

import logging

import structlog
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme


# Custom theme for the logger
CUSTOM_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "critical": "bold white on red",
        "debug": "dim white",
        "timestamp": "dim cyan",
        "path": "dim blue",
    }
)


def setup_logging(
    level: str = "WARNING",
    show_path: bool = False,
    show_time: bool = True,
    console_width: int | None = None,
) -> None:
    """Configure stdlib logging with rich and route structlog through it.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        show_path: Whether to show the module path in logs
        show_time: Whether to show timestamps in logs
        console_width: Optional console width override
    """
    rich_handler = RichHandler(
        console=Console(theme=CUSTOM_THEME, width=console_width, stderr=True),
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
            foreign_pre_chain=[structlog.stdlib.add_logger_name],
        )
    )

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[rich_handler],
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Quiet noisy loggers
    for logger_name in ["httpx", "httpcore"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
