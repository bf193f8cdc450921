"""Send one HTTP request and print its trace."""

from typing import Annotated, Any

import httpx
import typer
from rich.console import Console
from rich.markup import escape
from structlog import get_logger

from wiretrace import __version__
from wiretrace.config import load_settings
from wiretrace.exceptions import ConfigurationError
from wiretrace.logger import Logger
from wiretrace.utils.logging import setup_logging


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=False,
)

logger = get_logger(__name__)
error_console = Console(stderr=True)


def create_transport() -> httpx.BaseTransport:
    """Transport the traced client sends requests through."""
    return httpx.HTTPTransport()


def parse_header(value: str) -> tuple[str, str]:
    """Parse a ``Key: value`` command line header."""
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        raise typer.BadParameter(f"Invalid header: {value!r}. Expected 'Key: value'")
    return name.strip(), header_value.strip()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"wiretrace {__version__}")
        raise typer.Exit()


@app.command()
def main(
    method: Annotated[str, typer.Argument(help="HTTP method, e.g. GET or POST")],
    url: Annotated[str, typer.Argument(help="URL to request")],
    header: Annotated[
        list[str] | None,
        typer.Option("--header", "-H", help="Request header as 'Key: value'"),
    ] = None,
    data: Annotated[
        str | None, typer.Option("--data", "-d", help="Request body")
    ] = None,
    colors: Annotated[
        bool | None,
        typer.Option("--colors/--no-colors", help="Colorize the trace"),
    ] = None,
    request_body: Annotated[
        bool, typer.Option("--request-body/--no-request-body", help="Print the request body")
    ] = True,
    response_body: Annotated[
        bool,
        typer.Option("--response-body/--no-response-body", help="Print the response body"),
    ] = True,
    json_indent: Annotated[
        int | None, typer.Option("--json-indent", min=0, help="Indent of JSON bodies")
    ] = None,
    follow_redirects: Annotated[
        bool, typer.Option("--follow-redirects/--no-follow-redirects", "-L")
    ] = False,
    timeout: Annotated[float, typer.Option("--timeout", help="Timeout in seconds")] = 30.0,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Level of wiretrace's own logs")
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Send a request and print the request/response trace to stderr.

    Defaults come from WIRETRACE_* environment variables.
    """
    updates: dict[str, Any] = {}
    if json_indent is not None:
        updates["json_indent"] = json_indent
    if log_level is not None:
        updates["log_level"] = log_level
    try:
        settings = load_settings(**updates)
    except ConfigurationError as e:
        error_console.print(f"[bold red]Configuration error:[/bold red] {escape(e.message)}")
        raise typer.Exit(2) from e

    setup_logging(settings.log_level)

    overrides: dict[str, bool] = {
        "request_body": request_body and settings.request_body,
        "response_body": response_body and settings.response_body,
    }
    if colors is not None:
        overrides["colors"] = colors
    trace = Logger.from_settings(settings, **overrides)

    headers = [parse_header(value) for value in header or []]
    logger.debug("cli_request", method=method.upper(), url=url, category="cli")

    with httpx.Client(
        transport=trace.transport(create_transport()),
        follow_redirects=follow_redirects,
        timeout=timeout,
    ) as client:
        try:
            client.request(method.upper(), url, headers=headers, content=data)
        except httpx.HTTPError as e:
            error_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
