"""Typer application and CLI entry point for routekit.

The ``routekit`` console script sends one route to a full URL and prints
the outcome, which makes it handy for checking how a route is encoded and
how the default validation judges the response::

    routekit -v request https://httpbin.org/post -X POST -p name=ada -H "X-Trace: 1"

The status line and diagnostics go to stderr; the response body goes to
stdout (or to ``--output``). Failures exit with the ``exit_code`` of the
:class:`~routekit.exceptions.RoutekitError` the request completed with.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import httpx
import typer

from routekit import __version__
from routekit.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE


app = typer.Typer(
    name="routekit",
    help="Send declarative HTTP routes and inspect the results.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"routekit {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~routekit.output.OutputManager` from
    CLI flags.
    """
    from routekit.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@app.command("request")
def request_command(
    url: str = typer.Argument(..., help="Absolute http(s) URL to send the route to."),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-p", help="Route parameter as key=value. Repeatable."
    ),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Header as 'Name: value'. Repeatable."
    ),
    encoding: Optional[str] = typer.Option(
        None, "--encoding", help="Parameter encoding: url, json or form."
    ),
    wait: float = typer.Option(
        60.0, "--wait", help="Seconds to wait for the response."
    ),
) -> None:
    """Send one route to URL and print the response body.

    Parameters are encoded the way a provider would encode them: in the
    query string for GET-like methods, as JSON for POST and PUT, unless
    ``--encoding`` says otherwise.

    Example::

        routekit request https://api.example.com/users -p page=2
        routekit request https://api.example.com/users -X POST -p name=ada --encoding form
    """
    from routekit.config import load_transport_config
    from routekit.exceptions import RoutekitError
    from routekit.models import HTTPMethod, ParameterEncoding, Route
    from routekit.output import debug, error
    from routekit.provider import DefaultProvider
    from routekit.session import Session

    try:
        route = Route(
            path=url,
            method=HTTPMethod(method.upper()),
            params=_parse_pairs(param or [], "=", "--param"),
            headers=_parse_pairs(header or [], ":", "--header"),
            encoding=ParameterEncoding(encoding) if encoding else None,
        )
    except ValueError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    try:
        config = load_transport_config()
    except RoutekitError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    with Session(config=config) as session:
        request = DefaultProvider.request_url(route, session=session)
        debug(f"Waiting up to {wait}s for {request!r}")
        if not request.wait(wait):
            error(f"No response from {url} within {wait} seconds")
            raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    if request.error is not None:
        error(str(request.error))
        raise typer.Exit(code=request.error.exit_code)

    assert request.response is not None
    _print_response(request.response)


def _parse_pairs(items: list[str], separator: str, option: str) -> dict[str, str]:
    """Split ``key<separator>value`` strings into a dict.

    Raises:
        ValueError: If an item has no separator or an empty key.
    """
    pairs: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition(separator)
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid {option} value {item!r}: expected key{separator}value")
        pairs[key] = value.strip() if separator == ":" else value
    return pairs


def _print_response(response: httpx.Response) -> None:
    """Write the status line to stderr and the decoded body to stdout."""
    from routekit.output import get_output

    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())

    data = _response_data(response)
    if data is not None:
        output.format_response(data)


def _response_data(response: httpx.Response) -> Any:  # noqa: ANN401
    """Return the JSON-decoded body, the raw text, or ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``routekit`` console script.

    Unhandled :class:`~routekit.exceptions.RoutekitError` instances cause a
    clean exit with the error's ``exit_code``; any other exception is
    reported and exits with a generic failure.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from routekit.exceptions import RoutekitError
        from routekit.output import error

        if isinstance(exc, RoutekitError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {type(exc).__name__}: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
