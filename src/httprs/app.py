"""Typer application and CLI entry point for httprs.

One command does everything::

    httprs <method> <url> [REQUEST_ITEM]... [OPTIONS]

The command resolves the output configuration once, classifies the
request items, assembles and encodes the request (all pre-flight, so a
bad item or missing file never produces a partial request), sends it, and
then either renders the response or downloads its body.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and turns unexpected
exceptions into a clean error message.

See Also:
    :mod:`httprs.output`: Output formatting initialised in :func:`request_command`.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from httprs import __version__
from httprs.exceptions import HttprsError, InvalidUsageError, TransportError
from httprs.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE
from httprs.models import RenderMode

app = typer.Typer(
    name="httprs",
    help="A friendly command-line HTTP client.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

_EPILOG = """\
[bold]Request items[/bold]: [cyan]Header:Value[/cyan]  [cyan]key==query[/cyan]  \
[cyan]field=value[/cyan]  [cyan]field@path/to/file[/cyan]

[bold]Examples[/bold]:
  httprs get https://httpbin.org/get page==2
  httprs post https://httpbin.org/post name=alice age=30
  httprs get https://api.github.com/user -a ghp_token
  httprs post https://httpbin.org/post photo@./image.jpg
  httprs get https://example.com/file.zip -d
"""


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"httprs {__version__}")
        raise typer.Exit()


def resolve_render_mode(headers_only: bool, body_only: bool) -> RenderMode:
    """Map ``--headers`` / ``--body`` to a :class:`RenderMode`.

    Raises:
        InvalidUsageError: If both flags are given.
    """
    if headers_only and body_only:
        raise InvalidUsageError("--headers and --body are mutually exclusive")
    if headers_only:
        return RenderMode.HEADERS_ONLY
    if body_only:
        return RenderMode.BODY_ONLY
    return RenderMode.FULL


@app.command(epilog=_EPILOG)
def request_command(
    method: str = typer.Argument(
        ..., help="HTTP method: get, post, put, patch, delete, head, options."
    ),
    url: str = typer.Argument(..., help="Target URL (http:// or https://)."),
    items: Optional[list[str]] = typer.Argument(
        None,
        metavar="[REQUEST_ITEM]...",
        help="Header:Value, key==query, field=value or field@file.",
        show_default=False,
    ),
    auth: Optional[str] = typer.Option(
        None, "--auth", "-a", help="user:password (Basic) or a bearer token."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Echo the request and print timing."
    ),
    download_flag: bool = typer.Option(
        False, "--download", "-d", help="Save the response body to a file."
    ),
    output_path: Optional[str] = typer.Option(
        None, "--output", "-o", help="Download target path (implies --download)."
    ),
    follow: bool = typer.Option(
        False, "--follow", "-F", help="Follow redirects."
    ),
    max_redirects: int = typer.Option(
        10, "--max-redirects", help="Maximum redirects to follow."
    ),
    timeout: float = typer.Option(
        30.0, "--timeout", help="Request timeout in seconds."
    ),
    headers_only: bool = typer.Option(
        False, "--headers", help="Print only the status line and headers."
    ),
    body_only: bool = typer.Option(
        False, "--body", help="Print only the response body."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Send an HTTP request and display the response.

    Exits 0 whenever a response is received, whatever its status code.
    Local problems (bad item, missing upload file, conflicting flags) are
    reported before anything is sent.

    Args:
        method: HTTP method name, case-insensitive.
        url: Absolute target URL.
        items: Request items in command-line order.
        auth: ``-a`` credential.
        verbose: Echo the outgoing request and a timing summary on stderr.
        download_flag: Stream the body to a file instead of rendering it.
        output_path: Explicit download destination.
        follow: Follow redirects.
        max_redirects: Redirect cap when following.
        timeout: Request timeout in seconds.
        headers_only: Render mode ``HEADERS_ONLY``.
        body_only: Render mode ``BODY_ONLY``.
        no_color: Disable colour.
        version: If ``True``, print the version string and exit.
    """
    from httprs.output import OutputManager, configure_logging, set_output

    output = OutputManager(no_color=no_color, verbose=verbose)
    set_output(output)
    configure_logging(verbose)

    try:
        _run(
            method=method,
            url=url,
            tokens=items or [],
            auth=auth,
            verbose=verbose,
            download_to=output_path,
            downloading=download_flag or output_path is not None,
            follow=follow,
            max_redirects=max_redirects,
            timeout=timeout,
            mode=resolve_render_mode(headers_only, body_only),
        )
    except HttprsError as exc:
        report_error(exc)
        raise typer.Exit(code=exc.exit_code) from None


# Seam for swapping the httpx transport (e.g. a MockTransport).
def _make_transport(descriptor: Any) -> Any:  # noqa: ANN401
    from httprs.client import Transport

    return Transport(descriptor)


def _run(
    method: str,
    url: str,
    tokens: list[str],
    auth: Optional[str],
    verbose: bool,
    download_to: Optional[str],
    downloading: bool,
    follow: bool,
    max_redirects: int,
    timeout: float,
    mode: RenderMode,
) -> None:
    """Pre-flight, send, then render or download."""
    from httprs.assembler import assemble_request
    from httprs.body import encode_body
    from httprs.download import RichProgressReporter, download, resolve_download_path
    from httprs.items import parse_items
    from httprs.models import DownloadTarget
    from httprs.output import debug, get_output
    from httprs.renderer import ResponseRenderer
    from httprs.timing import RequestTimer

    output = get_output()

    # Pre-flight: nothing below touches the network until transport.send().
    parsed = parse_items(tokens)
    descriptor = assemble_request(
        method,
        url,
        parsed,
        auth=auth,
        timeout=timeout,
        follow_redirects=follow,
        max_redirects=max_redirects,
    )
    debug(f"Body encoding: {descriptor.body_kind.value}")

    renderer = ResponseRenderer(output)
    timer = RequestTimer.start() if verbose else None
    # Downloads are written as sent; no transparent decompression.
    extra_headers = {"Accept-Encoding": "identity"} if downloading else None

    with encode_body(descriptor.json_fields, descriptor.file_fields) as body:
        with _make_transport(descriptor) as transport:
            request = transport.build_request(body, extra_headers)
            if verbose:
                renderer.render_request(request, descriptor, body)
            view = transport.send(body, request=request, timer=timer)

            if downloading:
                target = DownloadTarget(path=resolve_download_path(download_to, view, url))
                debug(f"Downloading to {target.path}")
                download(view, target, RichProgressReporter(output.stderr_console))
            else:
                renderer.render(view, mode)

    if timer is not None:
        timer.finish()
        timer.print_summary()


def report_error(exc: HttprsError) -> None:
    """Print *exc* to stderr with a hint for common transport failures."""
    from httprs.output import error, suggest

    error(str(exc))
    if not isinstance(exc, TransportError):
        return

    message = str(exc).lower()
    if "name or service not known" in message or "nodename nor servname" in message or "getaddrinfo" in message:
        suggest("Check that the host name is spelled correctly and that you are online")
    elif "timed out" in message:
        suggest("Increase the timeout with --timeout <seconds> or check that the server is responsive")
    elif "connection refused" in message:
        suggest("Check that the server is running and listening on that port")
    elif "redirects" in message:
        suggest("Raise the limit with --max-redirects <n>")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``httprs`` console script.

    :class:`~httprs.exceptions.HttprsError` instances are handled inside
    :func:`request_command`; anything else escaping the command produces
    a generic failure exit.

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
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from httprs.output import error

        if isinstance(exc, HttprsError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
