"""Output system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- the response only (status line, headers, body). This is
  what downstream tools pipe and parse.
* **stderr** -- all diagnostics (verbose request echo, progress, timing,
  warnings, errors). Never contaminates the data stream.
* **TTY detection** -- pretty, highlighted output when stdout is an
  interactive terminal; byte-exact output when piped.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- holds the resolved
   :class:`~httprs.models.RenderConfig` and the two Rich consoles. Created
   once in :func:`~httprs.app.request_command` and installed via
   :func:`set_output`; the TTY and colour decision is never revisited
   afterwards.
2. Module-level convenience functions (:func:`warning`, :func:`error`,
   :func:`debug`, etc.) that delegate to the global ``OutputManager``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from httprs.models import RenderConfig


class OutputManager:
    """Central manager for all CLI output with stdout/stderr discipline.

    Maintains two Rich :class:`~rich.console.Console` instances -- one for
    stdout (response data) and one for stderr (diagnostics).

    Args:
        no_color: Disable all colour and Rich markup.
        verbose: Enable debug-level messages and the request echo.
        pretty: Force (``True``) or forbid (``False``) pretty output;
            ``None`` picks it from TTY detection.
        stdout: Data stream, defaults to :data:`sys.stdout`.
        stderr: Diagnostics stream, defaults to :data:`sys.stderr`.
    """

    def __init__(
        self,
        no_color: bool = False,
        verbose: bool = False,
        pretty: Optional[bool] = None,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ) -> None:
        self._out = stdout or sys.stdout
        self._err = stderr or sys.stderr
        self._no_color = no_color or _should_disable_color()
        self._verbose = verbose

        is_pretty = _is_tty(self._out) if pretty is None else pretty
        self._config = RenderConfig(
            pretty=is_pretty,
            color=is_pretty and not self._no_color,
            verbose=verbose,
        )

        # Console for stdout (data output)
        self._stdout = Console(
            file=self._out,
            no_color=not self._config.color,
            force_terminal=self._config.color,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )

        # Console for stderr (diagnostics)
        self._stderr = Console(
            file=self._err,
            no_color=self._no_color,
            stderr=True,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )

    @property
    def config(self) -> RenderConfig:
        """The render configuration resolved at construction."""
        return self._config

    @property
    def stderr_console(self) -> Console:
        """Rich console bound to the diagnostics stream."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, renderable: Any = "") -> None:  # noqa: ANN401
        """Print text or a Rich renderable to stdout.

        Strings are printed without markup interpretation so that response
        text containing ``[brackets]`` is never mangled.
        """
        self._stdout.print(renderable, markup=False)

    def write_bytes(self, data: bytes) -> None:
        """Write raw bytes to stdout, unmodified.

        Used for bodies when output is not pretty, so piped output is a
        byte-exact copy of what the server sent.
        """
        self._stdout.file.flush()
        buffer = getattr(self._out, "buffer", None)
        if buffer is not None:
            buffer.write(data)
            buffer.flush()
        else:
            self._out.write(data.decode("utf-8", errors="replace"))
            self._out.flush()

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def echo(self, message: str) -> None:
        """Print a Rich-markup line to stderr.

        Used for output the user explicitly asked for, such as the
        ``--verbose`` request echo and timing summary.
        """
        self._stderr.print(message)

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr."""
        if self._no_color:
            print(f"Warning: {message}", file=self._err, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr."""
        if self._no_color:
            print(f"Error: {message}", file=self._err, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def suggest(self, message: str) -> None:
        """Print a dimmed next-step suggestion to stderr."""
        formatted = f"→ {message}"
        if self._no_color:
            print(formatted, file=self._err, flush=True)
        else:
            self._stderr.print(f"[dim]{escape(formatted)}[/dim]")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``verbose`` is active."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=self._err, flush=True)
            else:
                self._stderr.print(f"[dim]\\[debug] {message}[/dim]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty(stream: Optional[IO[str]] = None) -> bool:
    """Check if *stream* (default stdout) is a TTY."""
    stream = stream or sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


def configure_logging(verbose: bool = False) -> None:
    """Route the ``httprs`` logger to stderr through Rich.

    Only warnings are shown by default; ``--verbose`` lowers the level to
    ``DEBUG``.
    """
    logger = logging.getLogger("httprs")
    logger.handlers.clear()
    handler = RichHandler(
        console=get_output().stderr_console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager` instance.

    If no instance has been installed via :func:`set_output`, a default
    ``OutputManager`` is created lazily.
    """
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def suggest(message: str) -> None:
    """Print next-step suggestion to stderr via the global OutputManager."""
    get_output().suggest(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
