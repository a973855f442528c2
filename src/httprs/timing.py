"""Request timing for ``--verbose`` output.

:class:`RequestTimer` records the elapsed time until the response headers
arrive (time to first byte) and until the body has been fully consumed.
"""

from __future__ import annotations

import time
from typing import Optional

from httprs.output import get_output


class RequestTimer:
    """Wall-clock timer for a single request/response cycle."""

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self.first_byte: Optional[float] = None
        self.total: Optional[float] = None

    @classmethod
    def start(cls) -> RequestTimer:
        return cls()

    def record_first_byte(self) -> None:
        self.first_byte = time.perf_counter() - self._start

    def finish(self) -> None:
        self.total = time.perf_counter() - self._start

    def print_summary(self) -> None:
        """Print the timing summary to stderr (no-op until :meth:`finish`)."""
        if self.total is None:
            return
        output = get_output()
        output.echo("")
        output.echo("[bold cyan]Timing Summary[/bold cyan]")
        output.echo("[dim]" + "─" * 50 + "[/dim]")
        if self.first_byte is not None:
            output.echo(f"  [dim]Time to First Byte:[/dim] [yellow]{format_duration(self.first_byte)}[/yellow]")
            output.echo(
                f"  [dim]Download Time:     [/dim] "
                f"[yellow]{format_duration(self.total - self.first_byte)}[/yellow]"
            )
        output.echo(f"  [bold]Total Time:        [/bold] [bold green]{format_duration(self.total)}[/bold green]")
        output.echo("")
        output.echo(f"  {performance_hint(self.total)}")


def performance_hint(seconds: float) -> str:
    """Qualitative verdict on a total response time."""
    ms = seconds * 1000.0
    if ms < 100:
        return "[green]Excellent response time[/green]"
    if ms < 500:
        return "[yellow]Good response time[/yellow]"
    if ms < 1000:
        return "[yellow]Slow response[/yellow]"
    return "[red]Very slow response[/red]"


def format_duration(seconds: float) -> str:
    """Render a duration as µs, ms or s with two decimals."""
    ms = seconds * 1000.0
    if ms < 1.0:
        return f"{ms * 1000.0:.2f} µs"
    if ms < 1000.0:
        return f"{ms:.2f} ms"
    return f"{ms / 1000.0:.2f} s"
