"""Response rendering -- status line, headers and highlighted body.

:class:`ResponseRenderer` writes a :class:`~httprs.client.response.ResponseView`
to stdout according to a :class:`~httprs.models.RenderMode`, and under
``--verbose`` echoes the outgoing request to stderr first.

Body handling depends on the :class:`~httprs.models.RenderConfig` resolved
at startup:

* **pretty** (stdout is a terminal) -- JSON is re-indented in received key
  order and highlighted, HTML is highlighted as markup, other text is
  printed as is and binary bodies are summarised.
* **not pretty** (piped or redirected) -- the body bytes are written
  unmodified, with no colour codes anywhere in the stream.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import httpx
from rich.markup import escape
from rich.syntax import Syntax
from rich.text import Text

from httprs.auth import AUTHORIZATION, mask_credential
from httprs.body import EncodedBody
from httprs.client.response import ResponseView
from httprs.models import BodyKind, RenderMode, RequestDescriptor
from httprs.output import OutputManager, get_output

SYNTAX_THEME = "monokai"

_TEXT_TYPES = (
    "text/",
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-www-form-urlencoded",
)


def is_json_type(content_type: str) -> bool:
    """``application/json`` and structured-syntax ``+json`` types."""
    return content_type == "application/json" or content_type.endswith("+json")


def is_html_type(content_type: str) -> bool:
    return content_type in ("text/html", "application/xhtml+xml")


def is_binary(content: bytes, content_type: str) -> bool:
    """Heuristic: a NUL byte, or a declared type that is clearly not text."""
    if b"\0" in content:
        return True
    if not content_type or is_json_type(content_type) or content_type.endswith("+xml"):
        return False
    return not content_type.startswith(_TEXT_TYPES)


def pretty_json(text: str) -> Optional[str]:
    """Re-indent a JSON document keeping key order; ``None`` if it does not parse."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return json.dumps(data, indent=2, ensure_ascii=False)


def _status_style(status_code: int) -> str:
    if status_code < 200:
        return "cyan"
    if status_code < 300:
        return "green"
    if status_code < 400:
        return "yellow"
    if status_code < 500:
        return "red"
    return "bold red"


class ResponseRenderer:
    """Writes responses (and the verbose request echo) to the terminal.

    Args:
        output: Output manager to write through; defaults to the global one.
    """

    def __init__(self, output: Optional[OutputManager] = None) -> None:
        self._output = output or get_output()
        self._config = self._output.config

    # ------------------------------------------------------------------ #
    # Response
    # ------------------------------------------------------------------ #

    def render(self, view: ResponseView, mode: RenderMode = RenderMode.FULL) -> None:
        """Render *view* according to *mode* and release the connection.

        ``HEADERS_ONLY`` never reads the body; ``BODY_ONLY`` never prints
        the status line or headers.
        """
        try:
            if mode in (RenderMode.FULL, RenderMode.HEADERS_ONLY):
                self.render_head(view)
            if mode in (RenderMode.FULL, RenderMode.BODY_ONLY):
                if mode is RenderMode.FULL:
                    self._output.print_data("")
                self.render_body(view)
        finally:
            view.close()

    def render_head(self, view: ResponseView) -> None:
        """Print the status line followed by every header, in received order."""
        if self._config.color:
            status = Text()
            status.append(f"{view.http_version} ", style="bold dim")
            status.append(str(view.status_code), style=f"bold {_status_style(view.status_code)}")
            if view.reason:
                status.append(f" {view.reason}", style=_status_style(view.status_code))
            self._output.print_data(status)
            for name, value in view.headers:
                line = Text()
                line.append(name, style="cyan")
                line.append(": ", style="dim")
                line.append(value)
                self._output.print_data(line)
        else:
            self._output.print_data(view.status_line)
            for name, value in view.headers:
                self._output.print_data(f"{name}: {value}")

    def render_body(self, view: ResponseView) -> None:
        """Print the body, pretty on a terminal and byte-exact otherwise."""
        content = view.read()
        if not self._config.pretty:
            self._output.write_bytes(content)
            return
        if not content:
            return

        content_type = view.content_type
        if is_binary(content, content_type):
            self._output.print_data(f"[binary data not shown: {len(content)} bytes]")
            return

        text = content.decode(view.encoding, errors="replace")
        if is_json_type(content_type):
            formatted = pretty_json(text)
            if formatted is not None:
                self._print_code(formatted, "json")
                return
        elif is_html_type(content_type):
            self._print_code(text, "html")
            return
        self._output.print_data(text.rstrip("\n"))

    def _print_code(self, code: str, lexer: str) -> None:
        if self._config.color:
            self._output.print_data(Syntax(code, lexer, theme=SYNTAX_THEME, word_wrap=True))
        else:
            self._output.print_data(code.rstrip("\n"))

    # ------------------------------------------------------------------ #
    # Verbose request echo (stderr)
    # ------------------------------------------------------------------ #

    def render_request(
        self,
        request: httpx.Request,
        descriptor: RequestDescriptor,
        body: EncodedBody,
    ) -> None:
        """Echo the outgoing request line, headers, files and body to stderr.

        Long ``Authorization`` values are shortened; file contents are
        never printed, only the field name and file name.
        """
        echo = self._output.echo
        url = urlsplit(str(request.url))
        target = url.path or "/"
        if url.query:
            target = f"{target}?{url.query}"

        echo(f"[bold cyan]>[/bold cyan] [cyan]{request.method} {escape(target)}[/cyan]")
        for name, value in request.headers.multi_items():
            if name.lower() == AUTHORIZATION.lower():
                value = mask_credential(value)
            echo(f"[bold cyan]>[/bold cyan] [cyan]{escape(name)}[/cyan]: {escape(value)}")

        if descriptor.file_fields:
            echo("[bold cyan]>[/bold cyan]")
            echo("[bold cyan]>[/bold cyan] [yellow]Files:[/yellow]")
            for item in descriptor.file_fields:
                echo(f"[bold cyan]>[/bold cyan] [cyan]{escape(item.key)}[/cyan] @ {escape(Path(item.path).name)}")
        if body.kind is BodyKind.MULTIPART and descriptor.json_fields:
            echo("[bold cyan]>[/bold cyan] [yellow]Fields:[/yellow]")
            for item in descriptor.json_fields:
                echo(f"[bold cyan]>[/bold cyan] [cyan]{escape(item.key)}[/cyan] = {escape(item.value)}")

        echo("[bold cyan]>[/bold cyan]")
        if body.text:
            for line in body.text.splitlines():
                echo(f"[bold cyan]>[/bold cyan] [cyan]{escape(line)}[/cyan]")
        echo("")
