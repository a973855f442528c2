"""Shared test fixtures for httprs.

Provides reusable fixtures for creating upload files, capturing output
through an isolated OutputManager, building streamed responses, and
running the CLI. These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from httprs.client.response import ResponseView
from httprs.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _clean_color_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's NO_COLOR / TERM from leaking into tests."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


@pytest.fixture
def upload_file(tmp_path: Path) -> Path:
    """A small JPEG-named file to attach with ``key@path``."""
    path = tmp_path / "img.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return path


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    """A plain-text file to attach with ``key@path``."""
    path = tmp_path / "notes.txt"
    path.write_text("hello from a file\n")
    return path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


class CapturedOutput:
    """An OutputManager writing to in-memory streams."""

    def __init__(self, pretty: bool, no_color: bool, verbose: bool) -> None:
        self.out_bytes = io.BytesIO()
        self.stdout = io.TextIOWrapper(self.out_bytes, encoding="utf-8", write_through=True)
        self.stderr = io.StringIO()
        self.manager = OutputManager(
            no_color=no_color,
            verbose=verbose,
            pretty=pretty,
            stdout=self.stdout,
            stderr=self.stderr,
        )

    @property
    def out(self) -> bytes:
        self.stdout.flush()
        return self.out_bytes.getvalue()

    @property
    def text(self) -> str:
        return self.out.decode("utf-8")

    @property
    def err(self) -> str:
        return self.stderr.getvalue()


@pytest.fixture
def make_output() -> Callable[..., CapturedOutput]:
    """Factory for a captured OutputManager installed as the global output."""

    def _make(pretty: bool = False, no_color: bool = False, verbose: bool = False) -> CapturedOutput:
        captured = CapturedOutput(pretty=pretty, no_color=no_color, verbose=verbose)
        set_output(captured.manager)
        return captured

    return _make


@pytest.fixture
def plain_output(make_output: Callable[..., CapturedOutput]) -> CapturedOutput:
    """Non-pretty (piped) captured output."""
    return make_output(pretty=False)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _build_view(
    content: bytes = b"",
    status_code: int = 200,
    headers: Optional[dict[str, str]] = None,
    url: str = "https://example.com/file.bin",
) -> ResponseView:
    """Build a streamed ResponseView served by an httpx.MockTransport."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, headers=headers or {}, content=content)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    response = client.send(client.build_request("GET", url), stream=True)
    return ResponseView(response)


@pytest.fixture
def make_view() -> Callable[..., ResponseView]:
    """Factory for a streamed ResponseView with the given body and headers."""
    return _build_view


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
