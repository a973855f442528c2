"""Download manager -- streams a response body to a file with progress.

Activated by ``-d``/``--download`` or ``-o``/``--output``. The body is
never rendered in this mode; it is copied chunk by chunk to the target
while a :class:`ProgressReporter` is told about every chunk.

Target resolution (:func:`resolve_download_path`), first match wins:

1. the explicit ``-o`` path
2. the ``filename*=`` / ``filename=`` parameter of ``Content-Disposition``
3. the last non-empty path segment of the request URL
4. :data:`DEFAULT_FILENAME`

On failure the partial file is left where it is.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

import httpx
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from httprs.client.response import ResponseView
from httprs.exceptions import DownloadError, TransportError
from httprs.models import DownloadTarget

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "index.html"
CHUNK_SIZE = 64 * 1024


# ------------------------------------------------------------------ #
# Filename resolution
# ------------------------------------------------------------------ #


def _safe_name(name: str) -> Optional[str]:
    name = Path(name.replace("\\", "/")).name.strip()
    if not name or name in (".", ".."):
        return None
    return name


def filename_from_url(url: str) -> str:
    """Last non-empty path segment of *url*, or :data:`DEFAULT_FILENAME`.

    Query strings and fragments are ignored; ``https://host/path/`` gives
    ``path``.
    """
    segments = [s for s in urlsplit(url).path.split("/") if s]
    if segments:
        name = _safe_name(unquote(segments[-1]))
        if name:
            return name
    return DEFAULT_FILENAME


def filename_from_content_disposition(value: Optional[str]) -> Optional[str]:
    """Extract a safe file name from a ``Content-Disposition`` header value.

    ``filename*=`` (:rfc:`5987`, e.g. ``UTF-8''na%C3%AFve.txt``) takes
    precedence over ``filename=``. Directory components are dropped.
    """
    if not value:
        return None

    plain: Optional[str] = None
    extended: Optional[str] = None
    for part in value.split(";"):
        key, sep, raw = part.strip().partition("=")
        if not sep:
            continue
        key = key.strip().lower()
        raw = raw.strip()
        if key == "filename*":
            _, quoted, encoded = raw.rpartition("''")
            extended = unquote(encoded if quoted else raw).strip("\"'")
        elif key == "filename":
            plain = raw.strip("\"'")

    for candidate in (extended, plain):
        if candidate:
            name = _safe_name(candidate)
            if name:
                return name
    return None


def resolve_download_path(explicit: Optional[str], view: ResponseView, url: str) -> Path:
    """Pick the download destination for *view*."""
    if explicit:
        return Path(explicit).expanduser()
    from_header = filename_from_content_disposition(view.header("content-disposition"))
    if from_header:
        return Path(from_header)
    return Path(filename_from_url(url))


# ------------------------------------------------------------------ #
# Progress reporting
# ------------------------------------------------------------------ #


class ProgressReporter:
    """Receives download progress. The base class ignores every event."""

    def start(self, target: DownloadTarget) -> None:
        pass

    def update(self, target: DownloadTarget) -> None:
        pass

    def finish(self, target: DownloadTarget, completed: bool) -> None:
        pass


class RichProgressReporter(ProgressReporter):
    """Rich progress bar on stderr.

    Shows a percentage bar, transfer speed and ETA when the total size is
    known; otherwise a pulsing bar with the running byte total.
    """

    def __init__(self, console: Console) -> None:
        self._console = console
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def start(self, target: DownloadTarget) -> None:
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self._console,
            transient=False,
        )
        self._progress.start()
        self._task = self._progress.add_task(
            f"Downloading {target.path.name}", total=target.total_bytes
        )

    def update(self, target: DownloadTarget) -> None:
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, completed=target.bytes_received)

    def finish(self, target: DownloadTarget, completed: bool) -> None:
        if self._progress is None:
            return
        if completed and self._task is not None:
            self._progress.update(
                self._task,
                completed=target.bytes_received,
                total=target.total_bytes or target.bytes_received,
            )
        self._progress.stop()
        self._progress = None
        if completed:
            self._console.print(f"[green]Downloaded[/green] {target.path} ({target.bytes_received} bytes)")


# ------------------------------------------------------------------ #
# Download
# ------------------------------------------------------------------ #


def download(
    view: ResponseView,
    target: DownloadTarget,
    reporter: Optional[ProgressReporter] = None,
    chunk_size: int = CHUNK_SIZE,
) -> DownloadTarget:
    """Copy the body of *view* into ``target.path``.

    ``target.total_bytes`` is taken from ``Content-Length`` when the
    response carries one.

    Args:
        view: The response; consumed and closed by this call.
        target: Destination and byte counter, updated in place.
        reporter: Progress sink; defaults to a silent :class:`ProgressReporter`.
        chunk_size: Read size for the body stream.

    Returns:
        The updated *target*.

    Raises:
        DownloadError: If the file cannot be created or written. Any
            partial file is left on disk.
        TransportError: If the connection fails or times out mid-body.
    """
    reporter = reporter or ProgressReporter()
    target.total_bytes = view.content_length
    path = str(target.path)
    completed = False

    reporter.start(target)
    try:
        try:
            handle = target.path.open("wb")
        except OSError as exc:
            raise DownloadError(path, exc) from exc

        with handle:
            for chunk in view.iter_bytes(chunk_size):
                try:
                    handle.write(chunk)
                except OSError as exc:
                    raise DownloadError(path, exc) from exc
                target.bytes_received += len(chunk)
                reporter.update(target)
        completed = True
    except httpx.HTTPError as exc:
        raise TransportError(f"Download of '{path}' interrupted: {exc}", exc) from exc
    finally:
        reporter.finish(target, completed)
        view.close()

    logger.debug("Wrote %d bytes to %s", target.bytes_received, path)
    return target
