"""Response view -- the transport-neutral shape of a received response.

:class:`ResponseView` wraps a *streamed* :class:`httpx.Response`: headers
are available immediately, while the body is pulled either all at once by
the renderer (:meth:`ResponseView.read`) or chunk by chunk by the download
manager (:meth:`ResponseView.iter_bytes`). It is consumed exactly once.
"""

from __future__ import annotations

from typing import Iterator, Optional

import httpx

from httprs.exceptions import TransportError


class ResponseView:
    """Status, headers and streamed body of one HTTP response.

    Args:
        response: A response obtained with ``stream=True``.
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self._consumed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason(self) -> str:
        return self._response.reason_phrase or ""

    @property
    def http_version(self) -> str:
        return self._response.http_version or "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """E.g. ``HTTP/1.1 200 OK``."""
        return f"{self.http_version} {self.status_code} {self.reason}".rstrip()

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Response headers in received order and case, duplicates included."""
        encoding = self._response.headers.encoding
        return [
            (name.decode(encoding), value.decode(encoding))
            for name, value in self._response.headers.raw
        ]

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive lookup of a single header value."""
        return self._response.headers.get(name)

    @property
    def content_type(self) -> str:
        """The media type without parameters, lower-cased (``""`` when absent)."""
        value = self._response.headers.get("content-type", "")
        return value.split(";", 1)[0].strip().lower()

    @property
    def content_length(self) -> Optional[int]:
        """``Content-Length`` as an integer, or ``None`` when absent or invalid."""
        value = self._response.headers.get("content-length")
        if value is None:
            return None
        try:
            length = int(value)
        except ValueError:
            return None
        return length if length >= 0 else None

    @property
    def encoding(self) -> str:
        """Charset used to decode the body as text."""
        return self._response.encoding or "utf-8"

    @property
    def url(self) -> str:
        """Final URL (after redirects)."""
        return str(self._response.url)

    def _claim(self) -> None:
        if self._consumed:
            raise RuntimeError("Response body has already been consumed")
        self._consumed = True

    def read(self) -> bytes:
        """Read and return the whole (decoded) body.

        Raises:
            TransportError: If the connection fails mid-body.
        """
        self._claim()
        try:
            return self._response.read()
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed reading response body: {exc}", exc) from exc

    def iter_bytes(self, chunk_size: Optional[int] = None) -> Iterator[bytes]:
        """Stream the (decoded) body chunk by chunk.

        Network errors surface as :class:`httpx.HTTPError`; the download
        manager reports them as ``TransportError``.
        """
        self._claim()
        yield from self._response.iter_bytes(chunk_size)

    def close(self) -> None:
        """Release the underlying connection."""
        self._response.close()
