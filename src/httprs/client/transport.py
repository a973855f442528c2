"""Transport adapter -- sends a :class:`RequestDescriptor` with :mod:`httpx`.

This module provides :class:`Transport`, the blocking HTTP client used by
the CLI. It wraps :class:`httpx.Client` and layers on:

- **Redirect policy** -- ``-F`` / ``--max-redirects`` map onto httpx's
  ``follow_redirects`` / ``max_redirects``.
- **Header layering** -- defaults, ``-a`` auth, header items and body
  headers, via :func:`~httprs.assembler.build_headers`.
- **Streaming** -- responses are always opened with ``stream=True`` so a
  download never holds the body in memory.
- **Error mapping** -- every network failure (DNS, connect, TLS, timeout,
  too many redirects, a request body that cannot be replayed) becomes a :class:`~httprs.exceptions.TransportError`.
  There is no retry; HTTP error statuses are *not* errors.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from httprs import __version__
from httprs.assembler import build_headers, build_url
from httprs.body import EncodedBody
from httprs.client.response import ResponseView
from httprs.exceptions import TransportError
from httprs.models import RequestDescriptor
from httprs.timing import RequestTimer

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"User-Agent": f"httprs/{__version__}"}


class Transport:
    """Blocking HTTP transport for one request descriptor.

    Must be used as a context manager so that the underlying connection
    pool is opened and closed.

    Args:
        descriptor: The assembled request; supplies timeout and redirect policy.
        transport: Optional httpx transport override (tests pass an
            :class:`httpx.MockTransport`).

    Example::

        with Transport(descriptor) as transport:
            view = transport.send(encode_body(descriptor.json_fields, descriptor.file_fields))
    """

    def __init__(
        self,
        descriptor: RequestDescriptor,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._descriptor = descriptor
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> Transport:
        policy = self._descriptor.redirects
        self._client = httpx.Client(
            timeout=self._descriptor.timeout,
            follow_redirects=policy.follow,
            max_redirects=policy.max_redirects,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def build_request(
        self,
        body: EncodedBody,
        extra_headers: Optional[dict[str, str]] = None,
    ) -> httpx.Request:
        """Build the exact :class:`httpx.Request` that :meth:`send` will send.

        Args:
            body: The encoded body (possibly empty).
            extra_headers: Defaults layered under the descriptor's own
                headers, e.g. ``Accept-Encoding: identity`` for downloads.
        """
        assert self._client is not None, "Transport not initialised -- use as context manager"

        defaults = {**DEFAULT_HEADERS, **(extra_headers or {})}
        headers = build_headers(self._descriptor, body, defaults)
        return self._client.build_request(
            self._descriptor.method.verb,
            build_url(self._descriptor),
            headers=headers,
            **body.request_kwargs(),
        )

    def send(
        self,
        body: EncodedBody,
        extra_headers: Optional[dict[str, str]] = None,
        request: Optional[httpx.Request] = None,
        timer: Optional[RequestTimer] = None,
    ) -> ResponseView:
        """Send the request and return a streamed :class:`ResponseView`.

        Args:
            body: The encoded body (possibly empty).
            extra_headers: See :meth:`build_request`.
            request: A request previously returned by :meth:`build_request`
                (so a verbose echo and the wire agree); built on demand
                when omitted.
            timer: Optional timer; first byte is recorded when the
                response headers arrive.

        Raises:
            TransportError: On DNS, connect, TLS, timeout, protocol,
                redirect-limit or body-replay failures.
        """
        assert self._client is not None, "Transport not initialised -- use as context manager"

        if request is None:
            request = self.build_request(body, extra_headers)
        logger.debug("Sending %s %s", request.method, request.url)
        try:
            response = self._client.send(request, stream=True)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Request timed out after {self._descriptor.timeout:g}s: {exc}", exc
            ) from exc
        except httpx.TooManyRedirects as exc:
            raise TransportError(
                f"Exceeded {self._descriptor.redirects.max_redirects} redirects: {exc}", exc
            ) from exc
        except httpx.ConnectError as exc:
            raise TransportError(f"Connection failed: {exc}", exc) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request failed: {exc}", exc) from exc
        except httpx.StreamError as exc:
            raise TransportError(f"Could not send the request body: {exc}", exc) from exc
        finally:
            body.close()

        if timer is not None:
            timer.record_first_byte()
        logger.debug("Received %s %s", response.status_code, response.reason_phrase)
        return ResponseView(response)
