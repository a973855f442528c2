"""Request assembly -- folds parsed items and flags into a :class:`RequestDescriptor`.

Items are partitioned by kind, keeping command-line order inside each kind.
The body encoding is fixed here by :func:`~httprs.body.choose_body_kind`;
query items are appended to the URL by :func:`build_url` and headers are
layered by :func:`build_headers` (defaults, then ``-a``, then header items,
then the body's ``Content-Type`` unless a header item already set one).
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union
from urllib.parse import quote, urlsplit, urlunsplit

import httpx

from httprs.auth import apply_auth, resolve_auth
from httprs.body import EncodedBody, choose_body_kind
from httprs.exceptions import AssemblyError
from httprs.models import (
    BodyKind,
    FileFieldItem,
    HeaderItem,
    HTTPMethod,
    JsonFieldItem,
    QueryItem,
    RedirectPolicy,
    RequestDescriptor,
    RequestItem,
)
from httprs.output import warning

logger = logging.getLogger(__name__)

# Methods whose body items are dropped with a warning.
BODYLESS_METHODS = frozenset({HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.OPTIONS})

_ALLOWED_SCHEMES = ("http", "https")


def parse_method(method: Union[str, HTTPMethod]) -> HTTPMethod:
    """Resolve a case-insensitive method name.

    Raises:
        AssemblyError: If *method* is not one of the supported verbs.
    """
    if isinstance(method, HTTPMethod):
        return method
    try:
        return HTTPMethod(method.lower())
    except ValueError:
        allowed = ", ".join(m.value for m in HTTPMethod)
        raise AssemblyError(f"Unsupported method '{method}' (expected one of: {allowed})") from None


def validate_url(url: str) -> str:
    """Check that *url* is an absolute ``http``/``https`` URL.

    Raises:
        AssemblyError: If the scheme is missing or unsupported, or there is no host.
    """
    parts = urlsplit(url)
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.netloc:
        raise AssemblyError(f"Invalid URL '{url}': expected http:// or https:// with a host")
    return url


def assemble_request(
    method: Union[str, HTTPMethod],
    url: str,
    items: Sequence[RequestItem],
    auth: Optional[str] = None,
    timeout: float = 30.0,
    follow_redirects: bool = False,
    max_redirects: int = 10,
) -> RequestDescriptor:
    """Build the immutable request descriptor for one invocation.

    Args:
        method: HTTP method name (any case) or :class:`HTTPMethod`.
        url: Absolute base URL; query items are added at send time.
        items: Parsed items in command-line order.
        auth: Raw ``-a`` credential string.
        timeout: Request timeout in seconds.
        follow_redirects: Whether to follow 3xx responses.
        max_redirects: Redirect hop cap when following.

    Returns:
        The assembled :class:`RequestDescriptor`.

    Raises:
        AssemblyError: For an unsupported method, an invalid URL, a
            non-positive timeout or a negative redirect cap.
        InvalidUsageError: For an unusable ``-a`` credential.
    """
    verb = parse_method(method)
    validate_url(url)
    if timeout <= 0:
        raise AssemblyError(f"Timeout must be positive, got {timeout}")
    if max_redirects < 0:
        raise AssemblyError(f"--max-redirects must not be negative, got {max_redirects}")

    headers = tuple(i for i in items if isinstance(i, HeaderItem))
    queries = tuple(i for i in items if isinstance(i, QueryItem))
    json_fields = tuple(i for i in items if isinstance(i, JsonFieldItem))
    file_fields = tuple(i for i in items if isinstance(i, FileFieldItem))

    if verb in BODYLESS_METHODS and (json_fields or file_fields):
        for item in (*json_fields, *file_fields):
            warning(f"Ignoring body item '{item.raw or item.key}' in {verb.verb} request")
        json_fields, file_fields = (), ()

    body_kind = choose_body_kind(json_fields, file_fields)
    logger.debug(
        "Assembled %s %s: %d headers, %d query, %d fields, %d files, body=%s",
        verb.verb, url, len(headers), len(queries), len(json_fields), len(file_fields),
        body_kind.value,
    )

    return RequestDescriptor(
        method=verb,
        url=url,
        headers=headers,
        queries=queries,
        json_fields=json_fields,
        file_fields=file_fields,
        auth=resolve_auth(auth),
        body_kind=body_kind,
        timeout=timeout,
        redirects=RedirectPolicy(follow=follow_redirects, max_redirects=max_redirects),
    )


def encode_query(queries: Sequence[QueryItem]) -> str:
    """Percent-encode query items in order (spaces become ``%20``)."""
    return "&".join(
        f"{quote(item.key, safe='')}={quote(item.value, safe='')}" for item in queries
    )


def build_url(descriptor: RequestDescriptor) -> str:
    """Return the descriptor's URL with its query items appended.

    Items follow any query string already present in the URL; a fragment
    is kept at the end.
    """
    if not descriptor.queries:
        return descriptor.url
    parts = urlsplit(descriptor.url)
    extra = encode_query(descriptor.queries)
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def build_headers(
    descriptor: RequestDescriptor,
    body: Optional[EncodedBody] = None,
    defaults: Optional[dict[str, str]] = None,
) -> httpx.Headers:
    """Layer the outgoing headers in precedence order.

    Later layers replace earlier ones by case-insensitive name, keeping the
    position of the first occurrence:

    1. *defaults* (e.g. ``User-Agent``)
    2. the ``-a`` derived ``Authorization``
    3. header items, in command-line order
    4. the body's ``Content-Type`` / ``Content-Length``, unless a header
       item already named them
    """
    headers = httpx.Headers(defaults or {})
    apply_auth(headers, descriptor.auth)
    explicit: set[str] = set()
    for item in descriptor.headers:
        headers[item.name] = item.value
        explicit.add(item.name.lower())

    if body is not None and body.kind is not BodyKind.NONE:
        if body.content_type and "content-type" not in explicit:
            headers["Content-Type"] = body.content_type
        if body.content_length is not None and "content-length" not in explicit:
            headers["Content-Length"] = str(body.content_length)
    return headers
