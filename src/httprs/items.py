"""Request-item classifier -- turns one command-line token into a typed item.

The grammar is decided by the *first* delimiter found scanning the token
left to right:

=========  ==================  =======================
Delimiter  Item                Example
=========  ==================  =======================
``==``     :class:`QueryItem`      ``page==2``
``:``      :class:`HeaderItem`     ``Accept:application/json``
``@``      :class:`FileFieldItem`  ``photo@./me.jpg``
``=``      :class:`JsonFieldItem`  ``name=alice``
=========  ==================  =======================

``==`` is tried before ``=`` at the same position. Everything after the
winning delimiter is the value, so ``email=bob@example.com`` is a JSON
field and ``q==a=b`` is a query parameter. A backslash escapes a delimiter
character in the key (``a\\:b=1`` is the JSON field ``a:b``).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

from httprs.exceptions import FileNotFoundError_, MalformedItemError
from httprs.models import (
    FileFieldItem,
    HeaderItem,
    JsonFieldItem,
    QueryItem,
    RequestItem,
)

QUERY_SEP = "=="
HEADER_SEP = ":"
FILE_SEP = "@"
FIELD_SEP = "="

# Checked in this order at each position.
_SEPARATORS = (QUERY_SEP, HEADER_SEP, FILE_SEP, FIELD_SEP)
_SEPARATOR_CHARS = frozenset(":@=")
_ESCAPE = "\\"
_QUOTES = ('"', "'")


def find_separator(token: str) -> Optional[tuple[str, int]]:
    """Return the first unescaped separator in *token* and its index.

    Args:
        token: The raw command-line token.

    Returns:
        ``(separator, index)`` or ``None`` when the token has no separator.
    """
    i = 0
    length = len(token)
    while i < length:
        if token[i] == _ESCAPE and i + 1 < length and token[i + 1] in _SEPARATOR_CHARS:
            i += 2
            continue
        for sep in _SEPARATORS:
            if token.startswith(sep, i):
                return sep, i
        i += 1
    return None


def _unescape(key: str) -> str:
    for ch in _SEPARATOR_CHARS:
        key = key.replace(_ESCAPE + ch, ch)
    return key


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def _check_readable(token: str, path: str) -> None:
    candidate = Path(path).expanduser()
    if not candidate.is_file() or not os.access(candidate, os.R_OK):
        raise FileNotFoundError_(token, path)


def parse_item(token: str) -> RequestItem:
    """Classify a single request-item token.

    Keys and values are stripped of surrounding whitespace; empty keys and
    values are otherwise passed through. Header values wrapped in matching
    quotes lose the quotes.

    Args:
        token: One command-line token such as ``name=alice``.

    Returns:
        The parsed :data:`~httprs.models.RequestItem`.

    Raises:
        MalformedItemError: If the token contains no separator.
        FileNotFoundError_: If a ``key@path`` token names an unreadable file.
    """
    found = find_separator(token)
    if found is None:
        raise MalformedItemError(token)

    sep, index = found
    key = _unescape(token[:index]).strip()
    value = token[index + len(sep):].strip()

    if sep == QUERY_SEP:
        return QueryItem(raw=token, key=key, value=value)
    if sep == HEADER_SEP:
        return HeaderItem(raw=token, name=key, value=_unquote(value))
    if sep == FILE_SEP:
        _check_readable(token, value)
        return FileFieldItem(raw=token, key=key, path=value)
    return JsonFieldItem(raw=token, key=key, value=value)


def parse_items(tokens: Iterable[str]) -> list[RequestItem]:
    """Classify every token, in order. The first bad token aborts the whole list."""
    return [parse_item(token) for token in tokens]
