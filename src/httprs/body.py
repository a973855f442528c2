"""Request body encoding.

The encoding is a pure function of which item kinds are present
(:func:`choose_body_kind`):

==================  ==================  ===========================
File field present  JSON field present  Body
==================  ==================  ===========================
yes                 any                 ``multipart/form-data``
no                  yes                 ``application/json`` object
no                  no                  none
==================  ==================  ===========================

JSON values are coerced (:func:`coerce_value`); multipart text parts are
sent verbatim and the multipart framing itself is left to httpx. Field keys
follow one duplicate policy everywhere: the last value wins and the key
keeps the position of its first occurrence.

Files are opened while encoding, so an unreadable file fails before any
byte is sent. httpx streams their contents while the request is written and
rewinds them if a redirect makes it send the body again.
"""

from __future__ import annotations

import json
import math
import mimetypes
import re
from pathlib import Path
from typing import IO, Any, Optional, Sequence, Union

from httprs.exceptions import BodyEncodingError
from httprs.models import BodyKind, FileFieldItem, JsonFieldItem

JSON_CONTENT_TYPE = "application/json"
DEFAULT_FILE_TYPE = "application/octet-stream"

_JSON_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS: dict[str, Any] = {"true": True, "false": False, "null": None}


# httpx ``files=`` entry: (field, (filename, handle, content type)).
FilePart = tuple[str, tuple[str, IO[bytes], str]]


class EncodedBody:
    """An encoded request body ready for the transport.

    JSON bodies are plain bytes. Multipart bodies are handed to httpx as
    ``data``/``files`` so that httpx writes the framing, picks the boundary
    and can replay the body on a redirect.

    Args:
        kind: The chosen :class:`~httprs.models.BodyKind`.
        content_type: ``Content-Type`` header value; ``None`` when there is
            no body or httpx sets it (multipart).
        content: Body bytes (JSON only).
        content_length: Exact size in bytes when known up front.
        text: Human-readable form of the body for verbose output
            (JSON only).
        data: Multipart text fields.
        files: Multipart file parts, backed by open handles released by
            :meth:`close`.
    """

    def __init__(
        self,
        kind: BodyKind,
        content_type: Optional[str] = None,
        content: bytes = b"",
        content_length: Optional[int] = None,
        text: Optional[str] = None,
        data: Optional[dict[str, str]] = None,
        files: Sequence[FilePart] = (),
    ):
        self.kind = kind
        self.content_type = content_type
        self.content = content
        self.content_length = content_length
        self.text = text
        self.data = data or {}
        self.files = list(files)

    def request_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for :meth:`httpx.Client.build_request`."""
        if self.kind is BodyKind.MULTIPART:
            return {"data": self.data, "files": self.files}
        if self.kind is BodyKind.JSON:
            return {"content": self.content}
        return {}

    def close(self) -> None:
        """Close any files the body still holds open."""
        for _, (_, handle, _) in self.files:
            handle.close()

    def __enter__(self) -> EncodedBody:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def choose_body_kind(
    json_fields: Sequence[JsonFieldItem],
    file_fields: Sequence[FileFieldItem],
) -> BodyKind:
    """Pick the body encoding from the presence of field and file items."""
    if file_fields:
        return BodyKind.MULTIPART
    if json_fields:
        return BodyKind.JSON
    return BodyKind.NONE


def coerce_value(value: str) -> Any:  # noqa: ANN401
    """Coerce a JSON-body field value.

    ``true``/``false`` become booleans, ``null`` becomes ``None`` and a
    string matching the JSON number grammar becomes an ``int`` or
    ``float``. Everything else, including ``NaN``, numbers too large for
    a finite float (``1e400``) and padded numbers such as ``" 42"``, stays
    a string.
    """
    if value in _LITERALS:
        return _LITERALS[value]
    if _JSON_NUMBER.fullmatch(value):
        number = json.loads(value)
        if isinstance(number, float) and not math.isfinite(number):
            return value
        return number
    return value


def merge_fields(json_fields: Sequence[JsonFieldItem], coerce: bool = False) -> dict[str, Any]:
    """Fold field items into an ordered mapping (last value wins, first position kept)."""
    merged: dict[str, Any] = {}
    for item in json_fields:
        merged[item.key] = coerce_value(item.value) if coerce else item.value
    return merged


def encode_json(json_fields: Sequence[JsonFieldItem]) -> EncodedBody:
    """Encode field items as one compact JSON object in insertion order."""
    obj = merge_fields(json_fields, coerce=True)
    content = json.dumps(
        obj, ensure_ascii=False, allow_nan=False, separators=(",", ":")
    ).encode("utf-8")
    return EncodedBody(
        kind=BodyKind.JSON,
        content_type=JSON_CONTENT_TYPE,
        content=content,
        content_length=len(content),
        text=json.dumps(obj, ensure_ascii=False, indent=2),
    )


def guess_content_type(path: Union[str, Path]) -> str:
    """Best-effort MIME type from the file extension."""
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or DEFAULT_FILE_TYPE


def encode_multipart(
    json_fields: Sequence[JsonFieldItem],
    file_fields: Sequence[FileFieldItem],
) -> EncodedBody:
    """Prepare text fields and files for a ``multipart/form-data`` body.

    httpx sends text parts first, in insertion order, followed by one part
    per file item. Every file is opened before this function returns.

    Args:
        json_fields: Items sent as plain text parts.
        file_fields: Items sent as file parts.

    Returns:
        A multipart :class:`EncodedBody`.

    Raises:
        BodyEncodingError: If a file cannot be opened.
    """
    files: list[FilePart] = []
    for item in file_fields:
        path = Path(item.path).expanduser()
        try:
            handle = path.open("rb")
        except OSError as exc:
            for _, (_, opened, _) in files:
                opened.close()
            raise BodyEncodingError(item.key, item.path, exc) from exc
        files.append((item.key, (path.name, handle, guess_content_type(path))))

    return EncodedBody(
        kind=BodyKind.MULTIPART,
        data=merge_fields(json_fields),
        files=files,
    )


def encode_body(
    json_fields: Sequence[JsonFieldItem],
    file_fields: Sequence[FileFieldItem],
) -> EncodedBody:
    """Encode the request body according to :func:`choose_body_kind`."""
    kind = choose_body_kind(json_fields, file_fields)
    if kind is BodyKind.MULTIPART:
        return encode_multipart(json_fields, file_fields)
    if kind is BodyKind.JSON:
        return encode_json(json_fields)
    return EncodedBody(kind=BodyKind.NONE)
