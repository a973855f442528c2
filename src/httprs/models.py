"""Canonical Pydantic models shared across all httprs modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Request items** -- one per command-line token, produced by
:mod:`httprs.items`:
    :class:`HeaderItem`, :class:`QueryItem`, :class:`JsonFieldItem` and
    :class:`FileFieldItem`, unioned as :data:`RequestItem`.

**Request description** -- produced by :mod:`httprs.assembler` and consumed
by the transport:
    :class:`HTTPMethod`, :class:`BodyKind`, :class:`BasicAuth`,
    :class:`BearerAuth`, :class:`RedirectPolicy` and
    :class:`RequestDescriptor`.

**Output** -- consumed by the renderer and download manager:
    :class:`RenderMode`, :class:`RenderConfig` and :class:`DownloadTarget`.

Items, descriptors and configs are frozen once built; only
:class:`DownloadTarget` carries mutable progress state.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Request items ---


class ItemKind(str, enum.Enum):
    """Tag of a parsed request item."""

    HEADER = "header"
    QUERY = "query"
    JSON_FIELD = "json_field"
    FILE_FIELD = "file_field"


class _Item(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str = Field(default="", description="Token the item was parsed from")


class HeaderItem(_Item):
    """``Name:Value`` -- an HTTP request header."""

    kind: Literal[ItemKind.HEADER] = ItemKind.HEADER
    name: str
    value: str


class QueryItem(_Item):
    """``key==value`` -- a URL query parameter."""

    kind: Literal[ItemKind.QUERY] = ItemKind.QUERY
    key: str
    value: str


class JsonFieldItem(_Item):
    """``key=value`` -- a top-level body field (JSON member or multipart text part)."""

    kind: Literal[ItemKind.JSON_FIELD] = ItemKind.JSON_FIELD
    key: str
    value: str


class FileFieldItem(_Item):
    """``key@path`` -- a file attached as a multipart part."""

    kind: Literal[ItemKind.FILE_FIELD] = ItemKind.FILE_FIELD
    key: str
    path: str


RequestItem = Annotated[
    Union[HeaderItem, QueryItem, JsonFieldItem, FileFieldItem],
    Field(discriminator="kind"),
]


# --- Request description ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods accepted on the command line (case-insensitive)."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"

    @property
    def verb(self) -> str:
        """The method as sent on the wire (upper case)."""
        return self.value.upper()


class BodyKind(str, enum.Enum):
    """Encoding chosen for the request body."""

    NONE = "none"
    JSON = "json"
    MULTIPART = "multipart"


class BasicAuth(BaseModel):
    """HTTP Basic credentials from ``-a user:password``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["basic"] = "basic"
    username: str
    password: str = ""


class BearerAuth(BaseModel):
    """Bearer token from ``-a <token>``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bearer"] = "bearer"
    token: str


AuthSpec = Annotated[Union[BasicAuth, BearerAuth], Field(discriminator="kind")]


class RedirectPolicy(BaseModel):
    """Whether to follow redirects and how many hops to allow."""

    model_config = ConfigDict(frozen=True)

    follow: bool = Field(default=False, description="Follow 3xx redirects")
    max_redirects: int = Field(default=10, ge=0, description="Hop cap when following")


class RequestDescriptor(BaseModel):
    """A fully assembled outgoing request, before transport.

    Built once by :func:`~httprs.assembler.assemble_request`. The ``url``
    is the base URL as given; query items are appended only when the
    request is sent (see :func:`~httprs.assembler.build_url`).

    Item sequences keep command-line order. ``body_kind`` is the outcome
    of :func:`~httprs.body.choose_body_kind` and is never JSON while a
    file field is present.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    url: str
    headers: tuple[HeaderItem, ...] = ()
    queries: tuple[QueryItem, ...] = ()
    json_fields: tuple[JsonFieldItem, ...] = ()
    file_fields: tuple[FileFieldItem, ...] = ()
    auth: Optional[AuthSpec] = None
    body_kind: BodyKind = BodyKind.NONE
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    redirects: RedirectPolicy = Field(default_factory=RedirectPolicy)


# --- Output ---


class RenderMode(str, enum.Enum):
    """Which parts of the response are displayed."""

    FULL = "full"
    HEADERS_ONLY = "headers"
    BODY_ONLY = "body"


class RenderConfig(BaseModel):
    """Rendering switches resolved once at startup.

    ``pretty`` enables reformatting and highlighting (interactive
    terminals only); ``color`` additionally allows ANSI colour codes.
    When ``pretty`` is off the body is written byte-for-byte.
    """

    model_config = ConfigDict(frozen=True)

    pretty: bool = False
    color: bool = False
    verbose: bool = False


class DownloadTarget(BaseModel):
    """Destination of a download plus its running byte counter."""

    path: Path
    total_bytes: Optional[int] = Field(
        default=None, description="Expected size from Content-Length, if sent"
    )
    bytes_received: int = 0

    @property
    def percent(self) -> Optional[float]:
        """Completion percentage, or ``None`` when the total size is unknown."""
        if self.total_bytes is None:
            return None
        if self.total_bytes == 0:
            return 100.0
        return min(100.0, self.bytes_received * 100.0 / self.total_bytes)
