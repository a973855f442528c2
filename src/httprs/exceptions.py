"""Exception hierarchy for httprs.

All exceptions inherit from :class:`HttprsError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`httprs.exit_codes`.
The top-level error handler in :func:`httprs.app.main` catches
``HttprsError`` and exits with the appropriate code.

Every error except :class:`TransportError` and :class:`DownloadError` is
raised *pre-flight*, before a single byte reaches the network.

Subclass hierarchy::

    HttprsError (exit 1)
    +-- InvalidUsageError         (exit 2)
    |   +-- MalformedItemError    (exit 2)
    |   |   +-- FileNotFoundError_ (exit 3)
    |   +-- AssemblyError         (exit 2)
    +-- BodyEncodingError         (exit 3)
    +-- TransportError            (exit 6)
    +-- DownloadError             (exit 7)
"""

from __future__ import annotations

import enum
from typing import Optional

from httprs.exit_codes import (
    EXIT_DOWNLOAD_ERROR,
    EXIT_FILE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TRANSPORT_ERROR,
)


class HttprsError(Exception):
    """Base exception for all httprs errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`httprs.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(HttprsError):
    """Raised for invalid CLI arguments or conflicting flags."""

    exit_code = EXIT_INVALID_USAGE


class ItemErrorReason(str, enum.Enum):
    """Why a request-item token was rejected."""

    NO_DELIMITER = "no_delimiter"
    FILE_NOT_FOUND = "file_not_found"


class MalformedItemError(InvalidUsageError):
    """Raised when a request-item token does not match the item grammar.

    Args:
        token: The offending raw token, echoed back to the user.
        reason: Machine-readable cause.
        message: Optional override for the default message.
    """

    def __init__(
        self,
        token: str,
        reason: ItemErrorReason = ItemErrorReason.NO_DELIMITER,
        message: str | None = None,
    ):
        self.token = token
        self.reason = reason
        super().__init__(
            message
            or f"Invalid request item '{token}'. Expected 'Header:Value', "
            "'key==value', 'key=value' or 'key@file'"
        )


class FileNotFoundError_(MalformedItemError):
    """Raised when a ``key@path`` item names a file that cannot be read.

    Named with a trailing underscore to avoid shadowing the built-in
    ``FileNotFoundError``.
    """

    exit_code = EXIT_FILE_ERROR

    def __init__(self, token: str, path: str):
        self.path = path
        super().__init__(
            token,
            ItemErrorReason.FILE_NOT_FOUND,
            f"File not found or not readable: '{path}' (in item '{token}')",
        )


class AssemblyError(InvalidUsageError):
    """Raised when the items and flags cannot form a valid request (bad URL, bad method)."""


class BodyEncodingError(HttprsError):
    """Raised when a file attached to the body cannot be opened or read.

    Args:
        field: The form field the file was attached to.
        path: The file path that failed.
        cause: Optional underlying OS error.
    """

    exit_code = EXIT_FILE_ERROR

    def __init__(self, field: str, path: str, cause: Optional[BaseException] = None):
        self.field = field
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to read file '{path}' for field '{field}'{detail}")


class TransportError(HttprsError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused, TLS).

    Args:
        message: Human-readable description.
        cause: The underlying :mod:`httpx` exception.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class DownloadError(HttprsError):
    """Raised when the download target cannot be created or written.

    Any partially written file is left on disk.

    Args:
        path: The target file path.
        cause: The underlying I/O or transport exception.
    """

    exit_code = EXIT_DOWNLOAD_ERROR

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Download to '{path}' failed: {cause}")
