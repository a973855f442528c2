"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~httprs.exceptions.HttprsError` subclass. A request
that completes is always :data:`EXIT_SUCCESS`, whatever the HTTP status
code of the response.

Example::

    $ httprs get https://httpbin.org/status/404
    $ echo $?
    0   # the server answered -- a 404 is not a tool failure
"""

EXIT_SUCCESS = 0
"""The request completed (any HTTP status)."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, a malformed request item, or an unassemblable request."""

EXIT_FILE_ERROR = 3
"""A file named for upload could not be found or read."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused, TLS)."""

EXIT_DOWNLOAD_ERROR = 7
"""The download target could not be created or written."""

EXIT_CANCELLED = 130
"""Interrupted by the user (Ctrl-C)."""
