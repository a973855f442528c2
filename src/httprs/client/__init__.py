"""HTTP transport for httprs.

Provides the blocking transport adapter that wraps :mod:`httpx` and the
streamed response view it returns.

Classes:
    :class:`Transport` -- sends a :class:`~httprs.models.RequestDescriptor`.
    :class:`ResponseView` -- status, headers and streamed body of the reply.

Example::

    from httprs.client import Transport

    with Transport(descriptor) as transport:
        view = transport.send(body)
"""

from httprs.client.response import ResponseView
from httprs.client.transport import Transport

__all__ = ["Transport", "ResponseView"]
