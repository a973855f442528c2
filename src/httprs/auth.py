"""``-a`` credential resolution.

The credential string is classified with a simple heuristic -- there is no
negotiation with the server and ``WWW-Authenticate`` is never inspected:

* ``bearer:<token>`` / ``Bearer:<token>`` -- always a bearer token.
* ``user:password`` (any other string containing ``:``) -- HTTP Basic per
  :rfc:`7617`, split on the first colon.
* anything else -- a bearer token (``ghp_...``, ``sk_...``, JWTs, ...).

Each :data:`~httprs.models.AuthSpec` serialises to exactly one
``Authorization`` header value.
"""

from __future__ import annotations

import base64
from typing import Optional

import httpx

from httprs.exceptions import InvalidUsageError
from httprs.models import AuthSpec, BasicAuth, BearerAuth

AUTHORIZATION = "Authorization"

_BEARER_PREFIXES = ("bearer:", "Bearer:")


def resolve_auth(credential: Optional[str]) -> Optional[AuthSpec]:
    """Turn the ``-a`` value into an :data:`~httprs.models.AuthSpec`.

    Args:
        credential: The raw ``-a`` value, or ``None`` when the flag is absent.

    Returns:
        :class:`~httprs.models.BasicAuth`, :class:`~httprs.models.BearerAuth`,
        or ``None``.

    Raises:
        InvalidUsageError: If the credential, the Basic username, or an
            explicitly prefixed bearer token is empty.
    """
    if credential is None:
        return None
    if not credential:
        raise InvalidUsageError("Auth credential cannot be empty")

    if credential.startswith(_BEARER_PREFIXES):
        token = credential.split(":", 1)[1]
        if not token:
            raise InvalidUsageError("Bearer token cannot be empty")
        return BearerAuth(token=token)

    if ":" in credential:
        username, password = credential.split(":", 1)
        if not username:
            raise InvalidUsageError("Username cannot be empty")
        return BasicAuth(username=username, password=password)

    return BearerAuth(token=credential)


def authorization_value(auth: AuthSpec) -> str:
    """Serialise *auth* to its ``Authorization`` header value."""
    if isinstance(auth, BasicAuth):
        raw = f"{auth.username}:{auth.password}"
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"
    return f"Bearer {auth.token}"


def apply_auth(headers: httpx.Headers, auth: Optional[AuthSpec]) -> httpx.Headers:
    """Set the ``Authorization`` header derived from *auth* on *headers*.

    Called before explicit header items are applied so that an
    ``Authorization:...`` item always replaces the derived value.
    """
    if auth is not None:
        headers[AUTHORIZATION] = authorization_value(auth)
    return headers


def mask_credential(value: str) -> str:
    """Shorten a long ``Authorization`` value for display in verbose output."""
    if len(value) > 20:
        return f"{value[:10]}...{value[-5:]}"
    return value
