"""Tests for ``-a`` credential resolution."""

from __future__ import annotations

import base64

import httpx
import pytest

from httprs.auth import (
    apply_auth,
    authorization_value,
    mask_credential,
    resolve_auth,
)
from httprs.exceptions import InvalidUsageError
from httprs.models import BasicAuth, BearerAuth


class TestResolveAuth:
    def test_absent(self) -> None:
        assert resolve_auth(None) is None

    def test_basic(self) -> None:
        auth = resolve_auth("user:pass")
        assert auth == BasicAuth(username="user", password="pass")

    def test_basic_splits_on_first_colon(self) -> None:
        auth = resolve_auth("user:pa:ss")
        assert isinstance(auth, BasicAuth)
        assert auth.password == "pa:ss"

    def test_basic_empty_password(self) -> None:
        auth = resolve_auth("user:")
        assert auth == BasicAuth(username="user", password="")

    def test_bearer(self) -> None:
        assert resolve_auth("ghp_abc") == BearerAuth(token="ghp_abc")

    @pytest.mark.parametrize("credential", ["bearer:tok:en", "Bearer:tok:en"])
    def test_bearer_prefix(self, credential: str) -> None:
        assert resolve_auth(credential) == BearerAuth(token="tok:en")

    @pytest.mark.parametrize("credential", ["", ":secret", "bearer:"])
    def test_empty_parts_are_rejected(self, credential: str) -> None:
        with pytest.raises(InvalidUsageError):
            resolve_auth(credential)


class TestAuthorizationValue:
    def test_basic(self) -> None:
        value = authorization_value(BasicAuth(username="user", password="pass"))
        assert value == "Basic " + base64.b64encode(b"user:pass").decode()
        assert value == "Basic dXNlcjpwYXNz"

    def test_bearer(self) -> None:
        assert authorization_value(BearerAuth(token="ghp_abc")) == "Bearer ghp_abc"


class TestApplyAuth:
    def test_sets_header(self) -> None:
        headers = apply_auth(httpx.Headers(), BearerAuth(token="t"))
        assert headers["authorization"] == "Bearer t"

    def test_none_leaves_headers_alone(self) -> None:
        headers = apply_auth(httpx.Headers({"X-A": "1"}), None)
        assert "authorization" not in headers


class TestMaskCredential:
    def test_short_values_unchanged(self) -> None:
        assert mask_credential("Bearer abc") == "Bearer abc"

    def test_long_values_shortened(self) -> None:
        value = "Bearer " + "x" * 30 + "12345"
        masked = mask_credential(value)
        assert masked == "Bearer xxx...12345"
        assert len(masked) < len(value)
