"""Tests for response rendering and the verbose request echo."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from httprs.assembler import assemble_request
from httprs.body import encode_body
from httprs.client import Transport
from httprs.items import parse_items
from httprs.models import RenderMode
from httprs.renderer import (
    ResponseRenderer,
    is_binary,
    is_html_type,
    is_json_type,
    pretty_json,
)

JSON_HEADERS = {"Content-Type": "application/json"}


# ---------------------------------------------------------------------------
# Content classification
# ---------------------------------------------------------------------------


class TestClassification:
    @pytest.mark.parametrize("ct", ["application/json", "application/problem+json"])
    def test_json_types(self, ct: str) -> None:
        assert is_json_type(ct)

    def test_not_json(self) -> None:
        assert not is_json_type("text/plain")

    def test_html(self) -> None:
        assert is_html_type("text/html")
        assert not is_html_type("text/plain")

    def test_binary(self) -> None:
        assert is_binary(b"\x89PNG\r\n\x1a\n\0\0", "image/png")
        assert is_binary(b"abc", "application/octet-stream")
        assert is_binary(b"ab\0c", "text/plain")

    def test_text(self) -> None:
        assert not is_binary(b"hello", "text/plain")
        assert not is_binary(b"{}", "application/json")
        assert not is_binary(b"<a/>", "application/atom+xml")
        assert not is_binary(b"hello", "")

    def test_pretty_json_keeps_key_order(self) -> None:
        assert pretty_json('{"b":1,"a":[1,2]}') == '{\n  "b": 1,\n  "a": [\n    1,\n    2\n  ]\n}'

    def test_pretty_json_invalid(self) -> None:
        assert pretty_json("{not json") is None


# ---------------------------------------------------------------------------
# Piped (not pretty) output
# ---------------------------------------------------------------------------


class TestPipedOutput:
    def test_full(self, make_output, make_view) -> None:
        captured = make_output(pretty=False)
        view = make_view(b'{"a":1}', headers=JSON_HEADERS)
        ResponseRenderer(captured.manager).render(view, RenderMode.FULL)

        head, _, body = captured.out.partition(b"\n\n")
        lines = head.decode().splitlines()
        assert lines[0] == "HTTP/1.1 200 OK"
        assert "Content-Type: application/json" in lines
        assert body == b'{"a":1}'

    def test_body_is_byte_exact(self, make_output, make_view) -> None:
        captured = make_output(pretty=False)
        payload = b'{ "b" : 2,\n  "a":1 }'
        ResponseRenderer(captured.manager).render(make_view(payload, headers=JSON_HEADERS), RenderMode.BODY_ONLY)
        assert captured.out == payload

    def test_binary_body_is_written_raw(self, make_output, make_view) -> None:
        captured = make_output(pretty=False)
        payload = bytes(range(256))
        view = make_view(payload, headers={"Content-Type": "application/octet-stream"})
        ResponseRenderer(captured.manager).render(view, RenderMode.BODY_ONLY)
        assert captured.out == payload

    def test_no_escape_codes(self, make_output, make_view) -> None:
        captured = make_output(pretty=False)
        ResponseRenderer(captured.manager).render(make_view(b"hi", status_code=500))
        assert b"\x1b[" not in captured.out

    def test_headers_only_never_reads_body(self, make_output, make_view) -> None:
        captured = make_output(pretty=False)
        view = make_view(b"secret-body", headers={"X-Thing": "1"})
        ResponseRenderer(captured.manager).render(view, RenderMode.HEADERS_ONLY)
        assert view._consumed is False
        assert b"X-Thing: 1" in captured.out
        assert b"secret-body" not in captured.out

    def test_body_only_has_no_status_line(self, make_output, make_view) -> None:
        captured = make_output(pretty=False)
        ResponseRenderer(captured.manager).render(make_view(b"just this"), RenderMode.BODY_ONLY)
        assert captured.out == b"just this"

    def test_markup_in_headers_is_literal(self, make_output, make_view) -> None:
        captured = make_output(pretty=False)
        ResponseRenderer(captured.manager).render(
            make_view(b"", headers={"X-Tag": "[bold]x[/bold]"}), RenderMode.HEADERS_ONLY
        )
        assert "X-Tag: [bold]x[/bold]" in captured.text


# ---------------------------------------------------------------------------
# Terminal (pretty) output
# ---------------------------------------------------------------------------


class TestPrettyOutput:
    def test_json_is_reindented(self, make_output, make_view) -> None:
        captured = make_output(pretty=True, no_color=True)
        ResponseRenderer(captured.manager).render(
            make_view(b'{"name":"alice","age":30}', headers=JSON_HEADERS), RenderMode.BODY_ONLY
        )
        assert captured.text == '{\n  "name": "alice",\n  "age": 30\n}\n'

    def test_invalid_json_is_printed_as_text(self, make_output, make_view) -> None:
        captured = make_output(pretty=True, no_color=True)
        ResponseRenderer(captured.manager).render(
            make_view(b"{oops", headers=JSON_HEADERS), RenderMode.BODY_ONLY
        )
        assert captured.text == "{oops\n"

    def test_binary_is_summarised(self, make_output, make_view) -> None:
        captured = make_output(pretty=True, no_color=True)
        view = make_view(b"\x89PNG\0\0\0\0", headers={"Content-Type": "image/png"})
        ResponseRenderer(captured.manager).render(view, RenderMode.BODY_ONLY)
        assert captured.text == "[binary data not shown: 8 bytes]\n"

    def test_empty_body(self, make_output, make_view) -> None:
        captured = make_output(pretty=True, no_color=True)
        ResponseRenderer(captured.manager).render(make_view(b""), RenderMode.BODY_ONLY)
        assert captured.text == ""

    def test_colour_is_applied(self, make_output, make_view) -> None:
        captured = make_output(pretty=True)
        ResponseRenderer(captured.manager).render(
            make_view(b'{"a":1}', headers=JSON_HEADERS), RenderMode.FULL
        )
        assert "\x1b[" in captured.text
        assert "200" in captured.text

    def test_no_color_env(self, make_output, make_view, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        captured = make_output(pretty=True)
        ResponseRenderer(captured.manager).render(make_view(b"<p>hi</p>", headers={"Content-Type": "text/html"}))
        assert "\x1b[" not in captured.text
        assert "<p>hi</p>" in captured.text


# ---------------------------------------------------------------------------
# Verbose request echo
# ---------------------------------------------------------------------------


def _echo(captured, *tokens: str, auth: str | None = None) -> str:
    descriptor = assemble_request("post", "https://api.example.com/users?x=1", parse_items(tokens), auth=auth)
    body = encode_body(descriptor.json_fields, descriptor.file_fields)
    with Transport(descriptor, transport=httpx.MockTransport(lambda r: httpx.Response(200))) as transport:
        request = transport.build_request(body)
        ResponseRenderer(captured.manager).render_request(request, descriptor, body)
    body.close()
    return captured.err


class TestRequestEcho:
    def test_request_line_and_body(self, make_output) -> None:
        captured = make_output(verbose=True)
        err = _echo(captured, "name=alice", "q==1")
        assert "> POST /users?x=1&q=1\n" in err
        assert "HTTP/1.1" not in err
        assert "> content-type: application/json" in err.lower()
        assert '>   "name": "alice"' in err
        assert captured.out == b""

    def test_long_authorization_is_masked(self, make_output) -> None:
        captured = make_output(verbose=True)
        token = "ghp_" + "a" * 30 + "ZZZZZ"
        err = _echo(captured, "a=1", auth=token)
        assert token not in err
        assert "Bearer ghp...ZZZZZ" in err

    def test_files_are_listed_not_dumped(self, make_output, upload_file: Path) -> None:
        captured = make_output(verbose=True)
        err = _echo(captured, "title=Sunset", f"photo@{upload_file}")
        assert "Files:" in err
        assert "photo @ img.jpg" in err
        assert "title = Sunset" in err
        assert "fake-jpeg" not in err
