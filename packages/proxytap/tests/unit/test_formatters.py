"""Unit tests for detail rendering and curl export."""

from __future__ import annotations

from proxytap.formatters import (
    INVALID_HEADERS,
    NO_CONTENT,
    NO_HEADERS,
    diff_details,
    format_body,
    format_headers,
    parse_headers,
    quote_body,
    render_detail,
    to_curl,
)


class TestHeaders:
    """Tests for parse_headers and format_headers."""

    def test_format_valid(self) -> None:
        """Headers render as key: value lines."""
        assert format_headers('{"Accept": "*/*", "X-Id": "7"}') == "Accept: */*\nX-Id: 7"

    def test_missing_and_empty(self) -> None:
        """Absent and empty blocks both mean no headers."""
        assert format_headers(None) == NO_HEADERS
        assert format_headers("") == NO_HEADERS
        assert format_headers("{}") == NO_HEADERS

    def test_invalid_distinct_from_missing(self) -> None:
        """Undecodable text is reported as invalid, not as empty."""
        assert format_headers("{not json") == INVALID_HEADERS
        assert format_headers('["a"]') == INVALID_HEADERS

    def test_parse_returns_error(self) -> None:
        """parse_headers reports errors in the tuple."""
        headers, error = parse_headers("nope")
        assert headers is None
        assert error.startswith("Invalid JSON")


class TestFormatBody:
    """Tests for format_body."""

    def test_empty(self) -> None:
        """Empty bodies render as NO_CONTENT."""
        assert format_body(b"") == NO_CONTENT
        assert format_body(None) == NO_CONTENT

    def test_json_pretty_printed(self) -> None:
        """JSON text is re-indented."""
        assert format_body(b'{"a":1,"b":[true]}') == '{\n  "a": 1,\n  "b": [\n    true\n  ]\n}'

    def test_plain_text(self) -> None:
        """Non-JSON text is returned as-is."""
        assert format_body(b"hello world") == "hello world"

    def test_unicode_kept(self) -> None:
        """Non-ASCII JSON strings are not escaped."""
        assert format_body('{"name": "café"}'.encode()) == '{\n  "name": "café"\n}'

    def test_binary(self) -> None:
        """Non-UTF-8 bytes render as a size marker."""
        assert format_body(b"\xff\xfe\x00\x01") == "Binary data (4 bytes)"


class TestToCurl:
    """Tests for to_curl."""

    def test_basic_get(self, detail_factory) -> None:
        """Method, quoted url and headers in order."""
        detail = detail_factory("a", url="https://x/a?q=1", request_headers='{"Accept": "*/*", "X-Trace": "1"}')
        assert to_curl(detail) == 'curl -X GET "https://x/a?q=1" -H "Accept: */*" -H "X-Trace: 1"'

    def test_body_with_single_quote(self, detail_factory) -> None:
        """Single quotes in the body are escaped for the shell."""
        detail = detail_factory("a", method="POST", request_headers=None, request_body=b"it's")
        assert to_curl(detail) == "curl -X POST \"https://example.com/a\" -d 'it'\\''s'"

    def test_quote_body(self) -> None:
        """quote_body wraps and escapes."""
        assert quote_body("it's") == "'it'\\''s'"
        assert quote_body("plain") == "'plain'"

    def test_invalid_headers_skipped(self, detail_factory) -> None:
        """Undecodable headers produce no -H flags."""
        detail = detail_factory("a", request_headers="{broken")
        assert to_curl(detail) == 'curl -X GET "https://example.com/a"'

    def test_binary_body_skipped(self, detail_factory) -> None:
        """Non-UTF-8 bodies produce no -d flag."""
        detail = detail_factory("a", request_headers=None, request_body=b"\xff\x00")
        assert "-d" not in to_curl(detail)

    def test_deterministic(self, detail_factory) -> None:
        """Same record, same command."""
        detail = detail_factory("a", method="PUT", request_body=b'{"k": "v"}')
        assert to_curl(detail) == to_curl(detail)


class TestRenderAndDiff:
    """Tests for render_detail and diff_details."""

    def test_render_sections(self, detail_factory) -> None:
        """All four sections are present."""
        text = render_detail(detail_factory("a"))
        for heading in ("Request Headers", "Request Body", "Response Headers", "Response Body"):
            assert heading in text
        assert "Status: 200" in text

    def test_render_pending(self, detail_factory) -> None:
        """A missing status shows as pending."""
        assert "Status: Pending..." in render_detail(detail_factory("a", status=None))

    def test_diff_identical(self, detail_factory) -> None:
        """Identical renderings give an empty diff."""
        assert diff_details(detail_factory("a"), detail_factory("a")) == ""

    def test_diff_changes(self, detail_factory) -> None:
        """Differences appear as unified diff lines labelled by id."""
        left = detail_factory("a", status=200)
        right = detail_factory("b", status=500)
        diff = diff_details(left, right)
        assert diff.startswith("--- a\n+++ b")
        assert "-Status: 200" in diff
        assert "+Status: 500" in diff
