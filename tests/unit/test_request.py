"""
Unit tests for HTTP request parsing.
"""

import pytest

from minihttp.http.request import (
    HTTPRequest,
    RequestParser,
    parse_content_length,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.target == "/echo/abc?x=1"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.body == b""

    def test_header_lines_kept_in_order(self, sample_get_request: bytes):
        request = parse_request(sample_get_request)

        assert request.header_lines == (
            "Host: localhost:4221",
            "User-Agent: pytest/8.0",
            "Accept: */*",
        )

    def test_parse_post_with_body(self, sample_post_request: bytes):
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.target == "/files/notes.txt"
        assert parse_content_length(request.header_lines) == 12
        assert request.body == b"hello, world"

    def test_body_is_binary_safe(self):
        body = bytes(range(256))
        data = (
            b"POST /files/blob HTTP/1.1\r\n"
            + f"Content-Length: {len(body)}\r\n\r\n".encode()
            + body
        )

        assert parse_request(data).body == body

    def test_body_cut_to_content_length(self):
        data = b"POST /files/a HTTP/1.1\r\nContent-Length: 3\r\n\r\nabcdef"

        assert parse_request(data).body == b"abc"

    def test_body_without_content_length_kept_whole(self):
        data = b"POST /files/a HTTP/1.1\r\n\r\nabcdef"

        assert parse_request(data).body == b"abcdef"

    def test_no_header_terminator(self):
        """Everything is header section, body is empty."""
        request = parse_request(b"GET /echo/x HTTP/1.1\r\nHost: a")

        assert request.target == "/echo/x"
        assert request.header_lines == ("Host: a",)
        assert request.body == b""

    def test_missing_request_line_tokens(self):
        request = parse_request(b"GET\r\n\r\n")

        assert request.method == "GET"
        assert request.target == ""
        assert request.version == ""

    def test_empty_input(self):
        request = parse_request(b"")

        assert request.method == ""
        assert request.target == ""
        assert request.header_lines == ()

    def test_invalid_utf8_does_not_raise(self):
        request = parse_request(b"GET /echo/\xff\xfe HTTP/1.1\r\n\r\n")

        assert request.method == "GET"
        assert request.target.startswith("/echo/")

    def test_raw_bytes_preserved(self, sample_get_request: bytes):
        assert parse_request(sample_get_request).raw == sample_get_request


class TestHTTPRequest:
    """Tests for HTTPRequest accessors."""

    def test_header_exact_prefix(self):
        request = HTTPRequest(
            method="GET",
            target="/user-agent",
            header_lines=("Host: x", "User-Agent: curl/8.4.0"),
        )

        assert request.header("User-Agent") == "curl/8.4.0"
        assert request.user_agent == "curl/8.4.0"

    def test_header_prefix_is_case_sensitive(self):
        request = HTTPRequest(
            method="GET",
            target="/user-agent",
            header_lines=("user-agent: curl/8.4.0",),
        )

        assert request.user_agent is None

    def test_header_first_match_wins(self):
        request = HTTPRequest(
            method="GET",
            target="/",
            header_lines=("User-Agent: first", "User-Agent: second"),
        )

        assert request.user_agent == "first"

    def test_header_missing(self):
        assert HTTPRequest(method="GET", target="/").header("Host") is None

    @pytest.mark.parametrize("value,expected", [
        ("gzip", ["gzip"]),
        ("gzip, deflate", ["gzip", "deflate"]),
        ("deflate,gzip", ["deflate,gzip"]),
        ("gzip , deflate", ["gzip ", "deflate"]),
        ("invalid-encoding", ["invalid-encoding"]),
        ("", [""]),
    ])
    def test_accept_encodings(self, value: str, expected: list):
        request = HTTPRequest(
            method="GET",
            target="/echo/x",
            header_lines=(f"Accept-Encoding: {value}",),
        )

        assert request.accept_encodings == expected

    def test_accept_encodings_absent(self):
        assert HTTPRequest(method="GET", target="/").accept_encodings is None


class TestParseContentLength:
    """Tests for the Content-Length lookup shared with Connection."""

    def test_case_insensitive(self):
        assert parse_content_length(["content-length: 7"]) == 7
        assert parse_content_length(["CONTENT-LENGTH:7"]) == 7

    def test_absent(self):
        assert parse_content_length(["Host: x"]) is None

    @pytest.mark.parametrize("value", ["abc", "-1", ""])
    def test_invalid(self, value: str):
        assert parse_content_length([f"Content-Length: {value}"]) is None
