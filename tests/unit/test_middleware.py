"""
Unit tests for the middleware pipeline and access logging.
"""

import logging

import pytest

from minihttp.middleware import Middleware, MiddlewarePipeline, LoggingMiddleware
from minihttp.middleware.logging import RequestLog, payload_size
from minihttp.http.request import HTTPRequest
from minihttp.http.response import HTTPResponse, ok, not_found


def make_request(target: str = "/echo/abc") -> HTTPRequest:
    return HTTPRequest(method="GET", target=target, client_address=("127.0.0.1", 5000))


class Recorder(Middleware):
    """Appends its tag to a shared list on the way in and out."""

    def __init__(self, tag: str, calls: list):
        self.tag = tag
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.tag}:in")
        response = next(request)
        self.calls.append(f"{self.tag}:out")
        return response


class TestMiddlewarePipeline:

    def test_order(self):
        calls = []
        pipeline = MiddlewarePipeline().use(Recorder("a", calls), Recorder("b", calls))

        def handler(request):
            calls.append("handler")
            return ok("x", "text/plain")

        pipeline.wrap(handler)(make_request())

        assert calls == ["a:in", "b:in", "handler", "b:out", "a:out"]

    def test_empty_pipeline_is_handler(self):
        response = MiddlewarePipeline().wrap(lambda request: not_found())(make_request())

        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_len_and_iter(self):
        first, second = LoggingMiddleware(), LoggingMiddleware()
        pipeline = MiddlewarePipeline().use(first, second)

        assert len(pipeline) == 2
        assert list(pipeline) == [first, second]

    def test_name(self):
        assert LoggingMiddleware().name == "LoggingMiddleware"


class TestLoggingMiddleware:

    def test_logs_access_line(self, caplog):
        handler = MiddlewarePipeline().add(LoggingMiddleware()).wrap(
            lambda request: ok("abc", "text/plain")
        )

        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            response = handler(make_request())

        assert response.body == b"abc"
        [record] = [r for r in caplog.records if r.name == "minihttp.access"]
        assert '127.0.0.1 - - [' in record.getMessage()
        assert '"GET /echo/abc" 200 3 ' in record.getMessage()

    def test_logs_and_reraises(self, caplog):
        def broken(request):
            raise RuntimeError("boom")

        handler = MiddlewarePipeline().add(LoggingMiddleware()).wrap(broken)

        with caplog.at_level(logging.ERROR, logger="minihttp.access"):
            with pytest.raises(RuntimeError):
                handler(make_request())

        assert any("RuntimeError: boom" in r.getMessage() for r in caplog.records)

    def test_request_log_empty_descriptor(self):
        entry = RequestLog(
            method="GET",
            target="/user-agent",
            client_ip="",
            status_code=None,
            content_length=0,
            duration_ms=0.5,
            timestamp="19/Oct/2026:11:02:07 +0000",
        )

        assert entry.to_text() == '- - - [19/Oct/2026:11:02:07 +0000] "GET /user-agent" - 0 0.50ms'

    def test_payload_size(self):
        response = ok("abcd", "text/plain")
        assert payload_size(response) == 4

        response.body, response.encoded_body = None, b"xy"
        assert payload_size(response) == 2

        assert payload_size(HTTPResponse()) == 0
