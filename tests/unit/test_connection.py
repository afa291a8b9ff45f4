"""
Unit tests for Connection request reading and writing.

Uses socket.socketpair(), so no network is involved.
"""

import socket
import threading
import time

import pytest

from minihttp.core.connection import Connection, ConnectionState, DRAIN_TIMEOUT


@pytest.fixture
def pair():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for s in (server_side, client_side):
        try:
            s.close()
        except OSError:
            pass


def make_connection(sock: socket.socket, **kwargs) -> Connection:
    kwargs.setdefault("timeout", 2.0)
    return Connection(socket=sock, address=("127.0.0.1", 5000), **kwargs)


class TestReadRequest:

    def test_get_without_body(self, pair, sample_get_request: bytes):
        server_side, client_side = pair
        client_side.sendall(sample_get_request)

        conn = make_connection(server_side)

        assert conn.read_request() == sample_get_request
        assert conn.state == ConnectionState.READING

    def test_reads_across_small_chunks(self, pair, sample_post_request: bytes):
        server_side, client_side = pair
        client_side.sendall(sample_post_request)

        conn = make_connection(server_side, buffer_size=7)

        assert conn.read_request() == sample_post_request

    def test_waits_for_full_body(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\n01234")
        client_side.sendall(b"56789")

        conn = make_connection(server_side)

        assert conn.read_request().endswith(b"\r\n\r\n0123456789")

    def test_extra_bytes_not_included(self, pair):
        server_side, client_side = pair
        client_side.sendall(
            b"POST /files/a HTTP/1.1\r\nContent-Length: 2\r\n\r\nokGET / HTTP/1.1\r\n\r\n"
        )

        conn = make_connection(server_side)

        assert conn.read_request() == b"POST /files/a HTTP/1.1\r\nContent-Length: 2\r\n\r\nok"

    def test_peer_closed_without_data(self, pair):
        server_side, client_side = pair
        client_side.close()

        assert make_connection(server_side).read_request() is None

    def test_peer_closed_mid_headers(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET /echo/x HTTP/1.1\r\nHost")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == b"GET /echo/x HTTP/1.1\r\nHost"

    def test_peer_closed_mid_body(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request().endswith(b"\r\n\r\nabc")

    def test_declared_length_too_large(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"POST /files/a HTTP/1.1\r\nContent-Length: 5000\r\n\r\n")

        conn = make_connection(server_side, max_request_size=1024)

        with pytest.raises(ValueError):
            conn.read_request()

    def test_headers_too_large(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET / HTTP/1.1\r\nX-Filler: " + b"a" * 2048)

        conn = make_connection(server_side, buffer_size=512, max_request_size=1024)

        with pytest.raises(ValueError):
            conn.read_request()

    def test_timeout(self, pair):
        server_side, client_side = pair
        client_side.sendall(b"GET / HTTP/1.1\r\n")

        conn = make_connection(server_side, timeout=0.2)

        with pytest.raises(TimeoutError):
            conn.read_request()


class TestWriteAndClose:

    def test_send_response_chunks(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side)

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n", None, b"payload")
        assert conn.state == ConnectionState.WRITING

        conn.close()
        received = b""
        while True:
            chunk = client_side.recv(1024)
            if not chunk:
                break
            received += chunk

        assert received == b"HTTP/1.1 200 OK\r\n\r\npayload"

    def test_send_after_peer_gone(self, pair):
        server_side, client_side = pair
        client_side.close()
        conn = make_connection(server_side)

        # The first write may still be buffered; keep going until it fails
        results = [conn.send_response(b"x" * 65536) for _ in range(20)]

        assert results[-1] is False

    def test_close_is_idempotent(self, pair):
        server_side, client_side = pair
        client_side.close()
        conn = make_connection(server_side)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_context_manager_closes(self, pair):
        server_side, client_side = pair
        client_side.close()

        with make_connection(server_side) as conn:
            assert conn.client_ip == "127.0.0.1"

        assert conn.state == ConnectionState.CLOSED

    def test_close_bounded_against_trickling_peer(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side)
        stop = threading.Event()

        def trickle():
            while not stop.is_set():
                try:
                    client_side.send(b"x")
                except OSError:
                    return
                time.sleep(0.05)

        sender = threading.Thread(target=trickle, daemon=True)
        sender.start()

        started = time.monotonic()
        conn.close()
        elapsed = time.monotonic() - started

        stop.set()
        sender.join(timeout=2)

        assert conn.state == ConnectionState.CLOSED
        assert elapsed < DRAIN_TIMEOUT + 1.0
