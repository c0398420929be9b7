import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class _CIDRHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        server = self.server
        server.hits += 1
        if server.delay:
            time.sleep(server.delay)
        body = server.body.encode("utf-8")
        try:
            self.send_response(server.status)
            self.send_header("Content-Type", "text/plain")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def cidr_server():
    """Serve a configurable CIDR list on a random local port."""

    server = ThreadingHTTPServer(("127.0.0.1", 0), _CIDRHandler)
    server.body = ""
    server.status = 200
    server.delay = 0.0
    server.hits = 0
    server.url = f"http://127.0.0.1:{server.server_address[1]}/cdnips.txt"

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


def _wait_for(predicate, timeout=5.0, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_for():
    """Poll ``predicate`` until it is true or the timeout expires."""

    return _wait_for


class SlowBodyServer:
    """Raw socket server that announces a body and then sends it slowly.

    Each byte is sent after ``byte_delay`` seconds.  When ``stall_after`` is
    set, the server goes silent after that many bytes until shut down.
    """

    def __init__(self, body: bytes, byte_delay: float, stall_after=None):
        self.body = body
        self.byte_delay = byte_delay
        self.stall_after = stall_after
        self.closed = threading.Event()
        self._sock = socket.create_server(("127.0.0.1", 0))
        self._sock.settimeout(0.1)
        self.url = f"http://127.0.0.1:{self._sock.getsockname()[1]}/cdnips.txt"
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        while not self.closed.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            threading.Thread(target=self._respond, args=(conn,), daemon=True).start()

    def _respond(self, conn):
        with conn:
            try:
                request = b""
                while b"\r\n\r\n" not in request:
                    data = conn.recv(1024)
                    if not data:
                        return
                    request += data
                conn.sendall(
                    b"HTTP/1.1 200 OK\r\n"
                    b"Content-Type: text/plain\r\n"
                    + f"Content-Length: {len(self.body)}\r\n\r\n".encode()
                )
                for index in range(len(self.body)):
                    if self.stall_after is not None and index >= self.stall_after:
                        self.closed.wait(10.0)
                        return
                    if self.closed.wait(self.byte_delay):
                        return
                    conn.sendall(self.body[index:index + 1])
            except OSError:
                return

    def close(self):
        self.closed.set()
        self._sock.close()


@pytest.fixture
def slow_body_server():
    servers = []

    def factory(body=b"1.2.3.0/24\n5.6.7.0/16\n", byte_delay=0.25, stall_after=None):
        server = SlowBodyServer(body, byte_delay, stall_after)
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.close()
