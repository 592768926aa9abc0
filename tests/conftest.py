"""Shared fixtures: a running proxy, an echo target and log capture."""

import contextlib
import socket
import threading
import time

import pytest
from loguru import logger

from socks5_proxy.core.config import ProxyConfig
from socks5_proxy.core.lib.address import DecodedAddress
from socks5_proxy.core.lib.proxy_server import SocksProxy

IO_TIMEOUT = 5.0


class EchoServer:
    """Threaded TCP echo server on an ephemeral loopback port."""

    def __init__(self) -> None:
        self.sock = socket.create_server(("127.0.0.1", 0))
        self.address = self.sock.getsockname()
        self.peers: list[tuple] = []
        threading.Thread(target=self._serve, daemon=True).start()

    def _serve(self) -> None:
        while True:
            try:
                conn, peer = self.sock.accept()
            except OSError:
                return
            self.peers.append(peer)
            threading.Thread(target=self._echo, args=(conn,), daemon=True).start()

    @staticmethod
    def _echo(conn: socket.socket) -> None:
        with conn:
            while True:
                try:
                    data = conn.recv(4096)
                except OSError:
                    return
                if not data:
                    return
                conn.sendall(data)

    def close(self) -> None:
        with contextlib.suppress(OSError):
            self.sock.shutdown(socket.SHUT_RDWR)
        self.sock.close()


class RawClient:
    """Minimal hand-driven SOCKS5 client for byte-level assertions."""

    def __init__(self, address: tuple) -> None:
        self.sock = socket.create_connection(address[:2], timeout=IO_TIMEOUT)

    def send(self, data: bytes) -> None:
        self.sock.sendall(data)

    def recv_exact(self, size: int) -> bytes:
        buf = b""
        while len(buf) < size:
            chunk = self.sock.recv(size - len(buf))
            if not chunk:
                break
            buf += chunk
        return buf

    def read_until_closed(self) -> bytes:
        """Read until the proxy closes the connection; a reset counts as closed."""
        buf = b""
        while True:
            try:
                chunk = self.sock.recv(4096)
            except ConnectionResetError:
                return buf
            if not chunk:
                return buf
            buf += chunk

    def greet(self, methods: bytes = b"\x00") -> bytes:
        self.send(bytes([0x05, len(methods)]) + methods)
        return self.recv_exact(2)

    def connect(self, address: DecodedAddress) -> bytes:
        self.send(b"\x05\x01\x00" + address.to_bytes())
        return self.recv_exact(10)

    def close(self) -> None:
        self.sock.close()


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG", format="{message}")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def wait_for():
    def _wait_for(predicate, timeout: float = IO_TIMEOUT) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()

    return _wait_for


@pytest.fixture
def start_proxy():
    """Factory starting a SocksProxy on 127.0.0.1:<ephemeral>; returns its address."""
    servers: list[SocksProxy] = []

    def _start(**options) -> tuple:
        server = SocksProxy(ProxyConfig(host="127.0.0.1", port=0, **options))
        threading.Thread(target=server.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True).start()
        servers.append(server)
        return server.server_address

    yield _start

    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def proxy(start_proxy):
    return start_proxy()


@pytest.fixture
def echo_server():
    server = EchoServer()
    yield server
    server.close()


@pytest.fixture
def client_factory():
    clients: list[RawClient] = []

    def _connect(address: tuple) -> RawClient:
        client = RawClient(address)
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        client.close()


@pytest.fixture
def closed_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def socket_pair():
    """Connected (peer, local) sockets; ``local`` plays the proxy side."""
    peer, local = socket.socketpair()
    peer.settimeout(IO_TIMEOUT)
    local.settimeout(IO_TIMEOUT)
    yield peer, local
    peer.close()
    local.close()
