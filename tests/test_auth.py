"""Tests for method selection and username/password sub-negotiation."""

import socket

import pytest

from socks5_proxy.core.exceptions import (
    AuthenticationError,
    FramingError,
    NoAuthMethodsError,
    ProtocolVersionError,
    UnsupportedMethodError,
)
from socks5_proxy.core.lib.auth import negotiate, select_method
from socks5_proxy.core.lib.protocol import AuthMethod

CREDENTIALS = (b"alice", b"secret")


def userpass(username: bytes, password: bytes) -> bytes:
    return bytes([0x01, len(username)]) + username + bytes([len(password)]) + password


def assert_nothing_sent(sock: socket.socket) -> None:
    sock.setblocking(False)
    with pytest.raises(BlockingIOError):
        sock.recv(1)


class TestSelectMethod:
    """Test cases for select_method."""

    def test_no_credentials_selects_no_auth(self):
        assert select_method(b"\x00", None) is AuthMethod.NO_AUTH
        assert select_method(b"\x00\x02", None) is AuthMethod.NO_AUTH

    def test_credentials_select_userpass(self):
        assert select_method(b"\x00\x02", CREDENTIALS) is AuthMethod.USERNAME_PASSWORD

    def test_credentials_not_offered(self):
        with pytest.raises(UnsupportedMethodError) as excinfo:
            select_method(b"\x00\x01", CREDENTIALS)
        assert excinfo.value.offered == b"\x00\x01"


class TestNegotiate:
    """Test cases for negotiate."""

    def test_no_auth(self, socket_pair):
        peer, local = socket_pair
        peer.sendall(b"\x05\x01\x00")

        assert negotiate(local) is AuthMethod.NO_AUTH
        assert peer.recv(2) == b"\x05\x00"

    def test_logs_debug_on_success(self, socket_pair, log_records):
        peer, local = socket_pair
        peer.sendall(b"\x05\x01\x00")

        negotiate(local)

        assert any(r["level"].name == "DEBUG" and "authenticated" in r["message"] for r in log_records)

    def test_bad_version(self, socket_pair):
        peer, local = socket_pair
        peer.sendall(b"\x04\x01\x00")

        with pytest.raises(ProtocolVersionError) as excinfo:
            negotiate(local)
        assert excinfo.value.version == 0x04
        assert_nothing_sent(peer)

    def test_zero_methods(self, socket_pair):
        peer, local = socket_pair
        peer.sendall(b"\x05\x00")

        with pytest.raises(NoAuthMethodsError):
            negotiate(local)
        assert_nothing_sent(peer)

    def test_short_method_list(self, socket_pair):
        peer, local = socket_pair
        peer.sendall(b"\x05\x03\x00")
        peer.shutdown(socket.SHUT_WR)

        with pytest.raises(FramingError) as excinfo:
            negotiate(local)
        assert (excinfo.value.expected, excinfo.value.received) == (3, 1)

    def test_empty_stream(self, socket_pair):
        peer, local = socket_pair
        peer.shutdown(socket.SHUT_WR)

        with pytest.raises(FramingError) as excinfo:
            negotiate(local)
        assert excinfo.value.received == 0

    def test_userpass_success(self, socket_pair):
        peer, local = socket_pair
        peer.sendall(b"\x05\x02\x00\x02" + userpass(*CREDENTIALS))

        assert negotiate(local, CREDENTIALS) is AuthMethod.USERNAME_PASSWORD
        assert peer.recv(4) == b"\x05\x02\x01\x00"

    @pytest.mark.parametrize(
        ("username", "password"),
        [
            (b"alice", b"wrong"),
            (b"bob", b"secret"),
            (b"alic", b"esecret"),
            (b"ALICE", b"secret"),
        ],
    )
    def test_userpass_mismatch(self, socket_pair, username, password):
        peer, local = socket_pair
        peer.sendall(b"\x05\x01\x02" + userpass(username, password))

        with pytest.raises(AuthenticationError):
            negotiate(local, CREDENTIALS)
        # Method selection was sent, the sub-negotiation status was not
        assert peer.recv(2) == b"\x05\x02"
        assert_nothing_sent(peer)

    def test_userpass_not_offered(self, socket_pair):
        peer, local = socket_pair
        peer.sendall(b"\x05\x01\x00")

        with pytest.raises(UnsupportedMethodError):
            negotiate(local, CREDENTIALS)
        assert_nothing_sent(peer)

    def test_userpass_bad_subnegotiation_version(self, socket_pair):
        peer, local = socket_pair
        peer.sendall(b"\x05\x01\x02" + b"\x05" + userpass(*CREDENTIALS)[1:])

        with pytest.raises(ProtocolVersionError) as excinfo:
            negotiate(local, CREDENTIALS)
        assert excinfo.value.expected == 0x01

    def test_userpass_truncated(self, socket_pair):
        peer, local = socket_pair
        peer.sendall(b"\x05\x01\x02\x01\x05ali")
        peer.shutdown(socket.SHUT_WR)

        with pytest.raises(FramingError):
            negotiate(local, CREDENTIALS)
