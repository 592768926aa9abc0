"""SOCKS5 method selection and username/password sub-negotiation.

The negotiator reads the client greeting, picks a method and, when the
proxy is configured with credentials, runs the RFC 1929 exchange:

    client: VER | NMETHODS | METHODS
    server: VER | METHOD
    client: 0x01 | ULEN | UNAME | PLEN | PASSWD    (METHOD 0x02 only)
    server: 0x01 | STATUS

Failures raise and leave the reply unsent; the supervisor then closes the
connection.
"""

import socket
import struct
from typing import TYPE_CHECKING

from loguru import logger

from socks5_proxy.core.exceptions import (
    AuthenticationError,
    NoAuthMethodsError,
    ProtocolVersionError,
    UnsupportedMethodError,
)

from .protocol import AUTH_SUCCESS, SOCKS_VERSION, USERPASS_VERSION, AuthMethod, recv_exact

if TYPE_CHECKING:
    from loguru import Logger


def select_method(offered: bytes, credentials: tuple[bytes, bytes] | None) -> AuthMethod:
    """Choose the authentication method for a client.

    With credentials configured the client must offer username/password;
    without them no-auth is always chosen.
    """
    if credentials is None:
        return AuthMethod.NO_AUTH
    if AuthMethod.USERNAME_PASSWORD in offered:
        return AuthMethod.USERNAME_PASSWORD
    raise UnsupportedMethodError(offered, AuthMethod.USERNAME_PASSWORD)


def _verify_credentials(sock: socket.socket, credentials: tuple[bytes, bytes]) -> bytes:
    (version,) = recv_exact(sock, 1, "auth version")
    if version != USERPASS_VERSION:
        raise ProtocolVersionError(version, expected=USERPASS_VERSION)

    (ulen,) = recv_exact(sock, 1, "username length")
    username = recv_exact(sock, ulen, "username")
    (plen,) = recv_exact(sock, 1, "password length")
    password = recv_exact(sock, plen, "password")

    if (username, password) != credentials:
        raise AuthenticationError(username.decode(errors="replace"))

    sock.sendall(struct.pack("!BB", USERPASS_VERSION, AUTH_SUCCESS))
    return username


def negotiate(
    sock: socket.socket,
    credentials: tuple[bytes, bytes] | None = None,
    log: "Logger" = logger,
) -> AuthMethod:
    """Run the method-selection handshake on a freshly accepted client.

    Args:
        sock: Client socket
        credentials: Required (username, password), or None for no authentication
        log: Logger to report progress to

    Returns:
        AuthMethod: The method the client was authenticated with

    Raises:
        ProtocolVersionError: Greeting or sub-negotiation version is wrong
        NoAuthMethodsError: NMETHODS is zero
        FramingError: The greeting or credentials are truncated
        UnsupportedMethodError: Credentials are required but not offered
        AuthenticationError: Username or password does not match
    """
    version, nmethods = struct.unpack("!BB", recv_exact(sock, 2, "greeting"))
    if version != SOCKS_VERSION:
        raise ProtocolVersionError(version)
    if nmethods == 0:
        raise NoAuthMethodsError

    offered = recv_exact(sock, nmethods, "method list")
    method = select_method(offered, credentials)
    sock.sendall(struct.pack("!BB", SOCKS_VERSION, method))

    if credentials is not None and method is AuthMethod.USERNAME_PASSWORD:
        username = _verify_credentials(sock, credentials)
        log.debug(f"Client authenticated as {username.decode(errors='replace')!r}")
    else:
        log.debug("Client authenticated (no authentication required)")
    return method
