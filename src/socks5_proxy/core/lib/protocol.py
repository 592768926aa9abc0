"""SOCKS5 wire constants and low-level socket reads.

Values follow RFC 1928 (SOCKS Protocol Version 5) and RFC 1929
(Username/Password Authentication for SOCKS V5).
"""

import socket
from enum import IntEnum
from typing import Final

from socks5_proxy.core.exceptions import FramingError

SOCKS_VERSION: Final = 0x05
USERPASS_VERSION: Final = 0x01
RESERVED: Final = 0x00

# RFC 1929 sub-negotiation status
AUTH_SUCCESS: Final = 0x00


class AuthMethod(IntEnum):
    NO_AUTH = 0x00
    GSSAPI = 0x01
    USERNAME_PASSWORD = 0x02
    NO_ACCEPTABLE = 0xFF


class Command(IntEnum):
    CONNECT = 0x01
    BIND = 0x02
    UDP_ASSOCIATE = 0x03


class AddressType(IntEnum):
    IPV4 = 0x01
    DOMAIN = 0x03
    IPV6 = 0x04


class ReplyStatus(IntEnum):
    SUCCEEDED = 0x00
    GENERAL_FAILURE = 0x01
    NOT_ALLOWED = 0x02
    NETWORK_UNREACHABLE = 0x03
    HOST_UNREACHABLE = 0x04
    CONNECTION_REFUSED = 0x05
    TTL_EXPIRED = 0x06
    COMMAND_NOT_SUPPORTED = 0x07
    ADDRESS_TYPE_NOT_SUPPORTED = 0x08


def recv_exact(sock: socket.socket, size: int, what: str) -> bytes:
    """Receive exactly ``size`` bytes from ``sock``.

    Args:
        sock: Connected socket to read from
        size: Number of bytes required
        what: Field name used in the error message

    Returns:
        bytes: Exactly ``size`` bytes

    Raises:
        FramingError: If the peer closes before ``size`` bytes arrive. ``received``
            is 0 when nothing at all was read, so callers can tell an empty
            stream from a truncated field.
        OSError: On transport errors, unchanged
    """
    buf = bytearray()
    while len(buf) < size:
        chunk = sock.recv(size - len(buf))
        if not chunk:
            raise FramingError(what, expected=size, received=len(buf))
        buf += chunk
    return bytes(buf)
