"""SOCKS5 reply encoding.

Replies always use ATYP 0x01, so the message is a fixed 10 bytes::

    VER | REP | RSV | ATYP | BND.ADDR(4) | BND.PORT(2)
"""

import ipaddress
import socket
import struct
from typing import Final

from socks5_proxy.core.exceptions import ReplyWriteError

from .protocol import RESERVED, SOCKS_VERSION, AddressType, ReplyStatus

UNSPECIFIED_ADDRESS: Final = "0.0.0.0"
REPLY_LENGTH: Final = 10


def _ipv4_bytes(host: str) -> bytes:
    """Pack ``host`` as 4 bytes; anything that is not IPv4 becomes zeros."""
    try:
        ip = ipaddress.ip_address(host.split("%", 1)[0])
    except ValueError:
        return bytes(4)
    if isinstance(ip, ipaddress.IPv6Address):
        ip = ip.ipv4_mapped
    return ip.packed if ip is not None else bytes(4)


def encode_reply(status: int, bind_host: str = UNSPECIFIED_ADDRESS, bind_port: int = 0) -> bytes:
    """Build a reply message.

    Args:
        status: REP field
        bind_host: Local address of the outbound connection
        bind_port: Local port of the outbound connection

    Returns:
        bytes: The 10-byte reply
    """
    header = struct.pack("!BBBB", SOCKS_VERSION, status, RESERVED, AddressType.IPV4)
    return header + _ipv4_bytes(bind_host) + struct.pack("!H", bind_port)


def send_reply(sock: socket.socket, status: int, bind_host: str = UNSPECIFIED_ADDRESS, bind_port: int = 0) -> None:
    """Encode and write a reply to the client.

    Raises:
        ReplyWriteError: If the write fails
    """
    try:
        sock.sendall(encode_reply(status, bind_host, bind_port))
    except OSError as e:
        raise ReplyWriteError(e) from e


def send_success(sock: socket.socket, bound: tuple) -> None:
    """Send the success reply for a target connection bound at ``bound``."""
    send_reply(sock, ReplyStatus.SUCCEEDED, bound[0], bound[1])


def send_failure(sock: socket.socket, status: int = ReplyStatus.HOST_UNREACHABLE) -> None:
    """Send a failure reply with zeroed bound address and port."""
    send_reply(sock, status)
