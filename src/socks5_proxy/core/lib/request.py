"""SOCKS5 request parsing.

Reads ``VER | CMD | RSV | ATYP`` and hands the rest of the request to the
address codec. Only CONNECT is supported.
"""

import socket
import struct
from dataclasses import dataclass

from socks5_proxy.core.exceptions import ProtocolVersionError, UnknownCommandError, UnsupportedCommandError

from .address import DecodedAddress, decode_address
from .protocol import SOCKS_VERSION, Command, recv_exact


@dataclass(frozen=True)
class SocksRequest:
    """A parsed client request."""

    command: Command
    address: DecodedAddress


def parse_command(value: int) -> Command:
    """Map a command byte to ``Command``, rejecting everything but CONNECT."""
    try:
        command = Command(value)
    except ValueError:
        raise UnknownCommandError(value) from None
    if command is not Command.CONNECT:
        raise UnsupportedCommandError(command, command.name)
    return command


def read_request(sock: socket.socket) -> SocksRequest:
    """Read a request from an authenticated client.

    Raises:
        ProtocolVersionError: VER is not 0x05
        UnsupportedCommandError: BIND or UDP ASSOCIATE was requested
        UnknownCommandError: CMD is not a SOCKS5 command
        UnsupportedAddressTypeError: ATYP is unknown
        FramingError: The request is truncated
    """
    version, cmd, _, atyp = struct.unpack("!BBBB", recv_exact(sock, 4, "request header"))
    if version != SOCKS_VERSION:
        raise ProtocolVersionError(version)

    command = parse_command(cmd)
    return SocksRequest(command, decode_address(sock, atyp))
