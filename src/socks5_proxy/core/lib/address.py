"""SOCKS5 address codec.

Decodes the ``ATYP | DST.ADDR | DST.PORT`` tail of a request into a
``DecodedAddress`` and encodes it back. Supported address types:

- IPv4: 4 bytes, rendered as a dotted quad
- Domain name: 1-byte length prefix followed by exactly that many bytes
- IPv6: 16 bytes, rendered in compressed form

Domain names are kept as text (bytes that are not UTF-8 survive as surrogate
escapes); resolution happens when the target is dialed.

Example:
    address = decode_address(client, atyp)
    print(f"{address.host}:{address.port}")
"""

import ipaddress
import socket
import struct
from dataclasses import dataclass

from socks5_proxy.core.exceptions import UnsupportedAddressTypeError

from .protocol import AddressType, recv_exact

ADDRESS_LENGTHS = {
    AddressType.IPV4: 4,
    AddressType.IPV6: 16,
}


@dataclass(frozen=True)
class DecodedAddress:
    """Destination requested by the client.

    Attributes:
        address_type: ATYP the client used
        host: Dotted quad, compressed IPv6 text or the raw domain name
        port: Destination port
    """

    address_type: AddressType
    host: str
    port: int

    def to_bytes(self) -> bytes:
        """Encode as ``ATYP | ADDR | PORT`` wire bytes."""
        if self.address_type is AddressType.DOMAIN:
            name = self.host.encode(errors="surrogateescape")
            if len(name) > 0xFF:
                raise ValueError(f"Domain name too long: {len(name)} bytes")
            body = struct.pack("!B", len(name)) + name
        else:
            body = ipaddress.ip_address(self.host).packed
        return struct.pack("!B", self.address_type) + body + struct.pack("!H", self.port)

    @property
    def display_host(self) -> str:
        """Host safe to print, with undecodable domain bytes shown as escapes."""
        return self.host.encode(errors="surrogateescape").decode(errors="backslashreplace")

    def __str__(self) -> str:
        if self.address_type is AddressType.IPV6:
            return f"[{self.host}]:{self.port}"
        return f"{self.display_host}:{self.port}"


def _decode_host(sock: socket.socket, address_type: AddressType) -> str:
    if address_type is AddressType.DOMAIN:
        (length,) = recv_exact(sock, 1, "domain length")
        raw = recv_exact(sock, length, "domain name")
        # Undecodable bytes are kept and left for the dial to reject
        return raw.decode(errors="surrogateescape")

    raw = recv_exact(sock, ADDRESS_LENGTHS[address_type], f"{address_type.name} address")
    return str(ipaddress.ip_address(raw))


def decode_address(sock: socket.socket, atyp: int) -> DecodedAddress:
    """Read a destination address and port from ``sock``.

    Args:
        sock: Client socket positioned just after the ATYP byte
        atyp: The ATYP byte already read from the request header

    Returns:
        DecodedAddress: The decoded destination

    Raises:
        UnsupportedAddressTypeError: If ``atyp`` is not IPv4, domain or IPv6
        FramingError: If the address or port is truncated
    """
    try:
        address_type = AddressType(atyp)
    except ValueError:
        raise UnsupportedAddressTypeError(atyp) from None

    host = _decode_host(sock, address_type)
    (port,) = struct.unpack("!H", recv_exact(sock, 2, "port"))
    return DecodedAddress(address_type, host, port)
