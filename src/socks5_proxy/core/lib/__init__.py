"""Core proxy library components."""

from .address import DecodedAddress, decode_address
from .auth import negotiate
from .connector import connect_target
from .proxy_server import SocksProxy, run_server
from .relay import RelayEngine
from .reply import encode_reply
from .request import SocksRequest, read_request
from .session import Session
from .socks_handler import SocksHandler

__all__ = [
    "connect_target",
    "decode_address",
    "DecodedAddress",
    "encode_reply",
    "negotiate",
    "read_request",
    "RelayEngine",
    "run_server",
    "Session",
    "SocksHandler",
    "SocksProxy",
    "SocksRequest",
]
