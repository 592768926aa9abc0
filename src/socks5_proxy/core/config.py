"""Proxy server configuration.

A single ``ProxyConfig`` instance is built at startup (usually by the CLI)
and handed to the server. It is frozen, so every session can read it without
locking.

Example:
    config = ProxyConfig(host="0.0.0.0", port=1080, username="alice", password="secret")
    run_server(config)
"""

from dataclasses import dataclass
from typing import Final

DEFAULT_HOST: Final = "127.0.0.1"
DEFAULT_PORT: Final = 1080

# RFC 1929 encodes ULEN and PLEN in a single byte
MAX_CREDENTIAL_LENGTH: Final = 255


@dataclass(frozen=True)
class ProxyConfig:
    """Listen address, optional credentials and optional session timeouts.

    Attributes:
        host: Address to listen on
        port: Port to listen on (0 picks an ephemeral port)
        username: Username required from clients, or None for no authentication
        password: Password matching ``username``
        handshake_timeout: Seconds allowed for authentication and request parsing
        connect_timeout: Seconds allowed for dialing the destination
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: str | None = None
    password: str | None = None
    handshake_timeout: float | None = None
    connect_timeout: float | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"Port out of range: {self.port}")

        if (self.username is None) != (self.password is None):
            raise ValueError("Username and password must be given together")

        if self.username is not None and self.password is not None:
            for name, value in (("username", self.username), ("password", self.password)):
                length = len(value.encode())
                if not 1 <= length <= MAX_CREDENTIAL_LENGTH:
                    raise ValueError(f"{name} must be 1-{MAX_CREDENTIAL_LENGTH} bytes, got {length}")

        for name, timeout in (("handshake_timeout", self.handshake_timeout), ("connect_timeout", self.connect_timeout)):
            if timeout is not None and timeout <= 0:
                raise ValueError(f"{name} must be positive, got {timeout}")

    @property
    def credentials(self) -> tuple[bytes, bytes] | None:
        """Configured username and password as wire bytes, or None."""
        if self.username is None or self.password is None:
            return None
        return self.username.encode(), self.password.encode()

    @property
    def address(self) -> tuple[str, int]:
        return self.host, self.port
