"""Exceptions raised by the SOCKS5 proxy core.

Every phase of a session (authentication, request parsing, dialing, replying
and relaying) reports failure through one of the classes below. The
connection supervisor catches them, logs them at error level and closes the
session's transports.

The hierarchy is::

    ProxyError
    ├── SocksProtocolError
    │   ├── ProtocolVersionError
    │   ├── FramingError
    │   ├── NoAuthMethodsError
    │   ├── UnsupportedMethodError
    │   ├── AuthenticationError
    │   ├── UnsupportedCommandError
    │   ├── UnknownCommandError
    │   └── UnsupportedAddressTypeError
    ├── TargetUnreachableError
    ├── ReplyWriteError
    └── RelayError
        └── MaxRetriesExceededError

Example:
    try:
        request = read_request(client)
    except UnsupportedCommandError as e:
        logger.error(f"Rejected command 0x{e.command:02x}: {e}")
"""


class ProxyError(Exception):
    """Base exception for proxy errors."""


class SocksProtocolError(ProxyError):
    """The client violated the SOCKS5 handshake; the session is dropped without a reply."""


class ProtocolVersionError(SocksProtocolError):
    """Raised when a message carries an unexpected version byte."""

    def __init__(self, version: int, expected: int = 0x05) -> None:
        self.version = version
        self.expected = expected
        super().__init__(f"Unsupported protocol version 0x{version:02x} (expected 0x{expected:02x})")


class FramingError(SocksProtocolError):
    """Raised when the peer sends fewer bytes than a field requires, or malformed ones."""

    def __init__(self, what: str, expected: int = 0, received: int = 0, detail: str | None = None) -> None:
        self.what = what
        self.expected = expected
        self.received = received
        if detail is not None:
            message = f"Malformed {what}: {detail}"
        elif received == 0:
            message = f"Connection closed before {what} was read"
        else:
            message = f"Short read on {what}: got {received} of {expected} bytes"
        super().__init__(message)


class NoAuthMethodsError(SocksProtocolError):
    """Raised when the client greeting offers zero authentication methods."""

    def __init__(self) -> None:
        super().__init__("Client offered no authentication methods")


class UnsupportedMethodError(SocksProtocolError):
    """Raised when none of the offered methods is acceptable."""

    def __init__(self, offered: bytes, required: int) -> None:
        self.offered = offered
        self.required = required
        methods = ", ".join(f"0x{m:02x}" for m in offered)
        super().__init__(f"Client did not offer required method 0x{required:02x} (offered: {methods})")


class AuthenticationError(SocksProtocolError):
    """Raised when username/password sub-negotiation fails."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Invalid credentials for user {username!r}")


class UnsupportedCommandError(SocksProtocolError):
    """Raised for BIND and UDP ASSOCIATE requests."""

    def __init__(self, command: int, name: str) -> None:
        self.command = command
        self.name = name
        super().__init__(f"Unsupported command {name} (0x{command:02x})")


class UnknownCommandError(SocksProtocolError):
    """Raised for a command byte outside the SOCKS5 command set."""

    def __init__(self, command: int) -> None:
        self.command = command
        super().__init__(f"Unknown command 0x{command:02x}")


class UnsupportedAddressTypeError(SocksProtocolError):
    """Raised when ATYP is not IPv4, domain name or IPv6."""

    def __init__(self, address_type: int) -> None:
        self.address_type = address_type
        super().__init__(f"Unsupported address type 0x{address_type:02x}")


class TargetUnreachableError(ProxyError):
    """Raised when the outbound connection to the destination cannot be opened."""

    def __init__(self, host: str, port: int, cause: Exception) -> None:
        self.host = host
        self.port = port
        self.cause = cause
        super().__init__(f"Cannot connect to {host}:{port}: {cause}")


class ReplyWriteError(ProxyError):
    """Raised when a reply cannot be written to the client."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Failed to send reply: {cause}")


class RelayError(ProxyError):
    """Raised when the data relay ends with a transport error."""


class MaxRetriesExceededError(RelayError):
    """Raised when a relay direction keeps hitting connection resets."""

    def __init__(self, direction: str, attempts: int) -> None:
        self.direction = direction
        self.attempts = attempts
        super().__init__(f"Relay {direction} gave up after {attempts} attempts")
