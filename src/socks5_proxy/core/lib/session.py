"""Per-connection session state."""

import contextlib
import socket
from dataclasses import dataclass

from .request import SocksRequest


def close_transport(sock: socket.socket | None) -> None:
    """Shut down and close ``sock``; safe to call repeatedly or with None.

    ``shutdown`` wakes any thread still blocked in ``recv`` on the socket,
    which a plain ``close`` does not do.
    """
    if sock is None:
        return
    with contextlib.suppress(OSError):
        sock.shutdown(socket.SHUT_RDWR)
    sock.close()


@dataclass
class Session:
    """Transports and negotiated request owned by one client connection.

    Attributes:
        client: Accepted client socket
        client_address: Peer address of ``client``
        target: Outbound socket, None until the dial succeeds
        request: Parsed request, None until parsing succeeds
    """

    client: socket.socket
    client_address: tuple
    target: socket.socket | None = None
    request: SocksRequest | None = None

    @property
    def closed(self) -> bool:
        return self.client.fileno() == -1 and (self.target is None or self.target.fileno() == -1)

    def close(self) -> None:
        """Release both transports. Idempotent."""
        close_transport(self.target)
        close_transport(self.client)
