"""Outbound connection to the requested destination."""

import socket
from typing import TYPE_CHECKING

from loguru import logger

from socks5_proxy.core.exceptions import ReplyWriteError, TargetUnreachableError

from .address import DecodedAddress
from .reply import send_failure

if TYPE_CHECKING:
    from loguru import Logger


def connect_target(
    client: socket.socket,
    address: DecodedAddress,
    timeout: float | None = None,
    log: "Logger" = logger,
) -> socket.socket:
    """Open a TCP connection to ``address``.

    Domain names are resolved here by the system resolver. The dial is not
    retried; on failure the client gets a host-unreachable reply.

    Args:
        client: Client socket, used to send the failure reply
        address: Destination from the request
        timeout: Dial timeout in seconds, or None to wait for the OS timeout
        log: Logger to report progress to

    Returns:
        socket.socket: Connected target socket in blocking mode

    Raises:
        TargetUnreachableError: If the connection cannot be established, including
            domain names the resolver cannot encode
    """
    log.debug(f"Connecting to target {address}")
    try:
        remote = socket.create_connection((address.host, address.port), timeout=timeout)
    except (OSError, UnicodeError) as e:
        try:
            send_failure(client)
        except ReplyWriteError as reply_error:
            log.debug(f"Could not deliver failure reply: {reply_error}")
        raise TargetUnreachableError(address.display_host, address.port, e) from e

    remote.settimeout(None)
    return remote
