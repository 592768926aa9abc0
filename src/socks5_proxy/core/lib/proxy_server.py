"""Threaded SOCKS5 proxy server.

``SocksProxy`` owns the listening socket and runs a single accept loop;
every accepted connection is handled by a ``SocksHandler`` in its own daemon
thread. There is no admission control: the number of concurrent sessions is
unbounded.

Accept errors are logged and the loop keeps going. The only fatal error is
failing to bind the listening socket, which surfaces as ``OSError`` from the
constructor.

Example:
    config = ProxyConfig(host="127.0.0.1", port=1080)
    run_server(config)
"""

import contextlib
import socket
import socketserver
from typing import TYPE_CHECKING

from loguru import logger

from socks5_proxy.core.config import ProxyConfig
from socks5_proxy.core.utils.utils import format_address

from .socks_handler import SocksHandler

if TYPE_CHECKING:
    from loguru import Logger


class SocksProxy(socketserver.ThreadingMixIn, socketserver.TCPServer):
    """SOCKS proxy server implementation.

    Attributes:
        config: Read-only configuration shared by every session
        logger: Logging sink handed to each session
    """

    allow_reuse_address = True
    daemon_threads = True
    request_queue_size = 100

    def __init__(
        self,
        config: ProxyConfig,
        handler_class: type[socketserver.BaseRequestHandler] = SocksHandler,
        log: "Logger" = logger,
        bind_and_activate: bool = True,
    ) -> None:
        self.config = config
        self.logger = log
        if ":" in config.host:
            self.address_family = socket.AF_INET6
        super().__init__(config.address, handler_class, bind_and_activate)

    def get_request(self) -> tuple[socket.socket, tuple]:
        """Accept a connection, logging failures before the loop skips them."""
        try:
            return super().get_request()
        except OSError as e:
            self.logger.error(f"Error accepting connection: {e}")
            raise

    def handle_error(self, request, client_address) -> None:
        self.logger.exception(f"Unhandled error serving {format_address(client_address)}")


def run_server(config: ProxyConfig, log: "Logger" = logger) -> None:
    """Serve SOCKS5 on ``config.address`` until interrupted.

    Args:
        config: Proxy configuration
        log: Logging sink for the server and its sessions

    Raises:
        OSError: If the listening socket cannot be bound
    """
    server = SocksProxy(config, log=log)
    try:
        log.info(f"SOCKS5 proxy listening on {format_address(server.server_address)}")
        if config.credentials is not None:
            log.info("Username/password authentication enabled")
        server.serve_forever()
    except KeyboardInterrupt:
        log.info("Received shutdown signal")
    finally:
        with contextlib.suppress(OSError):
            server.server_close()
        log.info("Server closed")
