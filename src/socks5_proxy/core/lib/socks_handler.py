"""SOCKS5 session handler.

One ``SocksHandler`` runs per accepted connection, in its own thread. It
drives the session through its phases strictly in order:

1. Method selection and optional username/password check
2. Request parsing (CONNECT only; IPv4, domain name and IPv6 destinations)
3. Dialing the destination (host-unreachable reply on failure)
4. Success reply carrying the outbound socket's bound address
5. Bidirectional relay until either side finishes

Any failure ends the session: it is logged at error level and both sockets
are closed. Clients get a SOCKS reply only for dial failures; earlier
protocol violations just close the connection.

Example:
    # The handler is used by the SocksProxy server class
    server = SocksProxy(config)
    server.serve_forever()
"""

import socketserver
from typing import TYPE_CHECKING

from socks5_proxy.core.exceptions import ProxyError
from socks5_proxy.core.utils.utils import format_address

from .auth import negotiate
from .connector import connect_target
from .relay import RelayEngine
from .reply import send_success
from .request import read_request
from .session import Session

if TYPE_CHECKING:
    from loguru import Logger

    from .proxy_server import SocksProxy


class SocksHandler(socketserver.BaseRequestHandler):
    """Handle incoming SOCKS5 connections."""

    server: "SocksProxy"

    def _run_session(self, session: Session, log: "Logger") -> None:
        config = self.server.config
        client = session.client

        client.settimeout(config.handshake_timeout)
        negotiate(client, config.credentials, log)
        session.request = read_request(client)
        client.settimeout(None)

        address = session.request.address
        session.target = connect_target(client, address, timeout=config.connect_timeout, log=log)
        send_success(client, session.target.getsockname())

        log.debug(f"Relaying {format_address(session.client_address)} <-> {address}")
        RelayEngine(client, session.target, log).run()

    def handle(self) -> None:
        """Handle incoming SOCKS5 connection."""
        peer = format_address(self.client_address)
        log = self.server.logger.bind(client=peer)
        session = Session(self.request, self.client_address)
        log.debug(f"Accepted connection from {peer}")

        try:
            self._run_session(session, log)
        except ProxyError as e:
            log.error(f"Session {peer} failed: {e}")
        except TimeoutError:
            log.error(f"Session {peer} timed out during handshake")
        except OSError as e:
            log.error(f"Session {peer} transport error: {e}")
        except Exception:
            log.exception(f"Unexpected error in session {peer}")
        finally:
            session.close()
            log.debug(f"Session {peer} closed")
