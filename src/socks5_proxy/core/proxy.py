"""Main entry point for the SOCKS5 proxy core.

Exposes the pieces the command line needs: the configuration type, the
server class and the blocking ``run_server`` loop.

Example:
    from socks5_proxy.core.proxy import ProxyConfig, run_server

    run_server(ProxyConfig("127.0.0.1", 1080))
"""

from .config import ProxyConfig
from .lib import SocksProxy, run_server

__all__ = ["ProxyConfig", "run_server", "SocksProxy"]
