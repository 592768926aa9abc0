"""Command-line interface for the SOCKS5 proxy server.

This module provides the ``socks5-proxy`` command, handling:
- Command-line and environment variable options
- Building and validating the ``ProxyConfig``
- Logging setup
- Server lifecycle and error reporting

Example:
    # Run from command line:
    $ socks5-proxy serve --host 0.0.0.0 --port 1080
    $ SOCKS5_PROXY_USERNAME=alice SOCKS5_PROXY_PASSWORD=secret socks5-proxy serve --debug
"""

import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from socks5_proxy import __version__
from socks5_proxy.core.config import DEFAULT_HOST, DEFAULT_PORT
from socks5_proxy.core.proxy import ProxyConfig, run_server
from socks5_proxy.core.utils.log_config import LOG_DIR, configure_logging

console = Console()
app = typer.Typer(help="SOCKS5 CONNECT proxy server")


@app.callback(invoke_without_command=True)
def version_callback():
    """Show version information."""
    console.print(f"[cyan]SOCKS5 Proxy v{__version__}[/cyan]")


@app.command(name="serve")
def serve(
    host: str = typer.Option(DEFAULT_HOST, "--host", envvar="SOCKS5_PROXY_HOST", help="Address to listen on"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", envvar="SOCKS5_PROXY_PORT", help="Port to listen on"),
    username: str | None = typer.Option(
        None, "--username", "-u", envvar="SOCKS5_PROXY_USERNAME", help="Require this username"
    ),
    password: str | None = typer.Option(
        None, "--password", envvar="SOCKS5_PROXY_PASSWORD", help="Password for --username"
    ),
    handshake_timeout: float | None = typer.Option(
        None, "--handshake-timeout", help="Seconds allowed for authentication and request"
    ),
    connect_timeout: float | None = typer.Option(None, "--connect-timeout", help="Seconds allowed to reach the target"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write debug logs to this file"),
    debug: bool = typer.Option(
        default=False,
        help="Enable debug logging",
    ),
):
    """Start the SOCKS5 proxy server."""
    if debug and log_file is None:
        log_file = LOG_DIR / "proxy.log"
    configure_logging("DEBUG" if debug else "INFO", log_file)

    try:
        config = ProxyConfig(
            host=host,
            port=port,
            username=username,
            password=password,
            handshake_timeout=handshake_timeout,
            connect_timeout=connect_timeout,
        )
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}")
        raise typer.Exit(code=2) from e

    try:
        run_server(config)
    except OSError as e:
        logger.error(f"Cannot listen on {host}:{port}: {e}")
        console.print(f"[red]Error: cannot listen on {host}:{port}: {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    app()
