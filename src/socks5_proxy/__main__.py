"""Allow ``python -m socks5_proxy``."""

from socks5_proxy.cmd.cli import app

if __name__ == "__main__":
    app()
