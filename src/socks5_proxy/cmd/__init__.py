"""Command line interface modules.

This package provides the ``socks5-proxy`` command, which turns options and
environment variables into a ``ProxyConfig``, sets up logging and runs the
server until interrupted.
"""
