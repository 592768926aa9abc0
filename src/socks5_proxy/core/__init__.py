"""Core proxy server implementation.

This package contains the SOCKS5 protocol and relay components:
- Address codec, method negotiation and request parsing
- Target dialing and reply encoding
- The bidirectional relay engine
- The threaded connection supervisor
- Configuration and exceptions

It is kept independent of the command line so it can be embedded or
tested directly.
"""
