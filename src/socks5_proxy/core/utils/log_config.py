"""Logging configuration for the proxy server.

Centralised Loguru setup: a colourised console sink and, on request, a
rotating file sink under ``LOG_DIR``. Nothing is configured at import time;
the CLI calls ``configure_logging`` once at startup.
"""

import sys
from pathlib import Path

from loguru import logger

LOG_DIR = Path.home() / ".socks5-proxy" / "logs"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[client]} | {name}:{function}:{line} - {message}"


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Replace Loguru's default handler with the proxy's sinks.

    Args:
        level: Minimum level for the console sink
        log_file: Optional path of a rotating log file, which always logs at DEBUG
    """
    logger.remove()
    logger.configure(extra={"client": "-"})

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        backtrace=True,
        diagnose=False,
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            format=FILE_FORMAT,
            level="DEBUG",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )


__all__ = ["configure_logging", "logger", "LOG_DIR"]
