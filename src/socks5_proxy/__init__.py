"""Threaded SOCKS5 CONNECT proxy with optional username/password authentication."""

import pathlib
import sys
from importlib import metadata

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

DISTRIBUTION_NAME = "socks5-proxy"


def get_version() -> str:
    """Return the installed version, falling back to the nearest pyproject.toml."""
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        pass

    current_dir = pathlib.Path(__file__).parent
    for parent in [current_dir, *current_dir.parents]:
        pyproject_path = parent / "pyproject.toml"
        if pyproject_path.exists():
            with pyproject_path.open("rb") as f:
                return tomllib.load(f)["project"]["version"]

    return "0.0.0"


__version__ = get_version()
