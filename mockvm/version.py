"""mockvm.version — installed distribution version, BASE_VERSION otherwise."""

from __future__ import annotations

from importlib import metadata as importlib_metadata

BASE_VERSION = "0.1.0"


def installed_version(dist_name: str = "mockvm") -> str:
    try:
        return importlib_metadata.version(dist_name)
    except importlib_metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = installed_version()

__all__ = ["__version__", "BASE_VERSION", "installed_version"]
