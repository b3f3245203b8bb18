"""Trackline - live location tracking with a filterable history map."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("trackline")
except PackageNotFoundError:
    # Fallback for development without installation
    __version__ = "0.0.0-dev"

__author__ = "Pavel Mica"
