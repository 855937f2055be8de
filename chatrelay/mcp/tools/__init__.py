"""FastMCP tool registrations grouped by domain."""

from . import weather  # noqa: F401

__all__ = ["weather"]
