"""HTTP status API."""

from .server import APIServer

__all__ = ["APIServer"]
