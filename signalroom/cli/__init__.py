"""Command-line interface for signalroom."""

from .server import cli

__all__ = ["cli"]
