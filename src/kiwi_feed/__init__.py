"""Append-only store and windowed feed reader for signed social actions."""

__version__ = "0.1.0"
