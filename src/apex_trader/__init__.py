"""Apex Trader paper trading backend."""

__version__ = "1.0.0"
