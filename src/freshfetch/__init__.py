"""Staleness-gated downloads and hourly job registration."""

__version__ = "0.1.0"
