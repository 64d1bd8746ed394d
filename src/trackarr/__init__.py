"""Declarative tracker site adapters and field extraction."""

__version__ = "0.1.0"
