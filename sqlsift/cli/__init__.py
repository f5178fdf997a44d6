"""Command line interface for sqlsift."""

from .main import cli, main

__all__ = ["cli", "main"]
