"""Command-line interface for PopStruct-Refinery."""

from .main import cli, main

__all__ = ["cli", "main"]
