"""Command line interface for Chapter Master."""

from .main import cli, main

__all__ = ["cli", "main"]
