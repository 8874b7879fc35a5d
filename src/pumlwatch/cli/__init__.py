"""pumlwatch command-line interface."""

from pumlwatch.cli.main import cli, main

__all__ = ["cli", "main"]
