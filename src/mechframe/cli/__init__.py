"""Command line interface for MechFrame."""

from mechframe.cli.main import cli, main

__all__ = ["cli", "main"]
