"""Command line utilities for owt."""

from owt.cli.app import main, run_cli

__all__ = ["main", "run_cli"]
