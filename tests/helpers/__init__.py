"""Convenience re-exports for test helpers."""

from tests.helpers.cli import run_cli_in_tmp
from tests.helpers.criteria import build_criteria, just_twelve_intervals

__all__ = ["build_criteria", "just_twelve_intervals", "run_cli_in_tmp"]
