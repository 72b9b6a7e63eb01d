"""Logging utilities for the temperament tools."""

from owt.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
