"""Entry point for the ``owt`` console script."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from owt.cli.errors import CliError, log_cli_error
from owt.cli.parser import build_parser
from owt.configuration import load_cli_config
from owt.logging.config import setup_logging

_LOGGING_DEFAULTS = {"level": "info", "output": "stderr", "format": "json"}


def _bootstrap_parser() -> argparse.ArgumentParser:
    """Parser for the options needed before configuration is loaded."""

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", dest="config_path", type=Path, default=None)
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("--log-output", dest="log_output", default=None)
    parser.add_argument(
        "--log-format", dest="log_format", choices=("json", "text"), default=None
    )
    return parser


def _logging_settings(
    config: dict[str, Any], bootstrap: argparse.Namespace
) -> dict[str, Any]:
    settings = {**_LOGGING_DEFAULTS, **dict(config.get("logging") or {})}
    for key in ("level", "output", "format"):
        override = getattr(bootstrap, f"log_{key}")
        if override is not None:
            settings[key] = override
    return settings


def _emit(text: str) -> None:
    sys.stdout.write(text if text.endswith("\n") else f"{text}\n")


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Run one ``owt`` command and return the text written to stdout.

    Configuration is loaded first (``--config``, ``OWT_CONFIG`` or the
    ``pyproject.toml`` in the working directory) so it can seed logging and
    the subcommand defaults.  A :class:`CliError` ends the process with its
    category's exit status.
    """

    bootstrap, remaining = _bootstrap_parser().parse_known_args(args)
    config = load_cli_config(bootstrap.config_path)
    config["logging"] = _logging_settings(config, bootstrap)
    setup_logging(config)

    parser = build_parser(config)
    parser.set_defaults(
        config_path=bootstrap.config_path,
        log_level=config["logging"]["level"],
        log_output=config["logging"]["output"],
        log_format=config["logging"]["format"],
    )
    namespace = parser.parse_args(list(remaining), namespace=bootstrap)
    namespace.config = config

    try:
        output = namespace.handler(namespace, config=config)
    except CliError as exc:
        if not exc.logged:
            log_cli_error(exc.payload, exc_info=exc)
            exc.logged = True
        if exc.output:
            _emit(exc.output)
        if exc.payload.message:
            _emit(exc.payload.message)
        raise SystemExit(exc.status_code) from exc
    if output:
        _emit(output)
    return output


def main() -> None:  # pragma: no cover - console script
    run_cli()


if __name__ == "__main__":  # pragma: no cover
    main()
