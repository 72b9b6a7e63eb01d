"""Argument parsing helpers for the owt CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from owt.cli.common import add_export_argument, default_export
from owt.cli.io import parse_float_list
from owt.cli.workflows import (
    _handle_batch,
    _handle_presets,
    _handle_solve,
    _default_condition_limit,
    _default_max_workers,
    _default_presets_path,
)


def _add_shared_solver_arguments(
    parser: argparse.ArgumentParser, config: Mapping[str, Any]
) -> None:
    parser.add_argument(
        "--condition-limit",
        dest="condition_limit",
        type=float,
        default=_default_condition_limit(config),
        help="Largest condition number of the normal matrix treated as invertible.",
    )


def _add_presets_argument(parser: argparse.ArgumentParser, config: Mapping[str, Any]) -> None:
    parser.add_argument(
        "--presets",
        dest="presets_path",
        type=Path,
        default=_default_presets_path(config),
        help="YAML preset library layered over the bundled presets.",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg_raw = config.get("logging", {})
    logging_cfg = dict(logging_cfg_raw) if isinstance(logging_cfg_raw, Mapping) else {}
    export_default = default_export(config)

    parser = argparse.ArgumentParser(
        description="owt – optimal weighted temperaments by least squares"
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding [tool.owt] settings.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    solve_parser = subparsers.add_parser(
        "solve",
        help="Compute the optimal tuning for one set of criteria.",
    )
    source_group = solve_parser.add_argument_group("criteria source")
    source_group.add_argument(
        "--preset",
        dest="preset",
        default=None,
        help="Name of a bundled or user preset.",
    )
    source_group.add_argument(
        "--criteria",
        dest="criteria_path",
        type=Path,
        default=None,
        help="TOML, YAML or JSON file describing the criteria.",
    )
    source_group.add_argument(
        "--entry",
        dest="entry",
        default=None,
        help="Entry to use when the criteria file defines several.",
    )
    inline_group = solve_parser.add_argument_group("inline criteria")
    inline_group.add_argument(
        "--pitches",
        dest="num_pitches",
        type=int,
        default=None,
        help="Pitches per cycle (default: one more than the ideal intervals).",
    )
    inline_group.add_argument(
        "--repeat",
        dest="repeat_factor",
        type=float,
        default=None,
        help="Size of one cycle (default: 1200 cents).",
    )
    inline_group.add_argument(
        "--ideal",
        dest="ideal_intervals",
        type=parse_float_list,
        default=None,
        help="Comma separated ideal interval sizes, one per interval class.",
    )
    inline_group.add_argument(
        "--interval-weights",
        dest="interval_weights",
        type=parse_float_list,
        default=None,
        help="Comma separated interval class weights (default: all 1).",
    )
    inline_group.add_argument(
        "--key-weights",
        dest="key_weights",
        type=parse_float_list,
        default=None,
        help="Comma separated key weights (default: all 1).",
    )
    inline_group.add_argument(
        "--title",
        dest="title",
        default=None,
        help="Label reported with the result.",
    )
    solve_parser.add_argument(
        "--errors",
        dest="errors",
        action="store_true",
        help="Include the deviation of every interval class in every key.",
    )
    _add_shared_solver_arguments(solve_parser, config)
    _add_presets_argument(solve_parser, config)
    add_export_argument(
        solve_parser,
        default=export_default,
        help_text="Exporter used to render the solved tuning.",
    )
    solve_parser.set_defaults(handler=_handle_solve)

    presets_parser = subparsers.add_parser(
        "presets",
        help="List the available temperament presets.",
    )
    _add_presets_argument(presets_parser, config)
    add_export_argument(
        presets_parser,
        default=export_default,
        help_text="Exporter used to render the preset list.",
    )
    presets_parser.set_defaults(handler=_handle_presets)

    batch_parser = subparsers.add_parser(
        "batch",
        help="Solve every criteria entry in a file, skipping singular ones.",
    )
    batch_parser.add_argument(
        "criteria_path",
        type=Path,
        help="TOML, YAML or JSON file with a 'criteria' list or table.",
    )
    batch_parser.add_argument(
        "--workers",
        dest="max_workers",
        type=int,
        default=_default_max_workers(config),
        help="Number of worker processes (default: solve sequentially).",
    )
    batch_parser.add_argument(
        "--strict",
        dest="strict",
        action="store_true",
        help="Exit with an error status when any entry fails.",
    )
    _add_shared_solver_arguments(batch_parser, config)
    add_export_argument(
        batch_parser,
        default=export_default,
        help_text="Exporter used to render each solved tuning.",
    )
    batch_parser.set_defaults(handler=_handle_batch)

    return parser
