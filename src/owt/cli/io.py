"""Criteria file loading for the owt CLI."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml

from owt.cli.errors import CliError
from owt.configuration import load_toml_mapping

__all__ = [
    "CRITERIA_SUFFIXES",
    "load_criteria_payload",
    "inline_criteria_payload",
    "parse_float_list",
]


CRITERIA_SUFFIXES = {
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
}


def _decode(path: Path, fmt: str) -> Any:
    if fmt == "toml":
        return load_toml_mapping(path)
    text = path.read_text(encoding="utf-8")
    if fmt == "yaml":
        return yaml.safe_load(text)
    return json.loads(text)


def load_criteria_payload(path: Path) -> Any:
    """Decode a TOML, YAML or JSON criteria file.

    The decoder is selected by file suffix.  Unreadable or undecodable files
    raise :class:`CliError` in the ``io`` category, missing files in
    ``not_found``.
    """

    source = Path(path).expanduser()
    if not source.is_file():
        raise CliError(
            f"Criteria file not found: {source}",
            category="not_found",
            context={"path": str(source)},
        )
    fmt = CRITERIA_SUFFIXES.get(source.suffix.lower())
    if fmt is None:
        raise CliError(
            f"Unsupported criteria format '{source.suffix}'. "
            f"Use one of: {', '.join(sorted(CRITERIA_SUFFIXES))}.",
            category="usage",
            context={"path": str(source)},
        )
    try:
        payload = _decode(source, fmt)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise CliError(
            f"Unable to read criteria file {source}: {exc}",
            category="io",
            context={"path": str(source), "format": fmt},
        ) from exc
    if payload is None:
        raise CliError(
            f"Criteria file {source} is empty.",
            category="io",
            context={"path": str(source), "format": fmt},
        )
    return payload


def parse_float_list(value: str) -> List[float]:
    """``argparse`` type for comma or whitespace separated numbers."""

    tokens = [token for token in value.replace(",", " ").split() if token]
    try:
        return [float(token) for token in tokens]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Expected a list of numbers, got {value!r}"
        ) from exc


def inline_criteria_payload(namespace: argparse.Namespace) -> Optional[dict[str, Any]]:
    """Build a criteria mapping from ``--pitches``/``--ideal``… flags."""

    ideal: Optional[Sequence[float]] = getattr(namespace, "ideal_intervals", None)
    if ideal is None:
        return None
    payload: dict[str, Any] = {"ideal_intervals": list(ideal)}
    for attribute in ("num_pitches", "repeat_factor", "interval_weights", "key_weights", "title"):
        value = getattr(namespace, attribute, None)
        if value is not None:
            payload[attribute] = value
    return payload
