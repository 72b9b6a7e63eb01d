"""Command handlers for the owt CLI."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from owt.batch import BatchOutcome, criteria_entries, solve_batch
from owt.cli.common import render_payload, resolve_exports
from owt.cli.errors import CliError
from owt.cli.io import inline_criteria_payload, load_criteria_payload
from owt.configuration import config_section
from owt.presets import get_preset, load_presets
from owt_core.analysis import interval_errors, worst_intervals
from owt_core.criteria import TemperamentCriteria
from owt_core.errors import TemperamentError
from owt_core.solver import DEFAULT_CONDITION_LIMIT, TemperamentResult, solve_temperament

__all__ = [
    "_default_condition_limit",
    "_default_max_workers",
    "_default_presets_path",
    "_handle_batch",
    "_handle_presets",
    "_handle_solve",
]

logger = logging.getLogger("owt.cli")


def _default_condition_limit(config: Mapping[str, Any]) -> float:
    raw = config_section(config, "solver").get("condition_limit")
    try:
        value = float(raw) if raw is not None else DEFAULT_CONDITION_LIMIT
    except (TypeError, ValueError):
        return DEFAULT_CONDITION_LIMIT
    return value if value > 0.0 else DEFAULT_CONDITION_LIMIT


def _default_max_workers(config: Mapping[str, Any]) -> int | None:
    raw = config_section(config, "batch").get("max_workers")
    try:
        return None if raw is None else max(1, int(raw))
    except (TypeError, ValueError):
        return None


def _default_presets_path(config: Mapping[str, Any]) -> Optional[Path]:
    raw = config_section(config, "presets").get("path")
    if not raw:
        return None
    path = Path(str(raw)).expanduser()
    source = config.get("_config_path")
    if not path.is_absolute() and source:
        path = Path(str(source)).parent / path
    return path


def _load_library(namespace: argparse.Namespace) -> Mapping[str, TemperamentCriteria]:
    path = getattr(namespace, "presets_path", None)
    try:
        return load_presets(path)
    except FileNotFoundError as exc:
        raise CliError(
            f"Preset library not found: {path}",
            category="not_found",
            context={"path": str(path)},
        ) from exc
    except TemperamentError as exc:
        raise CliError.from_temperament_error(exc, logger=logger) from exc
    except (TypeError, ValueError) as exc:
        raise CliError(
            f"Invalid preset library {path}: {exc}",
            category="io",
            context={"path": str(path)},
        ) from exc


def _select_entry(payload: Any, entry: Optional[str], source: Path) -> tuple[str, Any]:
    try:
        entries = criteria_entries(payload)
    except TypeError as exc:
        raise CliError(str(exc), category="criteria", context={"path": str(source)}) from exc
    if not entries:
        raise CliError(
            f"Criteria file {source} defines no entries.",
            category="criteria",
            context={"path": str(source)},
        )
    if entry is not None:
        for name, definition in entries:
            if name == entry:
                return name, definition
        raise CliError(
            f"Entry '{entry}' not found in {source}.",
            category="not_found",
            context={"path": str(source), "entry": entry},
        )
    if len(entries) > 1:
        raise CliError(
            f"Criteria file {source} defines {len(entries)} entries; select one with --entry.",
            category="usage",
            context={"path": str(source), "entries": [name for name, _ in entries]},
        )
    return entries[0]


def _resolve_criteria(namespace: argparse.Namespace) -> TemperamentCriteria:
    preset = getattr(namespace, "preset", None)
    criteria_path = getattr(namespace, "criteria_path", None)
    inline = inline_criteria_payload(namespace)
    selected = [source for source in (preset, criteria_path, inline) if source is not None]
    if len(selected) != 1:
        raise CliError(
            "Provide exactly one of --preset, --criteria or --ideal.",
            category="usage",
        )

    try:
        if preset is not None:
            library = _load_library(namespace)
            try:
                return get_preset(preset, library)
            except KeyError as exc:
                raise CliError(
                    f"Unknown preset '{preset}'.",
                    category="not_found",
                    context={"preset": preset, "available": sorted(library)},
                ) from exc
        if criteria_path is not None:
            payload = load_criteria_payload(criteria_path)
            name, definition = _select_entry(
                payload, getattr(namespace, "entry", None), criteria_path
            )
            title = definition.get("title") if isinstance(definition, Mapping) else None
            return TemperamentCriteria.from_mapping(definition, title=title or name)
        return TemperamentCriteria.from_mapping(inline or {})
    except TemperamentError as exc:
        raise CliError.from_temperament_error(exc, logger=logger) from exc


def _result_payload(result: TemperamentResult, *, include_errors: bool) -> dict[str, Any]:
    payload = result.as_dict()
    if include_errors:
        payload["interval_errors"] = interval_errors(result).tolist()
        payload["worst_intervals"] = [
            {"interval_class": interval_class, "key": key, "deviation": deviation}
            for interval_class, key, deviation in worst_intervals(result)
        ]
    return payload


def _handle_solve(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    criteria = _resolve_criteria(namespace)
    try:
        result = solve_temperament(criteria, condition_limit=namespace.condition_limit)
    except TemperamentError as exc:
        raise CliError.from_temperament_error(exc, logger=logger) from exc
    payload = _result_payload(result, include_errors=bool(getattr(namespace, "errors", False)))
    return render_payload(payload, resolve_exports(namespace))


def _handle_presets(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    library = _load_library(namespace)
    rows = [
        {
            "name": name,
            "title": criteria.title,
            "num_pitches": criteria.num_pitches,
            "repeat_factor": criteria.repeat_factor,
        }
        for name, criteria in sorted(library.items())
    ]
    exports = resolve_exports(namespace)
    rendered: list[str] = []
    for exporter_name in exports:
        if exporter_name == "json":
            rendered.append(json.dumps({"presets": rows}, indent=2, sort_keys=True))
        elif exporter_name == "markdown":
            lines = ["| Preset | Pitches | Title |", "| --- | ---: | --- |"]
            lines.extend(
                f"| {row['name']} | {row['num_pitches']} | {row['title'] or ''} |"
                for row in rows
            )
            rendered.append("\n".join(lines))
        else:
            width = max((len(row["name"]) for row in rows), default=0)
            rendered.append(
                "\n".join(
                    f"{row['name']:<{width}}  {row['num_pitches']:>3}  {row['title'] or ''}"
                    for row in rows
                )
            )
    return "\n\n".join(rendered)


def _render_outcome(outcome: BatchOutcome, exports: list[str]) -> str:
    if outcome.result is not None:
        return render_payload(outcome.result.as_dict(), exports)
    error = outcome.error or {}
    return f"{outcome.name}: failed ({error.get('category')}): {error.get('message')}"


def _handle_batch(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    source: Path = namespace.criteria_path
    payload = load_criteria_payload(source)
    try:
        entries = criteria_entries(payload)
    except TypeError as exc:
        raise CliError(str(exc), category="criteria", context={"path": str(source)}) from exc

    outcomes = solve_batch(
        entries,
        max_workers=namespace.max_workers,
        condition_limit=namespace.condition_limit,
    )
    exports = resolve_exports(namespace)
    if exports == ["json"]:
        rendered = json.dumps(
            {"outcomes": [outcome.as_dict() for outcome in outcomes]},
            indent=2,
            sort_keys=True,
            default=str,
        )
    else:
        rendered = "\n\n".join(_render_outcome(outcome, exports) for outcome in outcomes)

    failed = [outcome for outcome in outcomes if not outcome.ok]
    if failed and getattr(namespace, "strict", False):
        first = failed[0].error or {}
        raise CliError.from_context(
            f"{len(failed)} of {len(outcomes)} criteria entries could not be solved.",
            category=str(first.get("category") or "runtime"),
            context={
                "path": str(source),
                "failed": [outcome.name for outcome in failed],
            },
            logger=logger,
            output=rendered or None,
        )
    return rendered
