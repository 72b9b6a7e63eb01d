"""Exporter registry for solved temperaments."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Mapping, Protocol, Sequence

import numpy as np

__all__ = [
    "Exporter",
    "exporters_registry",
    "json_exporter",
    "markdown_exporter",
    "text_exporter",
]


class Exporter(Protocol):
    """Exporter callable protocol."""

    def __call__(self, results: Dict[str, Any]) -> str:  # pragma: no cover - interface only
        ...


def _normalise(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return _normalise(asdict(value))
    if isinstance(value, np.ndarray):
        return _normalise(value.tolist())
    if isinstance(value, np.generic):
        return _normalise(value.item())
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalise(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _normalise(item) for key, item in value.items()}
    return value


def _format_cents(value: Any) -> str:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return str(value)
    return f"{numeric:.3f}"


def _error_rows(results: Mapping[str, Any]) -> Sequence[Sequence[float]]:
    rows = results.get("interval_errors")
    if rows is None:
        return []
    return _normalise(rows)


def _header(results: Mapping[str, Any]) -> str:
    title = results.get("title") or "Optimal temperament"
    return str(title)


def json_exporter(results: Dict[str, Any]) -> str:
    payload = _normalise(results)
    return json.dumps(payload, indent=2, sort_keys=True)


def markdown_exporter(results: Dict[str, Any]) -> str:
    """Render the tuning, step sizes and optional error table as Markdown."""

    tuning = list(results.get("tuning", []))
    steps = list(results.get("steps", []))
    lines = [f"# {_header(results)}", ""]
    lines.append(
        f"- Pitches per cycle: {results.get('num_pitches')}"
    )
    lines.append(f"- Repeat factor: {_format_cents(results.get('repeat_factor'))}")
    lines.append(f"- Weighted residual (χ²): {results.get('chisq', 0.0):.6g}")
    lines.append("")
    lines.append("| Pitch | Position | Step |")
    lines.append("| --- | ---: | ---: |")
    positions = [0.0, *tuning]
    for index, position in enumerate(positions):
        step = steps[index] if index < len(steps) else None
        lines.append(
            f"| {index} | {_format_cents(position)} | "
            f"{_format_cents(step) if step is not None else ''} |"
        )
    errors = _error_rows(results)
    if errors:
        keys = len(errors[0]) if errors else 0
        lines.append("")
        lines.append("## Deviation from ideal intervals")
        lines.append("")
        lines.append("| Class | " + " | ".join(f"Key {key}" for key in range(keys)) + " |")
        lines.append("| --- |" + " ---: |" * keys)
        for interval_class, row in enumerate(errors):
            cells = " | ".join(_format_cents(value) for value in row)
            lines.append(f"| {interval_class + 1} | {cells} |")
    return "\n".join(lines)


def text_exporter(results: Dict[str, Any]) -> str:
    """Render a compact plain-text summary, one pitch per line."""

    tuning = list(results.get("tuning", []))
    lines = [_header(results)]
    width = len(str(len(tuning)))
    lines.append(f"{0:>{width}}  {_format_cents(0.0):>10}")
    for index, value in enumerate(tuning, start=1):
        lines.append(f"{index:>{width}}  {_format_cents(value):>10}")
    lines.append(f"chisq={results.get('chisq', 0.0):.6g}")
    return "\n".join(lines)


exporters_registry: Dict[str, Exporter] = {
    "json": json_exporter,
    "markdown": markdown_exporter,
    "text": text_exporter,
}
