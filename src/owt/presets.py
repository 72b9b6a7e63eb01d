"""Library of known temperament criteria."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as MappingABC
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from owt_core.criteria import TemperamentCriteria
from owt_core.errors import CriteriaError

__all__ = [
    "get_preset",
    "load_presets",
    "normalise_preset_name",
    "presets_from_mapping",
]


_PRESETS_RESOURCE_PACKAGE = "owt.resources"
_PRESETS_RESOURCE_NAME = "presets.yaml"


def normalise_preset_name(value: str | None) -> str | None:
    if value is None:
        return None
    filtered = [
        char for char in str(value).lower() if char.isalnum() or char in {"_", "-"}
    ]
    cleaned = "".join(filtered).replace("_", "-").strip("-")
    return cleaned or None


def presets_from_mapping(
    payload: Mapping[str, Any], *, source: str = "<mapping>"
) -> Mapping[str, TemperamentCriteria]:
    """Build criteria from a ``presets`` table.

    ``payload`` may either hold the entries directly or nest them under a
    ``presets`` key.  Each entry is converted with
    :meth:`TemperamentCriteria.from_mapping`; a missing ``title`` defaults
    to the entry name.
    """

    table = payload.get("presets", payload) if isinstance(payload, MappingABC) else None
    if not isinstance(table, MappingABC):
        raise TypeError(f"Preset table in {source!s} must decode to a mapping")
    presets: dict[str, TemperamentCriteria] = {}
    for raw_name, entry in table.items():
        name = normalise_preset_name(raw_name)
        if name is None:
            continue
        if not isinstance(entry, MappingABC):
            raise TypeError(f"Preset {raw_name!r} in {source!s} must be a mapping")
        try:
            criteria = TemperamentCriteria.from_mapping(
                entry, title=entry.get("title") or str(raw_name)
            )
        except CriteriaError as exc:
            raise CriteriaError(
                f"Invalid preset {raw_name!r} in {source}: {exc.message}",
                field=exc.field,
                expected=exc.expected,
                actual=exc.actual,
                context={"preset": str(raw_name), "source": source},
            ) from exc
        presets[name] = criteria
    return MappingProxyType(presets)


def load_presets(
    path: str | Path | None = None,
    *,
    search_paths: Iterable[str | Path] | None = None,
    include_bundled: bool = True,
) -> Mapping[str, TemperamentCriteria]:
    """Load the preset library honouring user-supplied overrides.

    Parameters
    ----------
    path:
        Path to a YAML file.  When supplied it must exist and its entries
        are layered over the bundled presets.
    search_paths:
        Optional iterable of directories or files to inspect.  Entries
        pointing to directories are resolved against ``presets.yaml``.  The
        first existing file wins.
    include_bundled:
        When ``False`` only the user file contributes presets.
    """

    merged: dict[str, TemperamentCriteria] = {}
    if include_bundled:
        resource = resources.files(_PRESETS_RESOURCE_PACKAGE).joinpath(
            _PRESETS_RESOURCE_NAME
        )
        merged.update(
            _load_presets_from_text(resource.read_text(encoding="utf-8"), source=str(resource))
        )

    user_file: Path | None = None
    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(candidate)
        user_file = candidate
    elif search_paths is not None:
        for entry in search_paths:
            entry_path = Path(entry).expanduser()
            if entry_path.is_dir():
                entry_path = entry_path / _PRESETS_RESOURCE_NAME
            if entry_path.is_file():
                user_file = entry_path
                break

    if user_file is not None:
        merged.update(
            _load_presets_from_text(
                user_file.read_text(encoding="utf-8"), source=str(user_file)
            )
        )
    return MappingProxyType(merged)


def get_preset(
    name: str, presets: Mapping[str, TemperamentCriteria] | None = None
) -> TemperamentCriteria:
    """Return the preset called ``name`` (case and punctuation insensitive)."""

    library = load_presets() if presets is None else presets
    key = normalise_preset_name(name)
    if key is not None and key in library:
        return library[key]
    for raw_key, criteria in library.items():
        if normalise_preset_name(raw_key) == key:
            return criteria
    raise KeyError(name)


def _load_presets_from_text(payload: str, *, source: str) -> Mapping[str, TemperamentCriteria]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in preset library: {source}") from exc
    if data is None:
        return MappingProxyType({})
    return presets_from_mapping(data, source=source)
