"""Read ``[tool.owt]`` settings from ``pyproject.toml``.

The CLI looks for configuration in three places, first match wins: the
``--config`` argument, the ``OWT_CONFIG`` environment variable and the
current working directory.  Each may name a ``pyproject.toml`` file or the
directory holding one.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping as ABCMapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore

__all__ = [
    "CONFIG_ENV_VAR",
    "config_section",
    "load_cli_config",
    "load_project_config",
    "load_toml_mapping",
]

CONFIG_ENV_VAR = "OWT_CONFIG"
PROJECT_FILENAME = "pyproject.toml"
TOOL_NAME = "owt"


def _plain(value: Any) -> Any:
    if isinstance(value, ABCMapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _pyproject_for(candidate: Path) -> Path | None:
    candidate = candidate.expanduser()
    if candidate.name == PROJECT_FILENAME:
        return candidate.resolve(strict=False)
    if candidate.suffix:
        return None
    return (candidate / PROJECT_FILENAME).resolve(strict=False)


def _candidate_sources(explicit: Path | None) -> Iterator[Path]:
    env_value = os.environ.get(CONFIG_ENV_VAR)
    raw = [explicit, Path(env_value) if env_value else None, Path.cwd()]
    visited: set[Path] = set()
    for base in raw:
        if base is None:
            continue
        resolved = base.expanduser().resolve(strict=False)
        if resolved not in visited:
            visited.add(resolved)
            yield resolved


def load_toml_mapping(path: Path) -> dict[str, Any] | None:
    """Parse ``path`` as TOML; ``None`` when the file does not exist."""

    if not path.exists():
        return None
    with path.open("rb") as handle:
        return _plain(tomllib.load(handle))


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Return the ``[tool.owt]`` table and the file it came from."""

    pyproject = _pyproject_for(path)
    if pyproject is None:
        return None
    document = load_toml_mapping(pyproject) or {}
    section = document.get("tool", {})
    section = section.get(TOOL_NAME) if isinstance(section, dict) else None
    if not isinstance(section, dict):
        return None
    return section, pyproject


def load_cli_config(path: Path | None = None) -> dict[str, Any]:
    """Load CLI defaults, recording the source under ``_config_path``."""

    for candidate in _candidate_sources(path):
        loaded = load_project_config(candidate)
        if loaded is not None:
            config, source = loaded
            config["_config_path"] = str(source)
            return config
    return {"_config_path": None}


def config_section(config: ABCMapping[str, Any] | None, name: str) -> dict[str, Any]:
    """Copy of ``config[name]``, or an empty dict when it is not a table."""

    section = config.get(name) if isinstance(config, ABCMapping) else None
    return dict(section) if isinstance(section, ABCMapping) else {}
