"""Exporter selection shared by the owt subcommands."""

from __future__ import annotations

import argparse
from typing import Any, Mapping, Sequence

from owt.cli.errors import CliError
from owt.configuration import config_section
from owt.exporters import exporters_registry

__all__ = [
    "add_export_argument",
    "default_export",
    "render_payload",
    "resolve_exports",
    "validated_export",
]


def validated_export(value: Any, *, fallback: str) -> str:
    return value if isinstance(value, str) and value in exporters_registry else fallback


def default_export(config: Mapping[str, Any], *, fallback: str = "text") -> str:
    """Exporter named by ``[tool.owt.export] default``, if it is registered."""

    return validated_export(config_section(config, "export").get("default"), fallback=fallback)


def add_export_argument(
    parser: argparse.ArgumentParser, *, default: str, help_text: str
) -> None:
    """Add a repeatable ``--export`` flag; ``default`` applies when it is absent."""

    parser.add_argument(
        "--export",
        dest="exports",
        action="append",
        choices=sorted(exporters_registry),
        help=f"{help_text} Repeat the flag to combine exporters.",
    )
    parser.set_defaults(exports=None, export_default=default)


def resolve_exports(namespace: argparse.Namespace) -> list[str]:
    requested = getattr(namespace, "exports", None)
    if requested:
        return list(dict.fromkeys(requested))
    fallback = getattr(namespace, "export_default", None)
    if not isinstance(fallback, str):
        raise CliError("No exporter configured for this command.", category="usage")
    return [fallback]


def render_payload(payload: Mapping[str, Any], exporters: Sequence[str] | str) -> str:
    """Render ``payload`` with each exporter, separated by blank lines."""

    names = [exporters] if isinstance(exporters, str) else list(dict.fromkeys(exporters))
    return "\n\n".join(exporters_registry[name](dict(payload)) for name in names)
