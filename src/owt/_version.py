"""Resolve and validate the installed ``owt`` version."""

from __future__ import annotations

import os
import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

__all__ = ["__version__", "RELEASE_ENV_VAR"]

PACKAGE_NAME = "owt"
RELEASE_ENV_VAR = "PYTHON_SEMANTIC_RELEASE_VERSION"

_CHANGELOG_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _changelog_version() -> str:
    """Read the newest ``## vX.Y.Z`` heading from a source checkout's changelog."""

    here = Path(__file__).resolve()
    for root in here.parents[1:3]:
        changelog = root / "CHANGELOG.md"
        if not changelog.is_file():
            continue
        for line in changelog.read_text(encoding="utf-8").splitlines():
            match = _CHANGELOG_HEADING.match(line)
            if match:
                return match.group("version")
    raise RuntimeError(
        f"Unable to determine the {PACKAGE_NAME!r} version from package metadata "
        "or CHANGELOG.md."
    )


def _raw_version() -> str:
    pinned = os.environ.get(RELEASE_ENV_VAR)
    if pinned:
        return pinned
    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return _changelog_version()


def _load_version() -> str:
    """Return the version, insisting on ``MAJOR.MINOR.PATCH``.

    ``PYTHON_SEMANTIC_RELEASE_VERSION`` overrides the distribution metadata so
    release builds can stamp the version before packaging.
    """

    raw = _raw_version()
    try:
        parsed = Version(raw)
    except InvalidVersion as exc:
        raise RuntimeError(f"Invalid version string for {PACKAGE_NAME!r}: {raw!r}.") from exc
    if len(parsed.release) != 3:
        raise RuntimeError(
            f"The {PACKAGE_NAME!r} version must follow MAJOR.MINOR.PATCH, found {raw!r}."
        )
    return raw


__version__ = _load_version()
