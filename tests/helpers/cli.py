"""Run the owt CLI against an isolated working directory."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pytest

from owt.cli import run_cli


def run_cli_in_tmp(
    args: Iterable[str],
    *,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> str:
    """Invoke :func:`owt.cli.run_cli` with ``tmp_path`` as the working directory.

    ``OWT_CONFIG`` is cleared so only a ``pyproject.toml`` written into
    ``tmp_path`` (or an explicit ``--config``) can influence the run.
    """

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OWT_CONFIG", raising=False)
    return run_cli(list(args))
