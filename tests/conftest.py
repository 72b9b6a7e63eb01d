from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from owt.logging.config import LOGGER_NAMES
from owt_core.criteria import TemperamentCriteria


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture(autouse=True)
def _reset_package_loggers():
    """Undo handlers installed by ``setup_logging`` between tests."""

    yield
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


@pytest.fixture
def testing_criteria() -> TemperamentCriteria:
    """Three-pitch criteria with a known optimal tuning."""

    return TemperamentCriteria(
        title="Testing",
        num_pitches=3,
        repeat_factor=1200.0,
        ideal_intervals=[0.0, 702.0],
        interval_weights=[1.0e-6, 1.0],
        key_weights=[1.0, 1.0e-4, 1.0],
    )


@pytest.fixture
def equal_twelve_criteria() -> TemperamentCriteria:
    return TemperamentCriteria(
        num_pitches=12,
        repeat_factor=1200.0,
        ideal_intervals=[100.0 * step for step in range(1, 12)],
        interval_weights=[1.0] * 11,
        key_weights=[1.0] * 12,
    )
