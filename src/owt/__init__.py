"""Top-level package for owt.

owt computes optimal weighted temperaments: the tuning of a repeating
pitch cycle that best approximates a set of ideal intervals across every
key, weighted by how much each interval class and each key matters.  The
numerical core lives in :mod:`owt_core`; this package adds configuration,
the preset library, exporters, batch solving and the command line tool.
"""

from ._version import __version__
from owt_core import (
    CriteriaError,
    SingularSystemError,
    TemperamentCriteria,
    TemperamentError,
    TemperamentResult,
    interval_errors,
    optimize_temperament,
    solve_temperament,
)
from .batch import BatchOutcome, criteria_entries, solve_batch
from .exporters import exporters_registry
from .presets import get_preset, load_presets

__all__ = [
    "BatchOutcome",
    "CriteriaError",
    "SingularSystemError",
    "TemperamentCriteria",
    "TemperamentError",
    "TemperamentResult",
    "__version__",
    "criteria_entries",
    "exporters_registry",
    "get_preset",
    "interval_errors",
    "load_presets",
    "optimize_temperament",
    "solve_batch",
    "solve_temperament",
]
