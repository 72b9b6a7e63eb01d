"""Core computation for optimal weighted temperaments."""

from __future__ import annotations

from owt_core.analysis import interval_errors, residuals, worst_intervals
from owt_core.criteria import DEFAULT_REPEAT_FACTOR, TemperamentCriteria
from owt_core.errors import CriteriaError, SingularSystemError, TemperamentError
from owt_core.observations import (
    Observation,
    build_design_matrix,
    build_target_vector,
    build_weight_vector,
    iter_observations,
)
from owt_core.solver import (
    DEFAULT_CONDITION_LIMIT,
    TemperamentResult,
    optimize_temperament,
    solve_temperament,
)

__all__ = [
    "DEFAULT_CONDITION_LIMIT",
    "DEFAULT_REPEAT_FACTOR",
    "CriteriaError",
    "Observation",
    "SingularSystemError",
    "TemperamentCriteria",
    "TemperamentError",
    "TemperamentResult",
    "build_design_matrix",
    "build_target_vector",
    "build_weight_vector",
    "interval_errors",
    "iter_observations",
    "optimize_temperament",
    "residuals",
    "solve_temperament",
    "worst_intervals",
]
