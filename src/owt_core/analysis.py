"""Residual diagnostics for solved temperaments."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from owt_core.criteria import TemperamentCriteria
from owt_core.observations import build_design_matrix, build_target_vector
from owt_core.solver import TemperamentResult

__all__ = ["interval_errors", "residuals", "worst_intervals"]


def residuals(
    criteria: TemperamentCriteria, tuning: Sequence[float]
) -> np.ndarray:
    """Return ``A·x − b`` for ``tuning``, one entry per observation.

    Entries are not scaled by the observation weights; they are the signed
    deviations, in ``repeat_factor`` units, that the weighted fit
    minimises.
    """

    solution = np.asarray(tuning, dtype=np.float64)
    if solution.shape != (criteria.num_unknowns,):
        raise ValueError(
            f"Tuning must contain {criteria.num_unknowns} values, got {solution.size}."
        )
    design = build_design_matrix(criteria.num_pitches)
    return design @ solution - build_target_vector(criteria)


def interval_errors(result: TemperamentResult) -> np.ndarray:
    """Return deviations from the ideal intervals as a class × key table."""

    criteria = result.criteria
    deviations = residuals(criteria, result.tuning)
    return deviations.reshape(criteria.num_unknowns, criteria.num_pitches)


def worst_intervals(
    result: TemperamentResult, limit: int = 5
) -> list[tuple[int, int, float]]:
    """Return the ``limit`` largest deviations as ``(class, key, cents)``."""

    table = interval_errors(result)
    order = np.argsort(-np.abs(table), axis=None, kind="stable")
    worst: list[tuple[int, int, float]] = []
    for flat_index in order[: max(0, int(limit))]:
        interval_class, key = np.unravel_index(flat_index, table.shape)
        worst.append((int(interval_class), int(key), float(table[interval_class, key])))
    return worst
