"""Builders for the observation system of a temperament solve.

Every (interval class, key) pair contributes one equation.  Interval class
``c`` spans ``c + 1`` scale steps and ``key`` is the root pitch the interval
is measured from.  Rows are ordered interval class major, key minor, so the
row index of a pair is ``interval_class * num_pitches + key``.

Unknown ``j`` is the position of pitch ``j + 1``.  Pitch ``0`` is the
reference at position ``0`` and pitch ``num_pitches`` is the start of the
next cycle at ``repeat_factor``; neither has a column, and their constant
offsets are folded into the target vector instead.
"""

from __future__ import annotations

from itertools import product
from typing import Iterator, NamedTuple

import numpy as np

from owt_core.criteria import TemperamentCriteria
from owt_core.errors import CriteriaError

__all__ = [
    "Observation",
    "iter_observations",
    "build_design_matrix",
    "build_target_vector",
    "build_weight_vector",
]


class Observation(NamedTuple):
    """One (interval class, key) equation of the least-squares system."""

    interval_class: int
    key: int

    def row(self, num_pitches: int) -> int:
        return self.interval_class * num_pitches + self.key

    def crosses_cycle(self, num_pitches: int) -> bool:
        """Return ``True`` when the interval reaches past the cycle top."""

        return self.interval_class + self.key >= num_pitches - 1


def _require_pitches(num_pitches: int) -> int:
    count = int(num_pitches)
    if count < 2:
        raise CriteriaError(
            f"num_pitches must be at least 2, got {count}.",
            field="num_pitches",
            expected="integer >= 2",
            actual=count,
        )
    return count


def iter_observations(num_pitches: int) -> Iterator[Observation]:
    """Yield every observation in row order."""

    count = _require_pitches(num_pitches)
    for interval_class, key in product(range(count - 1), range(count)):
        yield Observation(interval_class, key)


def build_design_matrix(num_pitches: int) -> np.ndarray:
    """Return the ``n·(n-1) × (n-1)`` matrix mapping a tuning to intervals.

    Row ``r`` holds ``-1`` in the column of the interval's root and ``+1``
    in the column of its upper pitch, wrapped around the cycle.  Columns
    that would land on the reference pitch are omitted.
    """

    count = _require_pitches(num_pitches)
    unknowns = count - 1
    matrix = np.zeros((count * unknowns, unknowns), dtype=np.float64)
    for row, observation in enumerate(iter_observations(count)):
        neg_index = observation.key - 1
        pos_index = (observation.key + observation.interval_class) % count
        if 0 <= neg_index < unknowns:
            matrix[row, neg_index] = -1.0
        if 0 <= pos_index < unknowns:
            matrix[row, pos_index] = 1.0
    return matrix


def build_target_vector(criteria: TemperamentCriteria) -> np.ndarray:
    """Return the ideal interval size for every observation.

    Intervals that wrap past the top of the cycle are compared against the
    ideal size reduced by ``repeat_factor``.
    """

    count = criteria.num_pitches
    ideal = criteria.ideal_intervals
    target = np.empty(criteria.num_observations, dtype=np.float64)
    for row, observation in enumerate(iter_observations(count)):
        value = ideal[observation.interval_class]
        if observation.crosses_cycle(count):
            value -= criteria.repeat_factor
        target[row] = value
    return target


def build_weight_vector(criteria: TemperamentCriteria) -> np.ndarray:
    """Return ``interval_weights[c] * key_weights[k]`` for every observation.

    Each factor is finite, but their product can still overflow; that is
    rejected as a :class:`CriteriaError` naming both weight fields.
    """

    interval_weights = np.asarray(criteria.interval_weights, dtype=np.float64)
    key_weights = np.asarray(criteria.key_weights, dtype=np.float64)
    with np.errstate(over="ignore", invalid="ignore"):
        weights = np.outer(interval_weights, key_weights).ravel()
    if not np.isfinite(weights).all():
        raise CriteriaError(
            "interval_weights * key_weights overflows to a non-finite weight.",
            field="weights",
            expected="finite products",
            actual=int(np.count_nonzero(~np.isfinite(weights))),
        )
    return weights
