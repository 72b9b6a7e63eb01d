"""Weighted least-squares solver for optimal temperaments."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from owt_core.criteria import TemperamentCriteria
from owt_core.errors import SingularSystemError
from owt_core.observations import (
    build_design_matrix,
    build_target_vector,
    build_weight_vector,
)

__all__ = [
    "DEFAULT_CONDITION_LIMIT",
    "TemperamentResult",
    "optimize_temperament",
    "solve_temperament",
]

logger = logging.getLogger(__name__)


# Matrices whose condition number exceeds the reciprocal machine epsilon are
# numerically indistinguishable from singular ones.
DEFAULT_CONDITION_LIMIT = 1.0 / float(np.finfo(np.float64).eps)


@dataclass(frozen=True, slots=True)
class TemperamentResult:
    """Solved tuning together with fit diagnostics."""

    criteria: TemperamentCriteria
    tuning: tuple[float, ...]
    chisq: float
    condition: float

    @property
    def pitches(self) -> tuple[float, ...]:
        """Positions of every pitch of the cycle, reference and repeat included."""

        return (0.0, *self.tuning, self.criteria.repeat_factor)

    @property
    def steps(self) -> tuple[float, ...]:
        """Sizes of the ``num_pitches`` adjacent steps spanning one cycle."""

        positions = self.pitches
        return tuple(upper - lower for lower, upper in zip(positions, positions[1:]))

    def as_dict(self) -> dict[str, Any]:
        return {
            "title": self.criteria.title,
            "num_pitches": self.criteria.num_pitches,
            "repeat_factor": self.criteria.repeat_factor,
            "tuning": list(self.tuning),
            "steps": list(self.steps),
            "chisq": self.chisq,
            "condition": self.condition,
        }


def _condition_number(matrix: np.ndarray) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        value = float(np.linalg.cond(matrix))
    return value


def _singular(
    criteria: TemperamentCriteria,
    design: np.ndarray,
    condition: float,
    cause: BaseException | None = None,
) -> SingularSystemError:
    rows, cols = design.shape
    logger.debug(
        "Weighted temperament system is singular.",
        extra={
            "event": "solver.singular",
            "title": criteria.title,
            "num_pitches": criteria.num_pitches,
            "design_shape": [rows, cols],
            "condition": condition if math.isfinite(condition) else str(condition),
        },
    )
    error = SingularSystemError(
        (
            "Weighted system is singular: no unique tuning satisfies the given "
            f"weights (design matrix {rows}x{cols}, normal matrix {cols}x{cols})."
        ),
        shape=design.shape,
        condition=condition,
        title=criteria.title,
    )
    if cause is not None:
        error.__cause__ = cause
    return error


def solve_temperament(
    criteria: TemperamentCriteria,
    *,
    condition_limit: float = DEFAULT_CONDITION_LIMIT,
) -> TemperamentResult:
    """Solve the weighted normal equations ``(AᵗWA) x = AᵗWb``.

    Parameters
    ----------
    criteria:
        Validated target intervals and weights.
    condition_limit:
        Largest condition number of ``AᵗWA`` accepted as invertible.  Any
        system above it, or one that :func:`numpy.linalg.inv` rejects, raises
        :class:`~owt_core.errors.SingularSystemError`.  No pseudo-inverse
        fallback is attempted.
    """

    design = build_design_matrix(criteria.num_pitches)
    target = build_target_vector(criteria)
    weights = build_weight_vector(criteria)
    weight_matrix = np.diag(weights)

    with np.errstate(over="ignore", invalid="ignore"):
        weighted_design = design.T @ weight_matrix
        normal_matrix = weighted_design @ design
    if not np.isfinite(normal_matrix).all():
        raise _singular(criteria, design, math.nan)
    try:
        condition = _condition_number(normal_matrix)
    except np.linalg.LinAlgError as exc:
        raise _singular(criteria, design, math.nan, exc) from exc
    if not math.isfinite(condition) or condition > condition_limit:
        raise _singular(criteria, design, condition)
    try:
        inverse = np.linalg.inv(normal_matrix)
    except np.linalg.LinAlgError as exc:
        raise _singular(criteria, design, condition, exc) from exc

    solution = inverse @ weighted_design @ target
    residuals = design @ solution - target
    chisq = float(residuals @ (weights * residuals))

    logger.debug(
        "Temperament solved.",
        extra={
            "event": "solver.solved",
            "title": criteria.title,
            "num_pitches": criteria.num_pitches,
            "chisq": chisq,
            "condition": condition,
        },
    )
    return TemperamentResult(
        criteria=criteria,
        tuning=tuple(float(value) for value in solution),
        chisq=chisq,
        condition=condition,
    )


def optimize_temperament(criteria: TemperamentCriteria) -> np.ndarray:
    """Return the optimal tuning vector for ``criteria`` as an array."""

    return np.asarray(solve_temperament(criteria).tuning, dtype=np.float64)
