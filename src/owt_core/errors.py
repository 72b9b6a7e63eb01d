"""Exception types raised by the temperament solver."""

from __future__ import annotations

import math
from typing import Any, Mapping, MutableMapping, Optional, Sequence

__all__ = [
    "TemperamentError",
    "CriteriaError",
    "SingularSystemError",
]


def _json_safe(value: Any) -> Any:
    if isinstance(value, (str, int, bool)) or value is None:
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return str(value)


class TemperamentError(Exception):
    """Base class for errors raised while solving a temperament."""

    category = "runtime"

    def __init__(self, message: str, *, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        payload: MutableMapping[str, Any] = {}
        for key, value in (context or {}).items():
            payload[str(key)] = _json_safe(value)
        self.context: Mapping[str, Any] = dict(payload)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class CriteriaError(TemperamentError, ValueError):
    """Raised when a criteria record violates its preconditions."""

    category = "criteria"

    def __init__(
        self,
        message: str,
        *,
        field: str,
        expected: Any = None,
        actual: Any = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        merged = {"field": field, "expected": expected, "actual": actual}
        merged.update(context or {})
        super().__init__(message, context=merged)
        self.field = field
        self.expected = expected
        self.actual = actual


class SingularSystemError(TemperamentError, ArithmeticError):
    """Raised when the weighted normal equations have no unique solution.

    The weights leave at least one pitch undetermined (for instance an
    interval class or key set whose weights are all zero), so ``AᵗWA``
    cannot be inverted.
    """

    category = "singular"

    def __init__(
        self,
        message: str,
        *,
        shape: Sequence[int],
        condition: float,
        title: str | None = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        rows, cols = (int(value) for value in shape)
        merged: dict[str, Any] = {
            "design_rows": rows,
            "design_cols": cols,
            "normal_shape": [cols, cols],
            "condition": condition,
        }
        if title:
            merged["title"] = title
        merged.update(context or {})
        super().__init__(message, context=merged)
        self.shape = (rows, cols)
        self.normal_shape = (cols, cols)
        self.condition = condition
        self.title = title
