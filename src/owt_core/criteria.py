"""Immutable criteria describing the temperament to optimise."""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from owt_core.errors import CriteriaError

__all__ = [
    "DEFAULT_REPEAT_FACTOR",
    "TemperamentCriteria",
]


DEFAULT_REPEAT_FACTOR = 1200.0

_KEY_ALIASES: Mapping[str, tuple[str, ...]] = {
    "num_pitches": ("num_pitches", "pitches"),
    "repeat_factor": ("repeat_factor", "repeat"),
    "ideal_intervals": ("ideal_intervals", "ideal"),
    "interval_weights": ("interval_weights",),
    "key_weights": ("key_weights",),
}


def _coerce_num_pitches(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise CriteriaError(
            f"num_pitches must be an integer, got {value!r}.",
            field="num_pitches",
            expected="integer >= 2",
            actual=value,
        )
    count = int(value)
    if count < 2:
        raise CriteriaError(
            f"num_pitches must be at least 2, got {count}.",
            field="num_pitches",
            expected="integer >= 2",
            actual=count,
        )
    return count


def _coerce_real(name: str, value: Any) -> float:
    if isinstance(value, (bool, str, bytes)):
        raise CriteriaError(
            f"{name} must be a real number, got {value!r}.",
            field=name,
            expected="finite real",
            actual=value,
        )
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise CriteriaError(
            f"{name} must be a real number, got {value!r}.",
            field=name,
            expected="finite real",
            actual=value,
        ) from exc
    if not math.isfinite(numeric):
        raise CriteriaError(
            f"{name} must be finite, got {numeric!r}.",
            field=name,
            expected="finite real",
            actual=numeric,
        )
    return numeric


def _coerce_vector(name: str, values: Any, expected_length: int) -> tuple[float, ...]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise CriteriaError(
            f"{name} must be a sequence of numbers.",
            field=name,
            expected=expected_length,
            actual=type(values).__name__,
        )
    coerced = tuple(_coerce_real(name, value) for value in values)
    if len(coerced) != expected_length:
        raise CriteriaError(
            f"{name} must contain exactly {expected_length} entries, got {len(coerced)}.",
            field=name,
            expected=expected_length,
            actual=len(coerced),
        )
    return coerced


def _lookup(payload: Mapping[str, Any], name: str) -> Any:
    for alias in _KEY_ALIASES[name]:
        if alias in payload:
            return payload[alias]
    return None


@dataclass(frozen=True, slots=True)
class TemperamentCriteria:
    """Target intervals and weights for one temperament solve.

    ``ideal_intervals`` and ``interval_weights`` hold one entry per interval
    class (``num_pitches - 1`` of them); ``key_weights`` holds one entry per
    root pitch.  The record validates itself on construction so that every
    downstream matrix builder can rely on consistent dimensions.
    """

    num_pitches: int
    repeat_factor: float
    ideal_intervals: Sequence[float]
    interval_weights: Sequence[float]
    key_weights: Sequence[float]
    title: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        count = _coerce_num_pitches(self.num_pitches)
        object.__setattr__(self, "num_pitches", count)
        object.__setattr__(
            self, "repeat_factor", _coerce_real("repeat_factor", self.repeat_factor)
        )
        object.__setattr__(
            self,
            "ideal_intervals",
            _coerce_vector("ideal_intervals", self.ideal_intervals, count - 1),
        )
        object.__setattr__(
            self,
            "interval_weights",
            _coerce_vector("interval_weights", self.interval_weights, count - 1),
        )
        object.__setattr__(
            self,
            "key_weights",
            _coerce_vector("key_weights", self.key_weights, count),
        )
        if self.title is not None:
            object.__setattr__(self, "title", str(self.title))

    @property
    def num_unknowns(self) -> int:
        return self.num_pitches - 1

    @property
    def num_observations(self) -> int:
        return self.num_pitches * (self.num_pitches - 1)

    @classmethod
    def from_mapping(
        cls, payload: Mapping[str, Any], *, title: str | None = None
    ) -> "TemperamentCriteria":
        """Build criteria from a decoded TOML/YAML/JSON table.

        ``interval_weights`` and ``key_weights`` default to uniform weights
        and ``repeat_factor`` defaults to an octave in cents.
        """

        if not isinstance(payload, MappingABC):
            raise CriteriaError(
                "Criteria definitions must be mappings.",
                field="criteria",
                expected="mapping",
                actual=type(payload).__name__,
            )
        raw_count = _lookup(payload, "num_pitches")
        ideal = _lookup(payload, "ideal_intervals")
        if raw_count is None and isinstance(ideal, (list, tuple)):
            raw_count = len(ideal) + 1
        if raw_count is None:
            raise CriteriaError(
                "Criteria definition is missing 'num_pitches'.",
                field="num_pitches",
                expected="integer >= 2",
                actual=None,
            )
        if ideal is None:
            raise CriteriaError(
                "Criteria definition is missing 'ideal_intervals'.",
                field="ideal_intervals",
                expected="sequence",
                actual=None,
            )
        count = _coerce_num_pitches(raw_count)
        repeat = _lookup(payload, "repeat_factor")
        interval_weights = _lookup(payload, "interval_weights")
        key_weights = _lookup(payload, "key_weights")
        resolved_title = title if title is not None else payload.get("title")
        return cls(
            num_pitches=count,
            repeat_factor=DEFAULT_REPEAT_FACTOR if repeat is None else repeat,
            ideal_intervals=ideal,
            interval_weights=(
                [1.0] * (count - 1) if interval_weights is None else interval_weights
            ),
            key_weights=[1.0] * count if key_weights is None else key_weights,
            title=resolved_title,
        )

    def scaled(
        self, interval_factor: float = 1.0, key_factor: float = 1.0
    ) -> "TemperamentCriteria":
        """Return a copy with every interval and key weight rescaled."""

        return TemperamentCriteria(
            num_pitches=self.num_pitches,
            repeat_factor=self.repeat_factor,
            ideal_intervals=self.ideal_intervals,
            interval_weights=[value * interval_factor for value in self.interval_weights],
            key_weights=[value * key_factor for value in self.key_weights],
            title=self.title,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "num_pitches": self.num_pitches,
            "repeat_factor": self.repeat_factor,
            "ideal_intervals": list(self.ideal_intervals),
            "interval_weights": list(self.interval_weights),
            "key_weights": list(self.key_weights),
        }
