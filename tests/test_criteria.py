from __future__ import annotations

import dataclasses
import math

import pytest

from owt_core.criteria import DEFAULT_REPEAT_FACTOR, TemperamentCriteria
from owt_core.errors import CriteriaError, TemperamentError


def _criteria(**overrides):
    payload = {
        "num_pitches": 3,
        "repeat_factor": 1200.0,
        "ideal_intervals": [0.0, 702.0],
        "interval_weights": [1.0e-6, 1.0],
        "key_weights": [1.0, 1.0e-4, 1.0],
    }
    payload.update(overrides)
    return TemperamentCriteria(**payload)


def test_sequences_are_normalised_to_float_tuples() -> None:
    criteria = _criteria(ideal_intervals=[0, 702])

    assert criteria.ideal_intervals == (0.0, 702.0)
    assert isinstance(criteria.key_weights, tuple)
    assert all(isinstance(value, float) for value in criteria.ideal_intervals)
    assert criteria.num_unknowns == 2
    assert criteria.num_observations == 6


@pytest.mark.parametrize(
    "field, value",
    [
        ("ideal_intervals", [0.0]),
        ("ideal_intervals", [0.0, 702.0, 1000.0]),
        ("interval_weights", [1.0]),
        ("key_weights", [1.0, 1.0]),
        ("key_weights", [1.0, 1.0, 1.0, 1.0]),
    ],
)
def test_length_mismatch_names_the_field(field: str, value: list[float]) -> None:
    with pytest.raises(CriteriaError) as excinfo:
        _criteria(**{field: value})

    error = excinfo.value
    assert error.field == field
    assert error.actual == len(value)
    assert error.context["field"] == field
    assert isinstance(error, ValueError)
    assert isinstance(error, TemperamentError)


@pytest.mark.parametrize("num_pitches", [1, 0, -2, True, 2.5, "3"])
def test_invalid_num_pitches_is_rejected(num_pitches: object) -> None:
    with pytest.raises(CriteriaError) as excinfo:
        _criteria(num_pitches=num_pitches)

    assert excinfo.value.field == "num_pitches"


@pytest.mark.parametrize("value", [math.nan, math.inf, "wide", None])
def test_non_finite_values_are_rejected(value: object) -> None:
    with pytest.raises(CriteriaError) as excinfo:
        _criteria(ideal_intervals=[0.0, value])

    assert excinfo.value.field == "ideal_intervals"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"repeat_factor": "1200"}, "repeat_factor"),
        ({"ideal_intervals": ["0", "702"]}, "ideal_intervals"),
        ({"interval_weights": [1.0e-6, b"1"]}, "interval_weights"),
        ({"key_weights": [1.0, "1e-4", 1.0]}, "key_weights"),
    ],
)
def test_numeric_strings_are_not_real_numbers(overrides: dict, field: str) -> None:
    with pytest.raises(CriteriaError) as excinfo:
        _criteria(**overrides)

    assert excinfo.value.field == field


def test_repeat_factor_must_be_finite() -> None:
    with pytest.raises(CriteriaError) as excinfo:
        _criteria(repeat_factor=math.inf)

    assert excinfo.value.field == "repeat_factor"


def test_scalar_weights_are_rejected() -> None:
    with pytest.raises(CriteriaError) as excinfo:
        _criteria(key_weights=1.0)

    assert excinfo.value.field == "key_weights"


def test_criteria_are_frozen() -> None:
    criteria = _criteria()

    with pytest.raises(dataclasses.FrozenInstanceError):
        criteria.num_pitches = 4  # type: ignore[misc]


def test_title_does_not_affect_equality() -> None:
    assert _criteria(title="A") == _criteria(title="B")
    assert hash(_criteria(title="A")) == hash(_criteria())


def test_from_mapping_applies_defaults() -> None:
    criteria = TemperamentCriteria.from_mapping({"ideal_intervals": [400.0, 700.0]})

    assert criteria.num_pitches == 3
    assert criteria.repeat_factor == DEFAULT_REPEAT_FACTOR
    assert criteria.interval_weights == (1.0, 1.0)
    assert criteria.key_weights == (1.0, 1.0, 1.0)
    assert criteria.title is None


def test_from_mapping_accepts_aliases_and_title() -> None:
    criteria = TemperamentCriteria.from_mapping(
        {
            "pitches": 3,
            "repeat": 1901.955,
            "ideal": [0.0, 702.0],
            "interval_weights": [1.0, 2.0],
            "title": "Tritave",
        }
    )

    assert criteria.repeat_factor == 1901.955
    assert criteria.interval_weights == (1.0, 2.0)
    assert criteria.title == "Tritave"


def test_from_mapping_prefers_explicit_title() -> None:
    criteria = TemperamentCriteria.from_mapping(
        {"ideal_intervals": [0.0, 702.0], "title": "inner"}, title="outer"
    )

    assert criteria.title == "outer"


def test_from_mapping_requires_ideal_intervals() -> None:
    with pytest.raises(CriteriaError) as excinfo:
        TemperamentCriteria.from_mapping({"num_pitches": 3})

    assert excinfo.value.field == "ideal_intervals"


def test_from_mapping_rejects_non_mappings() -> None:
    with pytest.raises(CriteriaError) as excinfo:
        TemperamentCriteria.from_mapping([0.0, 702.0])  # type: ignore[arg-type]

    assert excinfo.value.field == "criteria"


def test_scaled_multiplies_weights() -> None:
    criteria = _criteria(title="Testing").scaled(interval_factor=2.0, key_factor=10.0)

    assert criteria.interval_weights == pytest.approx((2.0e-6, 2.0))
    assert criteria.key_weights == pytest.approx((10.0, 1.0e-3, 10.0))
    assert criteria.title == "Testing"


def test_as_dict_round_trips_through_from_mapping() -> None:
    original = _criteria(title="Testing")

    restored = TemperamentCriteria.from_mapping(original.as_dict())

    assert restored == original
    assert restored.title == "Testing"
