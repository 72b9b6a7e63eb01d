from __future__ import annotations

import logging

import numpy as np
import pytest

from owt_core.criteria import TemperamentCriteria
from owt_core.errors import CriteriaError, SingularSystemError, TemperamentError
from owt_core.observations import (
    build_design_matrix,
    build_target_vector,
    build_weight_vector,
)
from owt_core.solver import optimize_temperament, solve_temperament
from tests.helpers import build_criteria, just_twelve_intervals


def test_solve_three_pitch_example(testing_criteria: TemperamentCriteria) -> None:
    result = solve_temperament(testing_criteria)

    assert result.tuning == pytest.approx((204.059, 702.030), abs=0.01)


def test_optimize_temperament_returns_array(testing_criteria: TemperamentCriteria) -> None:
    tuning = optimize_temperament(testing_criteria)

    assert isinstance(tuning, np.ndarray)
    assert tuning.shape == (2,)
    np.testing.assert_allclose(tuning, [204.059, 702.030], atol=0.01)


def test_equal_targets_yield_equal_division(equal_twelve_criteria: TemperamentCriteria) -> None:
    result = solve_temperament(equal_twelve_criteria)

    np.testing.assert_allclose(result.tuning, [100.0 * step for step in range(1, 12)], atol=1e-8)
    assert result.chisq == pytest.approx(0.0, abs=1e-12)
    assert result.steps == pytest.approx((100.0,) * 12)


def test_solution_matches_weighted_lstsq() -> None:
    rng = np.random.default_rng(42)
    criteria = build_criteria(
        7,
        ideal=sorted(rng.uniform(100.0, 1100.0, size=6).tolist()),
        interval_weights=rng.uniform(0.1, 2.0, size=6).tolist(),
        key_weights=rng.uniform(0.1, 2.0, size=7).tolist(),
    )
    design = build_design_matrix(7)
    target = build_target_vector(criteria)
    root_weights = np.sqrt(build_weight_vector(criteria))

    expected, *_ = np.linalg.lstsq(
        design * root_weights[:, None], target * root_weights, rcond=None
    )

    np.testing.assert_allclose(solve_temperament(criteria).tuning, expected, atol=1e-8)


def test_chisq_is_weighted_residual_sum(testing_criteria: TemperamentCriteria) -> None:
    result = solve_temperament(testing_criteria)
    residuals = build_design_matrix(3) @ np.asarray(result.tuning) - build_target_vector(
        testing_criteria
    )
    expected = float(np.sum(build_weight_vector(testing_criteria) * residuals**2))

    assert result.chisq == pytest.approx(expected)
    assert result.chisq > 0.0


def test_solving_twice_is_identical(testing_criteria: TemperamentCriteria) -> None:
    first = solve_temperament(testing_criteria)
    second = solve_temperament(testing_criteria)

    assert first.tuning == second.tuning
    assert first.chisq == second.chisq


@pytest.mark.parametrize("factor", [1e-3, 0.5, 7.5, 1e4])
def test_uniform_weight_scaling_leaves_tuning_unchanged(
    testing_criteria: TemperamentCriteria, factor: float
) -> None:
    baseline = solve_temperament(testing_criteria).tuning

    by_interval = solve_temperament(testing_criteria.scaled(interval_factor=factor)).tuning
    by_key = solve_temperament(testing_criteria.scaled(key_factor=factor)).tuning

    np.testing.assert_allclose(by_interval, baseline, rtol=1e-9)
    np.testing.assert_allclose(by_key, baseline, rtol=1e-9)


def test_pitches_span_reference_to_repeat(testing_criteria: TemperamentCriteria) -> None:
    result = solve_temperament(testing_criteria)

    assert result.pitches[0] == 0.0
    assert result.pitches[-1] == 1200.0
    assert sum(result.steps) == pytest.approx(1200.0)
    assert len(result.steps) == 3


def test_zero_interval_weights_report_singular_system(
    testing_criteria: TemperamentCriteria,
) -> None:
    criteria = testing_criteria.scaled(interval_factor=0.0)

    with pytest.raises(SingularSystemError) as excinfo:
        solve_temperament(criteria)

    error = excinfo.value
    assert isinstance(error, TemperamentError)
    assert isinstance(error, ArithmeticError)
    assert error.shape == (6, 2)
    assert error.normal_shape == (2, 2)
    assert error.context["design_rows"] == 6
    assert error.context["design_cols"] == 2
    assert error.context["title"] == "Testing"
    assert "singular" in str(error)


def test_zero_key_weights_report_singular_system() -> None:
    criteria = build_criteria(12, key_weights=[0.0] * 12)

    with pytest.raises(SingularSystemError):
        solve_temperament(criteria)


def test_overflowing_weight_products_are_rejected() -> None:
    criteria = build_criteria(
        3,
        ideal=[0.0, 702.0],
        interval_weights=[1.0e200, 1.0e200],
        key_weights=[1.0e200] * 3,
    )

    with pytest.raises(CriteriaError) as excinfo:
        solve_temperament(criteria)

    assert isinstance(excinfo.value, TemperamentError)
    assert excinfo.value.field == "weights"


def test_overflowing_normal_matrix_reports_singular_system() -> None:
    criteria = build_criteria(
        3,
        ideal=[0.0, 702.0],
        interval_weights=[1.0e308, 1.0e308],
        key_weights=[1.0, 1.0, 1.0],
    )

    with pytest.raises(SingularSystemError) as excinfo:
        solve_temperament(criteria)

    assert excinfo.value.context["condition"] == "nan"


def test_fifths_alone_determine_every_pitch() -> None:
    weights = [0.0] * 11
    weights[6] = 1.0
    criteria = build_criteria(12, ideal=just_twelve_intervals(), interval_weights=weights)

    result = solve_temperament(criteria)

    assert len(result.tuning) == 11
    assert np.all(np.isfinite(result.tuning))


def test_condition_limit_is_honoured(testing_criteria: TemperamentCriteria) -> None:
    with pytest.raises(SingularSystemError) as excinfo:
        solve_temperament(testing_criteria, condition_limit=1.0)

    assert excinfo.value.condition > 1.0


def test_solver_logs_structured_events(
    testing_criteria: TemperamentCriteria, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger="owt_core.solver")

    solve_temperament(testing_criteria)
    with pytest.raises(SingularSystemError):
        solve_temperament(testing_criteria.scaled(interval_factor=0.0))

    events = [getattr(record, "event", None) for record in caplog.records]
    assert "solver.solved" in events
    assert "solver.singular" in events
    singular = next(
        record for record in caplog.records if getattr(record, "event", None) == "solver.singular"
    )
    assert singular.levelno == logging.DEBUG
    assert singular.design_shape == [6, 2]


def test_result_as_dict(testing_criteria: TemperamentCriteria) -> None:
    payload = solve_temperament(testing_criteria).as_dict()

    assert payload["title"] == "Testing"
    assert payload["num_pitches"] == 3
    assert len(payload["tuning"]) == 2
    assert len(payload["steps"]) == 3
    assert set(payload) >= {"chisq", "condition", "repeat_factor"}
