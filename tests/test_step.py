# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#

"""Unit tests for the Nelder-Mead step and its coefficients."""

import numpy as np
import pytest

from simplexopt.budget import EvaluationCounter, counted
from simplexopt.simplex import sort_simplex
from simplexopt.step import (
    FIXED_PARAMETERS,
    Move,
    StepParameters,
    adaptive_parameters,
    nelder_mead_step,
    step_parameters,
)

# For the one-dimensional simplex [[1], [2]] under the fixed coefficients the
# centroid is 1, so the candidates are reflected=0, expanded=-1,
# reflect-contracted=0.5 and contracted=1.5; a shrink moves the worst vertex to 1.5.
LINE_SIMPLEX = np.array([[1.0], [2.0]])


def _table_objective(table):
    counter = EvaluationCounter()
    return counted(lambda x: table[tuple(float(v) for v in x)], counter), counter


def _step_on_line(table):
    f, counter = _table_objective(table)
    values = np.array([f(v) for v in LINE_SIMPLEX])
    counter.count = 0
    simplex, new_values, move = nelder_mead_step(LINE_SIMPLEX, values, f, FIXED_PARAMETERS)
    return simplex, new_values, move, counter.count


class TestStepParameters:
    """Coefficient presets and overrides."""

    def test_fixed_preset(self):
        assert step_parameters(5, adaptive=False) == StepParameters(1.0, 2.0, 0.5, 0.5)

    def test_adaptive_preset(self):
        params = adaptive_parameters(4)

        assert params.alpha == 1.0
        assert params.beta == pytest.approx(1.5)
        assert params.gamma == pytest.approx(0.625)
        assert params.sigma == pytest.approx(0.75)

    def test_adaptive_matches_fixed_in_two_dimensions(self):
        assert adaptive_parameters(2) == FIXED_PARAMETERS

    def test_overrides_take_precedence(self):
        params = step_parameters(4, adaptive=True, gamma=0.3, sigma=0.9)

        assert params.gamma == 0.3
        assert params.sigma == 0.9
        assert params.beta == pytest.approx(1.5)


class TestDecisionTree:
    """Each branch of the step on hand-computed simplices, with exact evaluation counts."""

    def test_expansion_accepted(self):
        table = {(1.0,): 4.0, (2.0,): 9.0, (0.0,): 1.0, (-1.0,): 0.0}

        simplex, values, move, evals = _step_on_line(table)

        assert move is Move.EXPAND
        np.testing.assert_array_equal(simplex, [[-1.0], [1.0]])
        np.testing.assert_array_equal(values, [0.0, 4.0])
        assert evals == 2

    def test_reflection_kept_when_expansion_is_worse(self):
        table = {(1.0,): 1.0, (2.0,): 4.0, (0.0,): 0.0, (-1.0,): 1.0}

        simplex, values, move, evals = _step_on_line(table)

        assert move is Move.REFLECT
        np.testing.assert_array_equal(simplex, [[0.0], [1.0]])
        np.testing.assert_array_equal(values, [0.0, 1.0])
        assert evals == 2

    def test_reflection_accepted_when_it_beats_second_worst(self):
        simplex = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
        table = {(0.0, 0.0): 1.0, (1.0, 0.0): 2.0, (0.0, 1.0): 5.0, (1.0, -1.0): 1.5}
        f, counter = _table_objective(table)
        values = np.array([1.0, 2.0, 5.0])

        new_simplex, new_values, move = nelder_mead_step(simplex, values, f, FIXED_PARAMETERS)

        assert move is Move.REFLECT
        np.testing.assert_array_equal(new_simplex, [[0.0, 0.0], [1.0, -1.0], [1.0, 0.0]])
        np.testing.assert_array_equal(new_values, [1.0, 1.5, 2.0])
        assert counter.count == 1

    def test_outside_contraction_accepted(self):
        table = {(1.0,): 0.04, (2.0,): 1.44, (0.0,): 0.64, (0.5,): 0.09}

        simplex, values, move, evals = _step_on_line(table)

        assert move is Move.CONTRACT_OUTSIDE
        np.testing.assert_array_equal(simplex, [[1.0], [0.5]])
        np.testing.assert_array_equal(values, [0.04, 0.09])
        assert evals == 2

    def test_outside_contraction_rejected_shrinks(self):
        table = {(1.0,): 1.0, (2.0,): 3.0, (0.0,): 2.0, (0.5,): 2.5, (1.5,): 0.5}

        simplex, values, move, evals = _step_on_line(table)

        assert move is Move.SHRINK
        np.testing.assert_array_equal(simplex, [[1.5], [1.0]])
        np.testing.assert_array_equal(values, [0.5, 1.0])
        assert evals == 3

    def test_inside_contraction_accepted(self):
        table = {(1.0,): 1.0, (2.0,): 3.0, (0.0,): 4.0, (1.5,): 2.0}

        simplex, values, move, evals = _step_on_line(table)

        assert move is Move.CONTRACT_INSIDE
        np.testing.assert_array_equal(simplex, [[1.0], [1.5]])
        np.testing.assert_array_equal(values, [1.0, 2.0])
        assert evals == 2

    def test_inside_contraction_rejected_shrinks(self):
        table = {(1.0,): 1.0, (2.0,): 3.0, (0.0,): 4.0, (1.5,): 3.5}

        simplex, values, move, evals = _step_on_line(table)

        assert move is Move.SHRINK
        np.testing.assert_array_equal(simplex, [[1.0], [1.5]])
        np.testing.assert_array_equal(values, [1.0, 3.5])
        assert evals == 3


def test_shrink_reuses_best_value_and_moves_toward_best():
    simplex = np.array([[0.0, 0.0], [2.0, 0.0], [0.0, 2.0]])
    values = np.array([0.0, 1.0, 2.0])
    calls = []

    def objective(x):
        calls.append(tuple(x))
        # everything but the origin is terrible, so every candidate fails
        return 0.0 if not np.any(x) else 100.0

    params = StepParameters(alpha=1.0, beta=2.0, gamma=0.5, sigma=0.25)
    new_simplex, new_values, move = nelder_mead_step(simplex, values, objective, params)

    assert move is Move.SHRINK
    assert (0.0, 0.0) not in calls
    np.testing.assert_allclose(new_simplex, [[0.0, 0.0], [0.5, 0.0], [0.0, 0.5]])
    np.testing.assert_array_equal(new_values, [0.0, 100.0, 100.0])


def test_inputs_are_not_mutated():
    simplex = np.array([[1.0], [2.0]])
    values = np.array([1.0, 4.0])

    nelder_mead_step(simplex, values, lambda x: float(x[0] ** 2), FIXED_PARAMETERS)

    np.testing.assert_array_equal(simplex, [[1.0], [2.0]])
    np.testing.assert_array_equal(values, [1.0, 4.0])


def test_unsorted_input_is_a_programming_error():
    simplex = np.array([[1.0], [2.0]])
    values = np.array([4.0, 1.0])

    with pytest.raises(AssertionError):
        nelder_mead_step(simplex, values, lambda x: float(x[0] ** 2), FIXED_PARAMETERS)


@pytest.mark.parametrize("seed", range(10))
@pytest.mark.parametrize("adaptive", [True, False])
def test_output_stays_sorted_on_random_quadratics(seed, adaptive):
    rng = np.random.default_rng(seed)
    n = int(rng.integers(1, 6))
    matrix = rng.normal(size=(n, n))
    hessian = matrix @ matrix.T + np.eye(n)
    center = rng.normal(size=n)

    def objective(x):
        d = x - center
        return float(d @ hessian @ d)

    simplex = rng.normal(scale=3.0, size=(n + 1, n))
    simplex, values = sort_simplex(simplex, np.array([objective(v) for v in simplex]))
    params = step_parameters(n, adaptive=adaptive)

    for _ in range(25):
        simplex, values, _ = nelder_mead_step(simplex, values, objective, params)
        assert np.all(np.diff(values) >= 0)
        assert simplex.shape == (n + 1, n)
        np.testing.assert_allclose(values, [objective(v) for v in simplex])
