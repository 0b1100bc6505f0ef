# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements a single Nelder-Mead transformation of a sorted simplex.
#
# ===--------------------------------------------------------------------------------------===#

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Tuple

import numpy as np

from simplexopt.simplex import sort_simplex
from simplexopt.utils.vector_utils import add, centroid, scale, subtract


class Move(Enum):
    """Transformation applied by one step."""

    EXPAND = "expand"
    REFLECT = "reflect"
    CONTRACT_OUTSIDE = "contract_outside"
    CONTRACT_INSIDE = "contract_inside"
    SHRINK = "shrink"


@dataclass(frozen=True)
class StepParameters:
    """Reflection (alpha), expansion (beta), contraction (gamma) and shrink (sigma) coefficients."""

    alpha: float
    beta: float
    gamma: float
    sigma: float


FIXED_PARAMETERS: StepParameters = StepParameters(alpha=1.0, beta=2.0, gamma=0.5, sigma=0.5)


def adaptive_parameters(n: int) -> StepParameters:
    """Dimension-dependent coefficients, which behave better than the fixed ones for large n.

    For n = 2 they coincide with FIXED_PARAMETERS.
    """
    return StepParameters(
        alpha=1.0,
        beta=1 + 2 / n,
        gamma=0.75 - 1 / (2 * n),
        sigma=1 - 1 / n,
    )


def step_parameters(
    n: int,
    adaptive: bool = True,
    alpha: Optional[float] = None,
    beta: Optional[float] = None,
    gamma: Optional[float] = None,
    sigma: Optional[float] = None,
) -> StepParameters:
    """Selects the adaptive or fixed preset and applies any explicit overrides.

    Args:
        n: Dimension of the search space.
        adaptive: If True use adaptive_parameters(n), else FIXED_PARAMETERS.
        alpha, beta, gamma, sigma: Optional overrides; None keeps the preset value.

    Returns:
        The StepParameters of the run.
    """
    preset: StepParameters = adaptive_parameters(n) if adaptive else FIXED_PARAMETERS
    overrides = {
        name: float(value)
        for name, value in (("alpha", alpha), ("beta", beta), ("gamma", gamma), ("sigma", sigma))
        if value is not None
    }
    return replace(preset, **overrides)


def is_sorted(values: np.ndarray) -> bool:
    """True iff no value is smaller than the one before it. NaNs sort last and pass."""
    return not bool(np.any(values[1:] < values[:-1]))


def _replace_worst(
    simplex: np.ndarray, values: np.ndarray, point: np.ndarray, value: float
) -> Tuple[np.ndarray, np.ndarray]:
    new_simplex: np.ndarray = simplex.copy()
    new_values: np.ndarray = values.copy()
    new_simplex[-1] = point
    new_values[-1] = value
    return sort_simplex(new_simplex, new_values)


def _shrink(
    simplex: np.ndarray,
    values: np.ndarray,
    objective: Callable[[np.ndarray], float],
    sigma: float,
) -> Tuple[np.ndarray, np.ndarray]:
    best: np.ndarray = simplex[0]
    new_simplex: np.ndarray = simplex.copy()
    new_values: np.ndarray = values.copy()
    # the best vertex keeps its value, only the others are re-evaluated
    for i in range(1, simplex.shape[0]):
        point: np.ndarray = add(best, scale(sigma, subtract(simplex[i], best)))
        new_simplex[i] = point
        new_values[i] = objective(point)
    return sort_simplex(new_simplex, new_values)


def nelder_mead_step(
    simplex: np.ndarray,
    values: np.ndarray,
    objective: Callable[[np.ndarray], float],
    params: StepParameters,
) -> Tuple[np.ndarray, np.ndarray, Move]:
    """Advances a sorted simplex by one Nelder-Mead transformation.

    With s[0] the best and s[n] the worst vertex and c the centroid of
    s[0..n-1], the candidate points are

        reflected          = (1 + alpha) c - alpha s[n]
        expanded           = (1 + alpha beta) c - alpha beta s[n]
        reflect-contracted = (1 + gamma alpha) c - gamma alpha s[n]
        contracted         = (1 - gamma) c + gamma s[n]

    and they are tried in this order:

    1. reflected beats the best: try expanded, keep whichever of the two is lower.
    2. reflected beats the second-worst: keep reflected.
    3. reflected beats the worst: keep reflect-contracted if it is no worse
       than reflected, otherwise shrink.
    4. otherwise: keep contracted if it beats the worst, otherwise shrink.

    Shrinking scales every vertex except the best by sigma toward the
    best vertex and re-evaluates them. Candidates are only evaluated when the
    branch needs them, so the number of objective calls per step is
    reproducible.

    Args:
        simplex: Array of shape (n + 1, n), sorted ascending by value.
        values: Function values of shape (n + 1,), non-decreasing.
        objective: Function to minimize. Every call is expected to be counted
            by the caller.
        params: Step coefficients.

    Returns:
        A tuple (simplex, values, move) with the new sorted pair and the
        transformation that produced it.
    """
    assert is_sorted(values), f"Simplex values must be sorted on entry, got {values}."

    n: int = simplex.shape[0] - 1
    worst: np.ndarray = simplex[n]
    c: np.ndarray = centroid(simplex[:n])
    alpha, beta, gamma = params.alpha, params.beta, params.gamma

    def along(k: float) -> np.ndarray:
        return subtract(scale(1 + k, c), scale(k, worst))

    reflected: np.ndarray = along(alpha)
    f_reflected: float = objective(reflected)

    if f_reflected < values[0]:
        expanded: np.ndarray = along(alpha * beta)
        f_expanded: float = objective(expanded)
        if f_expanded < f_reflected:
            new_simplex, new_values = _replace_worst(simplex, values, expanded, f_expanded)
            move = Move.EXPAND
        else:
            new_simplex, new_values = _replace_worst(simplex, values, reflected, f_reflected)
            move = Move.REFLECT
    elif f_reflected < values[n - 1]:
        new_simplex, new_values = _replace_worst(simplex, values, reflected, f_reflected)
        move = Move.REFLECT
    elif f_reflected < values[n]:
        outside: np.ndarray = along(gamma * alpha)
        f_outside: float = objective(outside)
        if f_outside <= f_reflected:
            new_simplex, new_values = _replace_worst(simplex, values, outside, f_outside)
            move = Move.CONTRACT_OUTSIDE
        else:
            new_simplex, new_values = _shrink(simplex, values, objective, params.sigma)
            move = Move.SHRINK
    else:
        inside: np.ndarray = add(scale(1 - gamma, c), scale(gamma, worst))
        f_inside: float = objective(inside)
        if f_inside < values[n]:
            new_simplex, new_values = _replace_worst(simplex, values, inside, f_inside)
            move = Move.CONTRACT_INSIDE
        else:
            new_simplex, new_values = _shrink(simplex, values, objective, params.sigma)
            move = Move.SHRINK

    assert is_sorted(new_values), f"Simplex values must be sorted on exit, got {new_values}."
    return new_simplex, new_values, move
