# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the convergence test of the Nelder-Mead search.
#
# ===--------------------------------------------------------------------------------------===#

from dataclasses import dataclass

import numpy as np

from simplexopt.utils.vector_utils import sup_norm

DEFAULT_SIMPLEX_TOLERANCE: float = 1e-4
DEFAULT_FN_TOLERANCE: float = 1e-4


@dataclass(frozen=True)
class ConvergenceTolerances:
    """Thresholds on the size of a simplex and on the spread of its values."""

    simplex_tolerance: float = DEFAULT_SIMPLEX_TOLERANCE
    fn_tolerance: float = DEFAULT_FN_TOLERANCE


def simplex_spread(simplex: np.ndarray) -> float:
    """Largest absolute per-coordinate distance of any vertex from vertex 0."""
    return sup_norm(simplex[1:] - simplex[0])


def value_spread(values: np.ndarray) -> float:
    """Largest absolute difference between any value and the best value."""
    return sup_norm(values[1:] - values[0])


def has_converged(
    simplex: np.ndarray, values: np.ndarray, tolerances: ConvergenceTolerances
) -> bool:
    """Checks whether a sorted simplex is tight enough to stop the search.

    Both sup-norms are measured relative to vertex 0, so the input must
    already be sorted ascending by value.

    Args:
        simplex: Sorted array of shape (n + 1, n).
        values: Sorted function values of shape (n + 1,).
        tolerances: Thresholds to compare against.

    Returns:
        True iff the simplex spread is at most simplex_tolerance and the value
        spread is at most fn_tolerance.
    """
    return (
        simplex_spread(simplex) <= tolerances.simplex_tolerance
        and value_spread(values) <= tolerances.fn_tolerance
    )
