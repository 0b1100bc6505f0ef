# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements construction and ordering of Nelder-Mead simplices.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Tuple

import numpy as np

from simplexopt.utils.vector_utils import freeze

DEFAULT_NONZERO_DELTA: float = 0.05
DEFAULT_ZERO_DELTA: float = 0.00025


def build_simplex(
    x0: np.ndarray,
    nonzero_delta: float = DEFAULT_NONZERO_DELTA,
    zero_delta: float = DEFAULT_ZERO_DELTA,
) -> np.ndarray:
    """Builds the initial simplex around a starting point.

    Vertex 0 is x0 itself. Vertex i (for i in 1..n) is x0 with coordinate i-1
    perturbed: a zero coordinate is replaced by zero_delta, any other
    coordinate is multiplied by (1 + nonzero_delta). Zero coordinates get an
    absolute step because scaling zero would leave the simplex degenerate.

    Args:
        x0: Starting point of length n.
        nonzero_delta: Relative perturbation applied to nonzero coordinates.
        zero_delta: Absolute value used in place of zero coordinates.

    Returns:
        A read-only array of shape (n + 1, n) whose rows are the vertices.
    """
    x0 = np.asarray(x0, dtype=np.float64)
    n: int = x0.shape[0]

    simplex: np.ndarray = np.tile(x0, (n + 1, 1))
    for i in range(n):
        coord: float = x0[i]
        simplex[i + 1, i] = zero_delta if coord == 0 else coord * (1 + nonzero_delta)

    return freeze(simplex)


def sort_simplex(simplex: np.ndarray, values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Orders a simplex and its function values ascending by value.

    The sort is stable so vertices with equal values keep their relative order,
    which keeps repeated runs bit-identical.

    Args:
        simplex: Array of shape (n + 1, n).
        values: Array of shape (n + 1,) with f evaluated at each vertex.

    Returns:
        New read-only (simplex, values) arrays with matching order.
    """
    order: np.ndarray = np.argsort(values, kind="stable")
    return freeze(simplex[order]), freeze(values[order])
