# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements standard test functions for minimizers.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Callable, Dict

import numpy as np


def sphere(x: np.ndarray) -> float:
    """Sum of squares, minimum 0 at the origin."""
    x = np.asarray(x, dtype=np.float64)
    return float(np.sum(x**2))


def rosenbrock(x: np.ndarray) -> float:
    """Rosenbrock's banana function, minimum 0 at (1, ..., 1). Needs n >= 2."""
    x = np.asarray(x, dtype=np.float64)
    return float(np.sum(100.0 * (x[1:] - x[:-1] ** 2) ** 2 + (1 - x[:-1]) ** 2))


def booth(x: np.ndarray) -> float:
    """Booth's function, minimum 0 at (1, 3). Two-dimensional."""
    return float((x[0] + 2 * x[1] - 7) ** 2 + (2 * x[0] + x[1] - 5) ** 2)


OBJECTIVES: Dict[str, Callable[[np.ndarray], float]] = {
    "sphere": sphere,
    "rosenbrock": rosenbrock,
    "booth": booth,
}
