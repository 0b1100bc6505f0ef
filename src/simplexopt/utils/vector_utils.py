# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements elementwise arithmetic on fixed-length points.
#
# ===--------------------------------------------------------------------------------------===#

import numpy as np

from simplexopt.errors import InputError


def freeze(v: np.ndarray) -> np.ndarray:
    """Marks an array as read-only and returns it."""
    v.flags.writeable = False
    return v


def _check_dims(u: np.ndarray, v: np.ndarray) -> None:
    if u.shape != v.shape:
        raise InputError(f"DimensionMismatch: cannot combine shapes {u.shape} and {v.shape}.")


def add(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Returns the elementwise sum u + v.

    Args:
        u: First point.
        v: Second point, same length as u.

    Returns:
        A new read-only array.

    Raises:
        InputError: If the operands have different lengths.
    """
    _check_dims(u, v)
    return freeze(np.add(u, v, dtype=np.float64))


def subtract(u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Returns the elementwise difference u - v.

    Raises:
        InputError: If the operands have different lengths.
    """
    _check_dims(u, v)
    return freeze(np.subtract(u, v, dtype=np.float64))


def scale(s: float, v: np.ndarray) -> np.ndarray:
    """Returns the point v multiplied by the scalar s."""
    return freeze(np.multiply(float(s), v, dtype=np.float64))


def centroid(points: np.ndarray) -> np.ndarray:
    """Returns the mean of the rows of a 2D array of points."""
    return freeze(np.mean(points, axis=0, dtype=np.float64))


def sup_norm(v: np.ndarray) -> float:
    """Returns the largest absolute entry of v, or 0.0 for an empty array."""
    if v.size == 0:
        return 0.0
    return float(np.max(np.abs(v)))
