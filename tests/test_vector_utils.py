# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#

"""Unit tests for elementwise point arithmetic."""

import numpy as np
import pytest

from simplexopt.errors import InputError
from simplexopt.utils.vector_utils import add, centroid, scale, subtract, sup_norm


def test_add_subtract_scale():
    u = np.array([1.0, -2.0, 3.0])
    v = np.array([0.5, 0.5, -1.0])

    np.testing.assert_array_equal(add(u, v), [1.5, -1.5, 2.0])
    np.testing.assert_array_equal(subtract(u, v), [0.5, -2.5, 4.0])
    np.testing.assert_array_equal(scale(2, u), [2.0, -4.0, 6.0])


def test_results_are_read_only_and_inputs_untouched():
    u = np.array([1.0, 2.0])
    v = np.array([3.0, 4.0])

    total = add(u, v)

    with pytest.raises(ValueError):
        total[0] = 0.0
    np.testing.assert_array_equal(u, [1.0, 2.0])
    np.testing.assert_array_equal(v, [3.0, 4.0])


@pytest.mark.parametrize("op", [add, subtract])
def test_dimension_mismatch_raises_input_error(op):
    with pytest.raises(InputError, match="DimensionMismatch"):
        op(np.array([1.0, 2.0]), np.array([1.0, 2.0, 3.0]))


def test_centroid_and_sup_norm():
    points = np.array([[0.0, 0.0], [2.0, 0.0], [1.0, 3.0]])

    np.testing.assert_allclose(centroid(points), [1.0, 1.0])
    assert sup_norm(np.array([0.5, -2.0, 1.0])) == 2.0
    assert sup_norm(np.array([])) == 0.0
