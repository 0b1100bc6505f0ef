# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the exception hierarchy of SimplexOpt.
#
# ===--------------------------------------------------------------------------------------===#

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from simplexopt.nelder_mead import Result


class SimplexOptError(Exception):
    """Base class for all errors raised by SimplexOpt."""


class InputError(SimplexOptError, ValueError):
    """Raised for invalid starting points, options or mismatched vector dimensions."""


class ConvergenceError(SimplexOptError):
    """Raised when a minimization exhausts its budget before meeting its tolerances.

    The unconverged result is kept on the exception so callers can inspect how
    far the search got before deciding to retry with different options.

    Attributes:
        result: The Result of the run at termination.
    """

    def __init__(self, result: "Result"):
        self.result: "Result" = result
        super().__init__(
            "Nelder-Mead search did not converge: "
            f"point={result.point.tolist()}, value={result.value}, "
            f"iterations={result.iterations}, evaluations={result.evaluation_count}."
        )


class UnsupportedOperation(SimplexOptError):
    """Raised when an operation needs a numerical library that is not available."""
