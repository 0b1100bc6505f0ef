# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements bracketed one-dimensional minimization on top of SciPy.
#
# ===--------------------------------------------------------------------------------------===#

from numbers import Real
from typing import Any, Callable, Optional, Tuple

from simplexopt.budget import EvaluationCounter, counted
from simplexopt.errors import InputError, UnsupportedOperation

try:
    from scipy.optimize import minimize_scalar
except ImportError:
    minimize_scalar = None

X_TOLERANCE: float = 1e-10
MAX_ITERATIONS: int = 1000


def minimize(
    objective: Callable[[float], float],
    a: float,
    b: float,
    observe: Optional[Callable[[float, float], Any]] = None,
) -> Tuple[float, float, int]:
    """Finds an approximate minimizer of a function of one variable inside [a, b].

    The search itself is SciPy's bounded Brent method. Its internal tolerance
    handling decides how many points are evaluated, so the number of observe
    calls is not fixed.

    Args:
        objective: Function of one real argument.
        a: Lower end of the bracket.
        b: Upper end of the bracket, strictly greater than a.
        observe: Optional function called synchronously with (x, f(x)) for
            every candidate the search evaluates.

    Returns:
        A tuple (x, f(x), evaluation_count).

    Raises:
        InputError: If the bracket is not two real numbers with a < b.
        UnsupportedOperation: If SciPy is not installed.
    """
    if minimize_scalar is None:
        raise UnsupportedOperation("scipy is required for one-dimensional minimization.")
    for bound in (a, b):
        if isinstance(bound, bool) or not isinstance(bound, Real):
            raise InputError(f"Bracket ends must be real numbers, got {bound!r}.")
    if not a < b:
        raise InputError(f"Bracket must satisfy a < b, got a={a}, b={b}.")

    counter: EvaluationCounter = EvaluationCounter()
    f = counted(objective, counter)

    def observed(x: float) -> float:
        x = float(x)
        fx: float = f(x)
        if observe is not None:
            observe(x, fx)
        return fx

    res = minimize_scalar(
        observed,
        bounds=(float(a), float(b)),
        method="bounded",
        options={"xatol": X_TOLERANCE, "maxiter": MAX_ITERATIONS},
    )
    return float(res.x), float(res.fun), counter.count
