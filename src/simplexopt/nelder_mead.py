# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the Nelder-Mead optimization loop and its public entry point.
#
# ===--------------------------------------------------------------------------------------===#

import collections.abc
import logging
from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np

from simplexopt.budget import EvaluationCounter, StopLimits, counted, should_stop
from simplexopt.config import NelderMeadConfig
from simplexopt.convergence import (
    ConvergenceTolerances,
    has_converged,
    simplex_spread,
    value_spread,
)
from simplexopt.errors import ConvergenceError, InputError
from simplexopt.simplex import build_simplex, sort_simplex
from simplexopt.step import StepParameters, nelder_mead_step
from simplexopt.utils.vector_utils import freeze


@dataclass
class Result:
    """Outcome of a Nelder-Mead run.

    Attributes:
        point: Best vertex at termination (read-only).
        value: Objective value at point.
        converged: True if the tolerances were met, False if a budget ran out.
        iterations: Number of steps taken.
        evaluation_count: Number of objective calls, initial simplex included.
    """

    point: np.ndarray
    value: float
    converged: bool
    iterations: int
    evaluation_count: int

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}"
            "("
            f"point={self.point.tolist()},"
            f"value={self.value:.8g},"
            f"converged={self.converged},"
            f"iterations={self.iterations},"
            f"evaluation_count={self.evaluation_count}"
            ")"
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view of the result."""
        return {
            "point": [float(x) for x in self.point],
            "value": float(self.value),
            "converged": bool(self.converged),
            "iterations": int(self.iterations),
            "evaluation_count": int(self.evaluation_count),
        }


def as_point(x0: Sequence[float] | np.ndarray) -> np.ndarray:
    """Validates a starting point and converts it to a read-only float array.

    Args:
        x0: Non-empty one-dimensional sequence of finite real numbers.

    Returns:
        A read-only float64 array.

    Raises:
        InputError: If x0 is empty, not one-dimensional, or holds anything
            other than finite real numbers (booleans included).
    """
    if isinstance(x0, (str, bytes)) or not isinstance(
        x0, (collections.abc.Sequence, np.ndarray)
    ):
        raise InputError(f"Starting point must be a sequence of numbers, got {x0!r}.")
    if isinstance(x0, np.ndarray) and x0.ndim != 1:
        raise InputError(f"Starting point must be one-dimensional, got shape {x0.shape}.")
    entries = list(x0)

    if not entries:
        raise InputError("Starting point must not be empty.")
    for entry in entries:
        if isinstance(entry, (bool, np.bool_)) or not isinstance(entry, Real):
            raise InputError(f"Starting point entries must be real numbers, got {entry!r}.")

    point: np.ndarray = np.array(entries, dtype=np.float64)
    if not np.all(np.isfinite(point)):
        raise InputError(f"Starting point entries must be finite, got {entries}.")
    return freeze(point)


def nelder_mead(
    objective: Callable[[np.ndarray], float],
    x0: Sequence[float] | np.ndarray,
    config: Optional[NelderMeadConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> Result:
    """Runs the Nelder-Mead loop until convergence or budget exhaustion.

    The initial simplex is built around x0, all of its vertices are evaluated
    and it is sorted once. Each round then:
    1. Calls the configured callback with a read-only copy of the best point
    2. Stops with converged=True if the tolerances are met
    3. Stops with converged=False if the next step would exceed the iteration
       budget or the evaluation budget is already exceeded
    4. Otherwise takes one Nelder-Mead step

    Args:
        objective: Function mapping a point of length n to a real value.
        x0: Starting point.
        config: Run options. Defaults to NelderMeadConfig().
        logger: Logger for progress messages. Defaults to this module's logger.

    Returns:
        The Result at termination, whether or not the run converged.

    Raises:
        InputError: If x0 or the options are invalid.
    """
    logger = logger if logger is not None else logging.getLogger(__name__)
    config = config if config is not None else NelderMeadConfig()
    config.validate()
    if not callable(objective):
        raise InputError(f"Objective must be callable, got {objective!r}.")

    start: np.ndarray = as_point(x0)
    n: int = start.shape[0]
    params: StepParameters = config.step_params(n)
    tolerances: ConvergenceTolerances = config.tolerances()
    limits: StopLimits = config.limits(n)
    callback = config.callback

    counter: EvaluationCounter = EvaluationCounter()
    f = counted(objective, counter)

    logger.info(
        f"Starting Nelder-Mead search in {n} dimensions with {params}, {tolerances}, {limits}."
    )

    initial: np.ndarray = build_simplex(
        start, nonzero_delta=config.nonzero_delta, zero_delta=config.zero_delta
    )
    simplex, values = sort_simplex(initial, np.array([f(vertex) for vertex in initial]))

    iteration: int = 0
    while True:
        if callback is not None:
            callback(freeze(simplex[0].copy()))

        converged: bool = has_converged(simplex, values, tolerances)
        if converged or should_stop(iteration + 1, counter, limits):
            break

        simplex, values, move = nelder_mead_step(simplex, values, f, params)
        iteration += 1
        logger.debug(
            f"Iteration {iteration}: {move.value} | best={values[0]:.8g} | "
            f"simplex_spread={simplex_spread(simplex):.3g} | value_spread={value_spread(values):.3g}"
        )

    result: Result = Result(
        point=freeze(simplex[0].copy()),
        value=float(values[0]),
        converged=converged,
        iterations=iteration,
        evaluation_count=counter.count,
    )
    if converged:
        logger.info(f"Converged after {iteration} iterations: {result}.")
    else:
        logger.warning(f"Budget exhausted after {iteration} iterations: {result}.")
    return result


def multidimensional_minimize(
    objective: Callable[[np.ndarray], float],
    x0: Sequence[float] | np.ndarray,
    config: Optional[NelderMeadConfig] = None,
    **options: Any,
) -> np.ndarray | Result:
    """Minimizes an n-dimensional function with the adaptive Nelder-Mead method.

    Options may be given as a NelderMeadConfig, as keyword arguments, or both,
    in which case the keyword arguments win. Unknown options are rejected.

    Args:
        objective: Function mapping a point of length n to a real value.
        x0: Non-empty starting point.
        config: Base options.
        **options: Individual options such as maxiter, fn_tolerance or info.

    Returns:
        The full Result if info is set, otherwise the best point found.

    Raises:
        InputError: If x0 or the options are invalid.
        ConvergenceError: If info is not set and the search ran out of budget.
            The exception carries the unconverged Result.

    Example:
        point = multidimensional_minimize(lambda x: (x[0] - 1) ** 2 + x[1] ** 2, [0.0, 3.0])
        result = multidimensional_minimize(objective, x0, maxiter=50, info=True)
    """
    base: NelderMeadConfig = config if config is not None else NelderMeadConfig()
    run_config: NelderMeadConfig = base.merged(**options) if options else base

    result: Result = nelder_mead(objective, x0, run_config)
    if run_config.info:
        return result
    if result.converged:
        return result.point
    raise ConvergenceError(result)
