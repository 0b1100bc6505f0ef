# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements iteration and function-evaluation budgeting.
#
# ===--------------------------------------------------------------------------------------===#

from dataclasses import dataclass
from typing import Callable

import numpy as np

Objective = Callable[[np.ndarray], float]


@dataclass(frozen=True)
class StopLimits:
    """Iteration and evaluation budgets of a single run. Both limits are inclusive."""

    max_iterations: int
    max_evaluations: int

    @classmethod
    def for_dimension(cls, n: int) -> "StopLimits":
        """Default budget of 200 * n iterations and evaluations."""
        return cls(max_iterations=200 * n, max_evaluations=200 * n)


class EvaluationCounter:
    """Counts objective calls for one optimization run.

    A counter belongs to exactly one run and is never shared between runs.
    """

    def __init__(self) -> None:
        self.count: int = 0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(count={self.count})"

    def increment(self) -> None:
        self.count += 1


def counted(objective: Callable[..., float], counter: EvaluationCounter) -> Callable[..., float]:
    """Wraps an objective so each call is recorded on the counter.

    Args:
        objective: Function to wrap.
        counter: Counter incremented once per call, before the objective runs.

    Returns:
        A function with the same signature returning the objective value as float.
    """

    def wrapper(*args) -> float:
        counter.increment()
        return float(objective(*args))

    return wrapper


def should_stop(iterations: int, counter: EvaluationCounter, limits: StopLimits) -> bool:
    """Returns True once either budget has been exceeded.

    The comparison is strict, so a run may use exactly max_iterations steps and
    max_evaluations objective calls.
    """
    return iterations > limits.max_iterations or counter.count > limits.max_evaluations
