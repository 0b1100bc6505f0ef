# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the configuration of a Nelder-Mead run.
#
# ===--------------------------------------------------------------------------------------===#

import math
from dataclasses import dataclass, fields
from numbers import Integral, Real
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import numpy as np
import yaml

from simplexopt.budget import StopLimits
from simplexopt.convergence import (
    DEFAULT_FN_TOLERANCE,
    DEFAULT_SIMPLEX_TOLERANCE,
    ConvergenceTolerances,
)
from simplexopt.errors import InputError
from simplexopt.simplex import DEFAULT_NONZERO_DELTA, DEFAULT_ZERO_DELTA
from simplexopt.step import StepParameters, step_parameters

CONFIG_BLOCK: str = "OPTIMIZER_CONFIG"


@dataclass
class NelderMeadConfig:
    """Every option recognized by the Nelder-Mead minimizer, with its default.

    Attributes:
        adaptive: Use dimension-dependent step coefficients instead of the
            fixed (1, 2, 0.5, 0.5) preset.
        alpha: Reflection coefficient override.
        beta: Expansion coefficient override.
        gamma: Contraction coefficient override.
        sigma: Shrink coefficient override.
        maxiter: Maximum number of steps. None means 200 * n.
        maxfun: Maximum number of objective evaluations. None means 200 * n.
        simplex_tolerance: Bound on the simplex sup-norm for convergence.
        fn_tolerance: Bound on the function-value sup-norm for convergence.
        zero_delta: Initial-simplex value used for zero coordinates.
        nonzero_delta: Initial-simplex relative step for nonzero coordinates.
        callback: Observer called with a read-only copy of the best point at
            every iteration.
        info: Return the full Result instead of just the best point.
    """

    adaptive: bool = True
    alpha: Optional[float] = None
    beta: Optional[float] = None
    gamma: Optional[float] = None
    sigma: Optional[float] = None
    maxiter: Optional[int] = None
    maxfun: Optional[int] = None
    simplex_tolerance: float = DEFAULT_SIMPLEX_TOLERANCE
    fn_tolerance: float = DEFAULT_FN_TOLERANCE
    zero_delta: float = DEFAULT_ZERO_DELTA
    nonzero_delta: float = DEFAULT_NONZERO_DELTA
    callback: Optional[Callable[[np.ndarray], Any]] = None
    info: bool = False

    @staticmethod
    def normalize_key(key: str) -> str:
        """Maps option spellings like 'simplex-tolerance' or 'info?' to field names."""
        return str(key).strip().rstrip("?").replace("-", "_")

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "NelderMeadConfig":
        """Builds a validated config from a mapping of options.

        Missing options keep their defaults. Unknown options are rejected.

        Args:
            raw: Mapping of option names to values, or None for all defaults.

        Returns:
            The validated NelderMeadConfig.

        Raises:
            InputError: If an option is unknown or has an invalid value.
        """
        raw = raw or {}
        known = {f.name for f in fields(cls)}
        normalized: Dict[str, Any] = {}
        for key, value in raw.items():
            name: str = cls.normalize_key(key)
            if name not in known:
                raise InputError(f"Unknown option '{key}'. Recognized options: {sorted(known)}.")
            normalized[name] = value

        default_cfg: NelderMeadConfig = cls()
        config: NelderMeadConfig = cls(
            **{field: normalized.get(field, getattr(default_cfg, field)) for field in known}
        )
        config.validate()
        return config

    def merged(self, **options: Any) -> "NelderMeadConfig":
        """Returns a validated copy of this config with some options replaced."""
        base: Dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        base.update({self.normalize_key(key): value for key, value in options.items()})
        return NelderMeadConfig.from_dict(base)

    def validate(self) -> None:
        """Checks option types and ranges.

        Raises:
            InputError: On the first invalid option found.
        """
        for name in ("adaptive", "info"):
            if not isinstance(getattr(self, name), bool):
                raise InputError(f"Option '{name}' must be a bool, got {getattr(self, name)!r}.")

        for name in ("simplex_tolerance", "fn_tolerance", "zero_delta", "nonzero_delta"):
            value = getattr(self, name)
            if not _is_real(value) or not math.isfinite(value) or value < 0:
                raise InputError(
                    f"Option '{name}' must be a finite non-negative number, got {value!r}."
                )

        for name in ("alpha", "beta", "gamma", "sigma"):
            value = getattr(self, name)
            if value is not None and (not _is_real(value) or not math.isfinite(value)):
                raise InputError(f"Option '{name}' must be a finite number, got {value!r}.")
        # alpha, beta > 0 and gamma, sigma in (0, 1)
        for name, low, high in (
            ("alpha", 0.0, math.inf),
            ("beta", 0.0, math.inf),
            ("gamma", 0.0, 1.0),
            ("sigma", 0.0, 1.0),
        ):
            value = getattr(self, name)
            if value is not None and not low < value < high:
                raise InputError(
                    f"Option '{name}' must lie in ({low:g}, {high:g}), got {value!r}."
                )

        for name in ("maxiter", "maxfun"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, Integral) or value < 0:
                raise InputError(f"Option '{name}' must be a non-negative integer, got {value!r}.")

        if self.callback is not None and not callable(self.callback):
            raise InputError(f"Option 'callback' must be callable, got {self.callback!r}.")

    def limits(self, n: int) -> StopLimits:
        """Iteration and evaluation budgets for an n-dimensional run."""
        default_limits: StopLimits = StopLimits.for_dimension(n)
        return StopLimits(
            max_iterations=(
                default_limits.max_iterations if self.maxiter is None else int(self.maxiter)
            ),
            max_evaluations=(
                default_limits.max_evaluations if self.maxfun is None else int(self.maxfun)
            ),
        )

    def tolerances(self) -> ConvergenceTolerances:
        return ConvergenceTolerances(
            simplex_tolerance=float(self.simplex_tolerance),
            fn_tolerance=float(self.fn_tolerance),
        )

    def step_params(self, n: int) -> StepParameters:
        return step_parameters(
            n,
            adaptive=self.adaptive,
            alpha=self.alpha,
            beta=self.beta,
            gamma=self.gamma,
            sigma=self.sigma,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view of the config, without the callback."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "callback"}


def _is_real(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def load_config(cfg_path: str | Path) -> NelderMeadConfig:
    """Reads the OPTIMIZER_CONFIG block of a YAML file.

    Other top-level blocks are ignored so one file can configure several tools.

    Args:
        cfg_path: Path to the .yaml config file.

    Returns:
        The validated NelderMeadConfig. A file without the block yields defaults.

    Raises:
        InputError: If the block is not a mapping or holds invalid options.
    """
    with open(cfg_path, "r") as f:
        config: Dict[Any, Any] = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise InputError(f"Config file '{cfg_path}' must contain a mapping.")

    block = config.get(CONFIG_BLOCK, {}) or {}
    if not isinstance(block, dict):
        raise InputError(f"'{CONFIG_BLOCK}' in '{cfg_path}' must be a mapping.")
    if "callback" in {NelderMeadConfig.normalize_key(key) for key in block}:
        raise InputError("Option 'callback' cannot be set from a config file.")

    return NelderMeadConfig.from_dict(_coerce_floats(block))


def _coerce_floats(block: Dict[str, Any]) -> Dict[str, Any]:
    """Converts float options that YAML loaded as strings, such as '1e-4'."""
    float_fields = {
        "alpha",
        "beta",
        "gamma",
        "sigma",
        "simplex_tolerance",
        "fn_tolerance",
        "zero_delta",
        "nonzero_delta",
    }
    coerced: Dict[str, Any] = {}
    for key, value in block.items():
        if NelderMeadConfig.normalize_key(key) in float_fields and isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                raise InputError(f"Option '{key}' must be a number, got {value!r}.")
        coerced[key] = value
    return coerced
