# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements the command-line interface of SimplexOpt.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Any, Callable, Dict, List, Optional

import argparse
import importlib
import json
import logging
import os
from pathlib import Path
import sys

import yaml

from simplexopt.config import CONFIG_BLOCK, NelderMeadConfig, load_config
from simplexopt.errors import InputError
from simplexopt.nelder_mead import Result, nelder_mead
from simplexopt.objectives import OBJECTIVES
from simplexopt.utils.logging_utils import get_logger


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses command-line arguments for a SimplexOpt run.

    Args:
        argv: Argument list. If None, sys.argv[1:] is used.

    Returns:
        Parsed arguments with the objective, starting point, config path,
        output directory and verbosity.
    """
    parser = argparse.ArgumentParser(
        description="Minimize a function with the adaptive Nelder-Mead simplex method."
    )
    parser.add_argument(
        "--objective",
        type=str,
        help=f"built-in objective ({', '.join(sorted(OBJECTIVES))}) or 'module:function'.",
        required=True,
    )
    parser.add_argument(
        "--x0", type=float, nargs="+", help="starting point coordinates.", required=True
    )
    parser.add_argument("--cfg_path", type=str, help="path to .yaml config file.")
    parser.add_argument(
        "--out_dir",
        type=str,
        help="directory that will contain the log, the config used and result.json.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="if true, logs every Nelder-Mead step."
    )

    return parser.parse_args(argv)


def resolve_objective(name: str) -> Callable[[Any], float]:
    """Looks up a built-in objective or imports one given as 'module:function'.

    Raises:
        InputError: If the objective cannot be found or is not callable.
    """
    if name in OBJECTIVES:
        return OBJECTIVES[name]

    module_name, _, attr = name.partition(":")
    if not module_name or not attr:
        raise InputError(
            f"Unknown objective '{name}'. Use one of {sorted(OBJECTIVES)} or 'module:function'."
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as err:
        raise InputError(f"Could not import module '{module_name}': {err}")

    objective = getattr(module, attr, None)
    if not callable(objective):
        raise InputError(f"'{name}' is not a callable objective.")
    return objective


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for a command-line minimization.

    This function:
    1. Resolves the objective and loads the configuration
    2. Sets up logging to stdout and, with --out_dir, to results.log
    3. Runs the Nelder-Mead search
    4. Writes the config used and result.json to --out_dir

    Returns:
        0 if the search converged, 1 if it exhausted its budget, 2 on invalid input.
    """
    args: Dict[str, Any] = vars(parse_args(argv))

    try:
        objective = resolve_objective(args["objective"])
        config: NelderMeadConfig = (
            load_config(args["cfg_path"]) if args["cfg_path"] else NelderMeadConfig()
        )
    except (InputError, OSError, yaml.YAMLError) as err:
        print(str(err))
        return 2

    out_dir: Optional[Path] = None
    if args["out_dir"]:
        out_dir = Path(args["out_dir"])
        os.makedirs(out_dir, exist_ok=True)
        with open(out_dir.joinpath("config.yaml"), "w") as f:
            yaml.safe_dump({CONFIG_BLOCK: config.to_dict()}, f)

    logger: logging.Logger = get_logger(
        run_name="simplexopt",
        results_dir=out_dir,
        level=logging.DEBUG if args["verbose"] else logging.INFO,
    )

    try:
        result: Result = nelder_mead(objective, args["x0"], config, logger=logger)
    except InputError as err:
        logger.error(str(err))
        return 2

    summary: Dict[str, Any] = {
        "objective": args["objective"],
        "x0": args["x0"],
        **result.to_dict(),
    }
    if out_dir is not None:
        with open(out_dir.joinpath("result.json"), "w") as f:
            json.dump(summary, f, indent=2)
        logger.info(f"Saved result at '{out_dir.joinpath('result.json')}'.")

    print(json.dumps(summary))
    return 0 if result.converged else 1


if __name__ == "__main__":
    sys.exit(main())
