# ===--------------------------------------------------------------------------------------===#
#
# Part of the SimplexOpt Project, under the Apache License v2.0.
# See https://www.apache.org/licenses/LICENSE-2.0 for license information.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#

"""Tests for the command-line interface."""

import json
import runpy
import sys
from pathlib import Path

import pytest
import yaml

from simplexopt.cli import main, resolve_objective
from simplexopt.errors import InputError
from simplexopt.objectives import rosenbrock


def test_resolve_builtin_and_imported_objectives():
    assert resolve_objective("rosenbrock") is rosenbrock
    assert resolve_objective("simplexopt.objectives:booth")([1.0, 3.0]) == 0.0


@pytest.mark.parametrize("name", ["nope", "simplexopt.objectives:missing", "no_such_module_xyz:f"])
def test_resolve_rejects_unknown_objectives(name):
    with pytest.raises(InputError):
        resolve_objective(name)


def test_main_writes_result_and_config(tmp_path, capsys):
    out_dir = tmp_path / "run"

    code = main(["--objective", "rosenbrock", "--x0", "-1.2", "1", "--out_dir", str(out_dir)])

    assert code == 0
    summary = json.loads((out_dir / "result.json").read_text())
    assert summary["converged"] is True
    assert summary["x0"] == [-1.2, 1.0]
    assert summary["point"] == pytest.approx([1.0, 1.0], abs=1e-3)
    assert json.loads(capsys.readouterr().out.strip().splitlines()[-1]) == summary

    saved = yaml.safe_load((out_dir / "config.yaml").read_text())
    assert saved["OPTIMIZER_CONFIG"]["adaptive"] is True
    assert (out_dir / "results.log").exists()


def test_main_reports_budget_exhaustion(tmp_path):
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text("OPTIMIZER_CONFIG:\n  maxiter: 3\n")

    code = main(["--objective", "sphere", "--x0", "4", "4", "4", "--cfg_path", str(cfg_path)])

    assert code == 1


def test_main_rejects_bad_config(tmp_path, capsys):
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text("OPTIMIZER_CONFIG:\n  unknown_option: 3\n")

    code = main(["--objective", "sphere", "--x0", "1", "--cfg_path", str(cfg_path)])

    assert code == 2
    assert "Unknown option" in capsys.readouterr().out


def test_main_rejects_non_finite_start(capsys):
    assert main(["--objective", "sphere", "--x0", "nan"]) == 2


def test_run_script_exits_with_main_status(monkeypatch):
    script = Path(__file__).resolve().parents[1] / "simplexopt_run.py"
    monkeypatch.setattr(sys, "argv", ["simplexopt_run.py", "--objective", "sphere", "--x0", "1", "2"])

    with pytest.raises(SystemExit) as excinfo:
        runpy.run_path(str(script), run_name="__main__")

    assert excinfo.value.code == 0
