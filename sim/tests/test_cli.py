"""Tests for CLI integration (subprocess-based)."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

SIM_ROOT = Path(__file__).parent.parent
CLI_PATH = SIM_ROOT / "cli.py"
BO_DIR = SIM_ROOT / "data" / "build_orders"
BO_PATH = BO_DIR / "terran_reaper_expand.yaml"


def _run_cli(*args, timeout=60):
    """Run CLI command and return CompletedProcess."""
    cmd = [sys.executable, str(CLI_PATH)] + list(args)
    return subprocess.run(
        cmd, capture_output=True, text=True, timeout=timeout, cwd=str(SIM_ROOT)
    )


def test_simulate_exits_0():
    result = _run_cli("simulate", str(BO_PATH))
    assert result.returncode == 0, f"stderr: {result.stderr}"


def test_simulate_produces_report():
    result = _run_cli("simulate", str(BO_PATH))
    assert "TIMELINE" in result.stdout
    assert "COMPLETED" in result.stdout
    assert "Reaper Expand" in result.stdout


def test_simulate_infeasible_exits_2(tmp_path):
    path = tmp_path / "blocked.yaml"
    path.write_text("name: blocked\nrace: terran\nbuild_order:\n  - Marine\n")
    result = _run_cli("simulate", str(path))
    assert result.returncode == 2
    assert "STALLED" in result.stdout
    assert "Marine" in result.stdout


def test_simulate_missing_file():
    result = _run_cli("simulate", "no_such_build.yaml")
    assert result.returncode == 1
    assert "Error" in result.stderr


def test_simulate_setting_override():
    result = _run_cli("simulate", str(BO_PATH), "--set", "worker_build_delay=3")
    assert result.returncode == 0, f"stderr: {result.stderr}"


@pytest.mark.parametrize("override", ["bogus=1", "idle_limit", "idle_limit=soon"])
def test_simulate_bad_override(override):
    result = _run_cli("simulate", str(BO_PATH), "--set", override)
    assert result.returncode == 1
    assert "Error" in result.stderr


def test_simulate_race_override_rejects_foreign_items():
    result = _run_cli("simulate", str(BO_PATH), "--race", "zerg")
    assert result.returncode == 1
    assert "belongs to terran" in result.stderr


def test_simulate_export_json(tmp_path):
    out = tmp_path / "events.json"
    result = _run_cli("simulate", str(BO_PATH), "--export-json", str(out))
    assert result.returncode == 0, f"stderr: {result.stderr}"
    data = json.loads(out.read_text())
    assert data["name"] == "Reaper Expand"
    assert data["events"]


def test_compare():
    result = _run_cli("compare", str(BO_PATH), str(BO_DIR / "protoss_gate_expand.yaml"))
    assert result.returncode == 0, f"stderr: {result.stderr}"
    assert "BUILD ORDER COMPARISON" in result.stdout
    assert "Gate Expand" in result.stdout


def test_units_lists_race_names():
    result = _run_cli("units", "--race", "zerg")
    assert result.returncode == 0
    assert "Drone" in result.stdout
    assert "inject" in result.stdout
    assert "SCV" not in result.stdout


def test_verbose_logs_dispatches():
    result = _run_cli("-vv", "simulate", str(BO_PATH))
    assert result.returncode == 0
    assert "started SCV" in result.stderr
