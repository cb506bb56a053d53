"""Tests for the interactive build order editor."""

import pytest

from sc2_sim.models import BuildOrderItem
from sc2_sim.repl import BuildOrderREPL


@pytest.fixture
def repl():
    return BuildOrderREPL(race="terran")


def _names(repl):
    return [item.name for item in repl.bo.items]


def test_add_simulates(repl, capsys):
    repl.onecmd("add SCV")
    assert repl.bo.items == [BuildOrderItem("SCV", "worker")]
    assert repl.last_result.completed
    assert "completed" in capsys.readouterr().out


def test_add_unknown_name(repl, capsys):
    repl.onecmd("add Marinee")
    assert repl.bo.items == []
    assert "Error" in capsys.readouterr().out


def test_add_wrong_race_is_reported(repl, capsys):
    repl.onecmd("add Drone")
    out = capsys.readouterr().out
    assert "belongs to zerg" in out
    assert "Edit reverted." in out
    assert repl.bo.items == []
    assert repl.undo_stack == []


def test_edits_resume_from_snapshots(repl):
    repl.onecmd("add SCV")
    repl.onecmd("add SupplyDepot")
    repl.onecmd("add SCV")
    # The last engine inherited the snapshots of the shared prefix
    assert repl.engine.snapshot_indices() == [0, 1, 2, 3]
    assert repl.last_result.completed


def test_insert_remove_move(repl):
    for name in ("SCV", "SupplyDepot", "Barracks"):
        repl.onecmd(f"add {name}")
    repl.onecmd("insert 2 SCV")
    assert _names(repl) == ["SCV", "SCV", "SupplyDepot", "Barracks"]
    repl.onecmd("move 4 1")
    assert _names(repl) == ["Barracks", "SCV", "SCV", "SupplyDepot"]
    # Barracks before any depot cannot start
    assert not repl.last_result.completed
    repl.onecmd("remove 1")
    assert _names(repl) == ["SCV", "SCV", "SupplyDepot"]
    assert repl.last_result.completed


def test_invalid_positions(repl, capsys):
    repl.onecmd("add SCV")
    repl.onecmd("remove 5")
    repl.onecmd("move one 1")
    assert _names(repl) == ["SCV"]
    out = capsys.readouterr().out
    assert "Invalid position 5" in out
    assert "Not a position: one" in out


def test_undo_redo(repl):
    repl.onecmd("add SCV")
    repl.onecmd("add SupplyDepot")
    repl.onecmd("undo")
    assert _names(repl) == ["SCV"]
    repl.onecmd("redo")
    assert _names(repl) == ["SCV", "SupplyDepot"]
    assert repl.last_result.bo_length == 2


def test_set_changes_settings(repl, capsys):
    repl.onecmd("add SupplyDepot")
    repl.onecmd("set worker_build_delay 5")
    assert repl.bo.settings.worker_build_delay == 5.0
    repl.onecmd("set warp_speed 9")
    assert "Error" in capsys.readouterr().out


def test_race_switch_clears_order(repl):
    repl.onecmd("add SCV")
    repl.onecmd("race zerg")
    assert repl.bo.race == "zerg"
    assert repl.bo.items == []
    repl.onecmd("add Drone")
    assert repl.last_result.race == "zerg"


def test_save_and_load(repl, tmp_path):
    path = tmp_path / "repl.yaml"
    repl.onecmd("name Saved From REPL")
    repl.onecmd("add SCV")
    repl.onecmd(f"save {path}")

    other = BuildOrderREPL()
    other.onecmd(f"load {path}")
    assert other.bo.name == "Saved From REPL"
    assert other.bo.items == [BuildOrderItem("SCV", "worker")]
    assert other.last_result.completed


def test_run_and_timeline(repl, capsys):
    repl.onecmd("timeline")
    assert "Run 'run' first." in capsys.readouterr().out
    repl.onecmd("add SCV")
    repl.onecmd("run")
    repl.onecmd("timeline")
    out = capsys.readouterr().out
    assert "SC2 BUILD ORDER SIMULATOR" in out
    assert "TIMELINE" in out


def test_units(repl, capsys):
    repl.onecmd("units protoss")
    out = capsys.readouterr().out
    assert "Probe" in out
    assert "chrono_boost" in out


def test_quit(repl):
    assert repl.onecmd("quit") is True
