"""Tests for snapshots, resumption and incremental re-simulation."""

import pytest

from sc2_sim.engine import SimulationEngine, common_prefix, resimulate
from sc2_sim.io import load_build_order, parse_items
from sc2_sim.models import BuildOrderItem, SimSettings


@pytest.fixture
def reaper_expand(reaper_expand_path):
    return load_build_order(reaper_expand_path)


@pytest.fixture
def finished_engine(reaper_expand):
    engine = SimulationEngine.from_build_order(reaper_expand)
    engine.run_until_end()
    return engine


def test_snapshot_per_pointer_advance(finished_engine, reaper_expand):
    assert finished_engine.snapshot_indices() == list(range(len(reaper_expand.items) + 1))
    assert finished_engine.has_snapshot(0)
    assert not finished_engine.has_snapshot(len(reaper_expand.items) + 1)


def test_unknown_snapshot_raises(finished_engine):
    with pytest.raises(KeyError):
        finished_engine.get_snapshot(999)


def test_snapshot_copies_are_independent(finished_engine):
    snap = finished_engine.get_snapshot(3)
    snap.minerals = -1
    next(iter(snap.units.values())).tasks.clear()
    snap.events.clear()

    again = finished_engine.get_snapshot(3)
    assert again.minerals >= 0
    assert again.events
    assert again is not snap


def test_snapshots_do_not_share_state_with_live_engine(make_engine):
    engine = make_engine("terran", "SCV", "SCV")
    engine.run_until_end()
    first = engine.get_snapshot(1)
    assert first.units is not engine.state.units
    assert first.frame < engine.state.frame


@pytest.mark.parametrize("k", [0, 1, 5, 10, 17])
def test_resumed_run_matches_cold_run(finished_engine, reaper_expand, k):
    cold = finished_engine.result()

    resumed = SimulationEngine.from_build_order(reaper_expand)
    resumed.resume_from(finished_engine.get_snapshot(k))
    assert resumed.run_until_end() == cold


def test_resume_past_end_rejected(finished_engine):
    short = SimulationEngine("terran", parse_items(["SCV"]))
    with pytest.raises(ValueError):
        short.resume_from(finished_engine.get_snapshot(5))


def test_common_prefix():
    a = parse_items(["SCV", "SCV", "SupplyDepot"])
    b = parse_items(["SCV", "SupplyDepot", "SCV"])
    assert common_prefix(a, b) == 1
    assert common_prefix(a, a) == 3
    assert common_prefix(a, []) == 0


def test_resimulate_after_insert_matches_cold_run(finished_engine, reaper_expand):
    items = list(reaper_expand.items)
    items.insert(8, BuildOrderItem("SCV", "worker"))

    engine = resimulate(finished_engine, items, edit_index=8)
    assert engine.snapshot_indices() == list(range(9))
    result = engine.run_until_end()

    cold = SimulationEngine("terran", items, name=reaper_expand.name).run_until_end()
    assert result == cold


def test_resimulate_after_removal(finished_engine, reaper_expand):
    items = list(reaper_expand.items)
    del items[12]

    engine = resimulate(finished_engine, items)
    assert max(engine.snapshot_indices()) == 12
    cold = SimulationEngine("terran", items, name=reaper_expand.name).run_until_end()
    assert engine.run_until_end() == cold


def test_resimulate_uses_edit_index_as_upper_bound(finished_engine, reaper_expand):
    engine = resimulate(finished_engine, reaper_expand.items, edit_index=4)
    assert engine.snapshot_indices() == [0, 1, 2, 3, 4]
    assert engine.run_until_end() == finished_engine.result()


def test_resimulate_with_new_settings_starts_cold(finished_engine, reaper_expand):
    engine = resimulate(finished_engine, reaper_expand.items,
                        settings=SimSettings(worker_build_delay=4))
    assert engine.snapshot_indices() == []
    result = engine.run_until_end()
    assert result.completed
    assert result.frame >= finished_engine.result().frame
