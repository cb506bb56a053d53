"""Tests for build order actions (gas, scouting, orbital, chrono, inject, addon swap)."""

from sc2_sim.constants import seconds_to_frames
from sc2_sim.models import SimStatus


def _units(engine, name):
    return [u for u in engine.state.units.values() if u.name == name]


def test_worker_to_gas_waits_for_refinery(make_engine):
    engine = make_engine("terran", "Refinery", "worker_to_gas", "worker_to_gas")
    result = engine.run_until_end()
    assert result.completed
    assert result.workers_vespene == 2
    refinery = next(e for e in result.events if e.name == "Refinery")
    actions = [e for e in result.events if e.category == "action"]
    assert len(actions) == 2
    assert all(a.start_frame == a.end_frame >= refinery.end_frame for a in actions)


def test_gas_capacity_is_three_per_geyser(make_engine):
    result = make_engine("terran", "Refinery", "3worker_to_gas", "worker_to_gas").run_until_end()
    assert result.status is SimStatus.STALLED
    assert result.blocked_item.name == "worker_to_gas"
    assert result.workers_vespene == 3


def test_worker_to_minerals(make_engine):
    result = make_engine("terran", "Refinery", "3worker_to_gas",
                         "worker_to_minerals").run_until_end()
    assert result.completed
    assert result.workers_vespene == 2
    assert result.workers_minerals == 10


def test_worker_scout_leaves_mining(make_engine):
    engine = make_engine("terran", "worker_scout")
    result = engine.run_until_end()
    assert result.completed
    scout = next(e for e in result.events if e.name == "worker_scout")
    # Workers are still walking to minerals at frame 0
    assert scout.start_frame > 0
    # The run only ends once the scout is back
    assert result.frame >= scout.start_frame + seconds_to_frames(30)
    assert result.workers_minerals == 12


def test_mule(make_engine):
    engine = make_engine("terran", "SupplyDepot", "Barracks", "OrbitalCommand", "call_down_mule")
    result = engine.run_until_end()
    assert result.completed
    assert result.unit_counts["MULE"] == 1
    assert engine.state.mule_count == 1
    orbital = _units(engine, "OrbitalCommand")[0]
    assert orbital.energy < 50

    mule = _units(engine, "MULE")[0]
    engine.state.frame = int(mule.expires_at) + 1
    engine._update_units()
    assert not _units(engine, "MULE")
    assert engine.state.mule_count == 0


def test_mule_needs_orbital(make_engine):
    result = make_engine("terran", "call_down_mule").run_until_end()
    assert result.status is SimStatus.STALLED


def test_call_down_supply(make_engine):
    engine = make_engine("terran", "SupplyDepot", "Barracks", "OrbitalCommand",
                         "call_down_supply")
    result = engine.run_until_end()
    assert result.completed
    assert result.supply_cap == 15 + 8 + 8
    assert result.supply_used + result.supply_left == result.supply_cap
    assert _units(engine, "SupplyDepot")[0].has_supply_drop


def test_call_down_supply_once_per_depot(make_engine):
    result = make_engine("terran", "SupplyDepot", "Barracks", "OrbitalCommand",
                         "call_down_supply", "call_down_supply", idle_limit=120).run_until_end()
    assert result.status is SimStatus.STALLED
    assert result.bo_index == 4


def test_chrono_boost_speeds_up_probe(make_engine):
    plain = make_engine("protoss", "Probe").run_until_end()
    boosted = make_engine("protoss", "Probe", "chrono_boost").run_until_end()

    probe_plain = next(e for e in plain.events if e.name == "Probe")
    probe_boosted = next(e for e in boosted.events if e.name == "Probe")
    assert probe_plain.end_frame == 269
    assert probe_boosted.end_frame == 180


def test_chrono_needs_busy_target(make_engine):
    engine = make_engine("protoss", "chrono_boost")
    result = engine.run_until_end()
    assert result.status is SimStatus.STALLED
    assert result.bo_index == 0


def test_inject(make_engine):
    engine = make_engine("zerg", "SpawningPool", "Queen", "inject")
    result = engine.run_until_end()
    assert result.completed
    hatch = _units(engine, "Hatchery")[0]
    assert hatch.inject_until is not None
    queen = _units(engine, "Queen")[0]
    assert queen.energy < 50


def test_swap_addon(make_engine):
    engine = make_engine("terran", "SupplyDepot", "Barracks", "Refinery", "3worker_to_gas",
                         "Reactor", "Factory", "swap_addon")
    result = engine.run_until_end()
    assert result.completed
    barracks = _units(engine, "Barracks")[0]
    factory = _units(engine, "Factory")[0]
    assert not barracks.has_addon
    assert factory.has_reactor
    swap = next(e for e in result.events if e.name == "swap_addon")
    # Both structures are tied up while lifting
    assert result.frame >= swap.start_frame + seconds_to_frames(3)


def test_swap_addon_needs_two_hosts(make_engine):
    result = make_engine("terran", "SupplyDepot", "Barracks", "Refinery", "3worker_to_gas",
                         "Reactor", "swap_addon").run_until_end()
    assert result.status is SimStatus.STALLED
    assert result.blocked_item.name == "swap_addon"
