"""Shared test fixtures for the SC2 simulator test suite."""

import sys
from pathlib import Path

import pytest

# Ensure sim/ is on the path so `sc2_sim` imports work
SIM_ROOT = Path(__file__).parent.parent
if str(SIM_ROOT) not in sys.path:
    sys.path.insert(0, str(SIM_ROOT))

from sc2_sim.engine import SimulationEngine
from sc2_sim.io import parse_items
from sc2_sim.models import BuildOrder, SimSettings

BUILD_ORDERS_DIR = SIM_ROOT / "data" / "build_orders"


@pytest.fixture
def make_engine():
    """Engine factory taking shorthand names: make_engine("terran", "SCV", ...)."""
    def _make(race, *names, **settings):
        return SimulationEngine(race, parse_items(names), SimSettings(**settings))
    return _make


@pytest.fixture
def build_orders_dir():
    return BUILD_ORDERS_DIR


@pytest.fixture
def reaper_expand_path():
    return BUILD_ORDERS_DIR / "terran_reaper_expand.yaml"


@pytest.fixture
def three_rax_bo():
    """Terran opener exercising worker builds, addons and a research."""
    return BuildOrder(
        name="Stim Timing",
        race="terran",
        items=parse_items([
            "SCV", "SupplyDepot", "SCV", "Barracks", "Refinery", "SCV",
            "3worker_to_gas", "SCV", "TechLab", "Marine", "Stimpack",
            "SupplyDepot", "Marine",
        ]),
    )
