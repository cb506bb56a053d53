"""
SC2 Build Order Simulator - Game Timing Constants
==================================================
Central registry of fixed game timings. All durations are stored in seconds
and converted to frames with ``seconds_to_frames``.
"""

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

FRAMES_PER_SECOND = 22.4   # "faster" game speed
MAX_GAME_SECONDS = 20 * 60
FRAME_CAP = round(MAX_GAME_SECONDS * FRAMES_PER_SECOND)


def seconds_to_frames(seconds: float) -> float:
    return seconds * FRAMES_PER_SECOND


# ---------------------------------------------------------------------------
# Starting state
# ---------------------------------------------------------------------------

START_MINERALS = 50
START_VESPENE = 0
START_WORKERS = 12
START_TOWNHALL_ENERGY = 50

# ---------------------------------------------------------------------------
# Energy
# ---------------------------------------------------------------------------

MAX_ENERGY = 200
ENERGY_PER_FRAME = 0.7875 / FRAMES_PER_SECOND
SPAWNED_UNIT_ENERGY = 50

# ---------------------------------------------------------------------------
# Supply
# ---------------------------------------------------------------------------

MAX_SUPPLY = 200
SUPPLY_DROP_BONUS = 8

# ---------------------------------------------------------------------------
# Zerg larva / inject
# ---------------------------------------------------------------------------

START_LARVA = 3
MAX_NATURAL_LARVA = 3
LARVA_COOLDOWN_SECONDS = 11
INJECT_SECONDS = 29
INJECT_LARVA = 3
INJECT_ENERGY = 25

# ---------------------------------------------------------------------------
# Protoss chrono boost
# ---------------------------------------------------------------------------

CHRONO_SECONDS = 20
CHRONO_ENERGY = 50
CHRONO_TICK = 1.5

# ---------------------------------------------------------------------------
# Terran orbital abilities
# ---------------------------------------------------------------------------

MULE_SECONDS = 64
MULE_ENERGY = 50
SUPPLY_DROP_ENERGY = 50

# ---------------------------------------------------------------------------
# Workers
# ---------------------------------------------------------------------------

SCOUT_SECONDS = 30
WORKERS_PER_GAS = 3
