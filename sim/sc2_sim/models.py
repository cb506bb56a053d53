"""
SC2 Build Order Simulator - Data Models
========================================
All dataclasses for the simulation engine.
"""

from copy import deepcopy
from dataclasses import dataclass, field, fields
from enum import Enum, auto
from typing import Dict, List, Optional

from sc2_sim.constants import (
    CHRONO_TICK, ENERGY_PER_FRAME, INJECT_LARVA, LARVA_COOLDOWN_SECONDS,
    MAX_ENERGY, MAX_NATURAL_LARVA, START_MINERALS, START_VESPENE,
    seconds_to_frames,
)
from sc2_sim.data import LARVA_PRODUCERS


class BuildOrderError(ValueError):
    """A build order element the engine cannot interpret (caller bug)."""


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass
class SimSettings:
    """Overridable engine timings, all in game seconds."""
    worker_start_delay: float = 2.0    # workers idle at game start before mining
    worker_build_delay: float = 2.0    # walk from mineral line to build site
    worker_return_delay: float = 2.0   # walk back to mining after building
    idle_limit: float = 40.0           # abort once no unit was busy this long
    addon_swap_delay: float = 3.0      # lift, fly and land for an addon swap

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Setting '{f.name}' must be a number, got {value!r}")
            if value < 0:
                raise ValueError(f"Setting '{f.name}' must be >= 0, got {value}")
            setattr(self, f.name, float(value))

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SimSettings":
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(unknown)}. "
                             f"Choose from: {sorted(known)}")
        return cls(**data)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def frames(self, name: str) -> float:
        return seconds_to_frames(getattr(self, name))


# ---------------------------------------------------------------------------
# Build order definitions
# ---------------------------------------------------------------------------

ITEM_TYPES = ("worker", "unit", "structure", "upgrade", "action")


@dataclass(frozen=True)
class BuildOrderItem:
    name: str
    type: str


@dataclass
class BuildOrder:
    name: str
    race: str = "terran"
    description: str = ""
    items: List[BuildOrderItem] = field(default_factory=list)
    settings: SimSettings = field(default_factory=SimSettings)


# ---------------------------------------------------------------------------
# Runtime simulation entities
# ---------------------------------------------------------------------------

class TaskEffect(Enum):
    PRODUCE_WORKER = auto()
    PRODUCE_UNIT = auto()
    PRODUCE_STRUCTURE = auto()
    MARK_UPGRADE = auto()
    MORPH_OWNER = auto()
    PURE_DELAY = auto()


@dataclass
class Task:
    total_frames: float
    effect: TaskEffect = TaskEffect.PURE_DELAY
    target: Optional[str] = None
    start_frame: Optional[int] = None   # set when the task reaches its queue head

    progress: float = 0.0
    is_completed: bool = False

    def advance(self, tick: float = 1.0):
        self.progress += tick
        if self.progress >= self.total_frames:
            self.is_completed = True


@dataclass
class Unit:
    unit_id: int
    name: str
    energy: float = 0.0

    tasks: List[Task] = field(default_factory=list)
    addon_tasks: List[Task] = field(default_factory=list)
    # Tasks that run side by side without occupying the unit: larva cocoons
    # on zerg townhalls, warp-ins started by probes.
    linked_tasks: List[Task] = field(default_factory=list)

    # Zerg townhalls
    larva_count: int = 0
    next_larva_spawn: Optional[float] = None
    inject_until: Optional[float] = None

    # Protoss structures
    chrono_until: float = 0.0

    # Terran structures
    has_reactor: bool = False
    has_techlab: bool = False
    has_supply_drop: bool = False

    # Temporary units (MULE)
    expires_at: Optional[float] = None

    # Workers
    gather: str = "minerals"
    is_scouting: bool = False

    @property
    def has_addon(self) -> bool:
        return self.has_reactor or self.has_techlab

    def is_idle(self) -> bool:
        return (not self.tasks
                or (self.has_addon and not self.addon_tasks)
                or self.larva_count > 0)

    def is_busy(self) -> bool:
        return bool(self.tasks or self.addon_tasks or self.linked_tasks)

    def has_chrono(self, frame: int) -> bool:
        return frame < self.chrono_until

    def update_unit_state(self, frame: int) -> bool:
        """Apply passive per-frame effects. Returns True once the unit expired."""
        self.energy = min(MAX_ENERGY, self.energy + ENERGY_PER_FRAME)

        if self.name in LARVA_PRODUCERS:
            cooldown = seconds_to_frames(LARVA_COOLDOWN_SECONDS)
            if self.next_larva_spawn is None or self.larva_count >= MAX_NATURAL_LARVA:
                self.next_larva_spawn = frame + cooldown
            elif frame >= self.next_larva_spawn:
                self.larva_count += 1
                self.next_larva_spawn = frame + cooldown

            if self.inject_until is not None and frame >= self.inject_until:
                self.larva_count += INJECT_LARVA
                self.inject_until = None

        return self.expires_at is not None and frame >= self.expires_at

    def update_unit(self, frame: int) -> List[Task]:
        """Advance every queue by one tick and return the tasks that completed."""
        tick = CHRONO_TICK if self.has_chrono(frame) else 1.0
        completed = []

        for queue in (self.tasks, self.addon_tasks):
            if not queue:
                continue
            head = queue[0]
            head.advance(tick)
            if head.is_completed:
                queue.pop(0)
                completed.append(head)
                if queue and queue[0].start_frame is None:
                    queue[0].start_frame = frame

        if self.linked_tasks:
            for task in self.linked_tasks:
                task.advance(tick)
            completed.extend(t for t in self.linked_tasks if t.is_completed)
            self.linked_tasks = [t for t in self.linked_tasks if not t.is_completed]

        if self.is_scouting and not self.tasks:
            self.is_scouting = False

        return completed


# ---------------------------------------------------------------------------
# Timeline
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Event:
    name: str
    icon_key: str
    category: str          # "worker", "unit", "structure", "upgrade", "action"
    start_frame: int
    end_frame: int


# ---------------------------------------------------------------------------
# Simulation state
# ---------------------------------------------------------------------------

@dataclass
class EngineState:
    frame: int = 0
    idle_time: int = 0
    bo_index: int = 0

    minerals: float = float(START_MINERALS)
    vespene: float = float(START_VESPENE)
    supply_used: int = 0
    supply_left: int = 0
    supply_cap: int = 0

    units: Dict[int, Unit] = field(default_factory=dict)
    next_unit_id: int = 0
    upgrades: List[str] = field(default_factory=list)

    base_count: int = 1
    gas_count: int = 0
    mule_count: int = 0
    workers_minerals: int = 0
    workers_vespene: int = 0

    events: List[Event] = field(default_factory=list)

    # True when captured inside the dispatch loop of ``frame``
    mid_frame: bool = False

    def copy(self) -> "EngineState":
        return deepcopy(self)


# ---------------------------------------------------------------------------
# Simulation results
# ---------------------------------------------------------------------------

class SimStatus(Enum):
    COMPLETED = "completed"
    STALLED = "stalled"        # idle limit reached
    TIMED_OUT = "timed_out"    # frame cap reached


@dataclass
class SimResult:
    build_order_name: str = ""
    race: str = "terran"
    status: SimStatus = SimStatus.COMPLETED

    bo_index: int = 0
    bo_length: int = 0
    blocked_item: Optional[BuildOrderItem] = None
    frame: int = 0

    minerals: float = 0.0
    vespene: float = 0.0
    supply_used: int = 0
    supply_left: int = 0
    supply_cap: int = 0
    workers_minerals: int = 0
    workers_vespene: int = 0

    events: List[Event] = field(default_factory=list)
    unit_counts: Dict[str, int] = field(default_factory=dict)
    upgrades: List[str] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.status is SimStatus.COMPLETED
