"""
SC2 Build Order Simulator - Simulation Engine
==============================================
Frame-based production simulation (22.4 frames = 1 game second).

Each frame:
    Add income from mining workers
    Update every unit: energy, larva, expiry, then task progress
    Dispatch the next build order items against idle units until one fails
Every time the build order pointer advances, a snapshot of the state is
stored so an edited build order can be resumed without replaying the prefix.
"""

import logging
import math
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from sc2_sim.constants import (
    CHRONO_ENERGY, CHRONO_SECONDS, FRAME_CAP, INJECT_ENERGY, INJECT_SECONDS,
    MAX_SUPPLY, MULE_ENERGY, MULE_SECONDS, SCOUT_SECONDS, SPAWNED_UNIT_ENERGY,
    START_LARVA, START_TOWNHALL_ENERGY, START_WORKERS, SUPPLY_DROP_BONUS,
    SUPPLY_DROP_ENERGY, WORKERS_PER_GAS, seconds_to_frames,
)
from sc2_sim.data import (
    ACTIONS, ADDON_HOSTS, BASE_TOWNHALLS, CHRONO_TARGETS, GAS_STRUCTURES,
    LARVA_PRODUCERS, RACES, RESEARCHED_BY, TRAINED_BY, UNITS, UPGRADES,
    infer_item_type, item_race, satisfies_requirement,
)
from sc2_sim.income import IncomeModel
from sc2_sim.models import (
    BuildOrder, BuildOrderError, BuildOrderItem, EngineState, Event,
    ITEM_TYPES, SimResult, SimSettings, SimStatus, Task, TaskEffect, Unit,
)

logger = logging.getLogger(__name__)

WORKER_NAMES = frozenset(r.worker for r in RACES.values())

# Queue slots a producer can accept work into
PRIMARY, ADDON, LARVA = "primary", "addon", "larva"

ItemLike = Union[BuildOrderItem, Mapping]


def normalize_item(item: ItemLike) -> BuildOrderItem:
    """Coerce a build order element into a BuildOrderItem, failing loudly."""
    if isinstance(item, BuildOrderItem):
        return item
    if not isinstance(item, Mapping):
        raise BuildOrderError(f"Build order element must be a mapping, got {item!r}")
    name, item_type = item.get("name"), item.get("type")
    if not name:
        raise BuildOrderError(f"Build order element is missing 'name': {dict(item)}")
    if not item_type:
        raise BuildOrderError(f"Build order element is missing 'type': {dict(item)}")
    return BuildOrderItem(name=str(name), type=str(item_type))


class SimulationEngine:
    def __init__(self, race: str = "terran", build_order: Iterable[ItemLike] = (),
                 settings: Optional[SimSettings] = None,
                 income: Optional[IncomeModel] = None, name: str = ""):
        if race not in RACES:
            raise BuildOrderError(f"Unknown race: {race}. Choose from: {sorted(RACES)}")
        self.race = race
        self.name = name
        self.bo = tuple(normalize_item(item) for item in build_order)
        self._validate_build_order()
        self.settings = settings or SimSettings()
        self.income = income or IncomeModel()

        self.state = EngineState()
        self._snapshots: Dict[int, EngineState] = {}
        self._started = False
        self._result: Optional[SimResult] = None

    @classmethod
    def from_build_order(cls, bo: BuildOrder,
                         income: Optional[IncomeModel] = None) -> "SimulationEngine":
        return cls(bo.race, bo.items, bo.settings, income=income, name=bo.name)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_build_order(self):
        seen_upgrades = set()
        for index, item in enumerate(self.bo):
            where = f"build order item {index} ({item.name})"
            if item.type not in ITEM_TYPES:
                raise BuildOrderError(f"{where}: unknown type '{item.type}', "
                                      f"expected one of {ITEM_TYPES}")
            known_type = infer_item_type(item.name)
            if known_type is None:
                raise BuildOrderError(f"{where}: unknown name")
            if known_type != item.type:
                raise BuildOrderError(f"{where}: is a {known_type}, not a {item.type}")
            race = item_race(item.name)
            if race is not None and race != self.race:
                raise BuildOrderError(f"{where}: belongs to {race}, not {self.race}")
            if item.type == "upgrade":
                if item.name in seen_upgrades:
                    raise BuildOrderError(f"{where}: upgrade listed twice")
                seen_upgrades.add(item.name)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_start(self):
        """Reset to the game start: one townhall and twelve workers."""
        start = RACES[self.race]
        self.state = s = EngineState()
        s.supply_used = START_WORKERS
        s.supply_cap = start.supply_cap
        s.supply_left = s.supply_cap - s.supply_used

        townhall = self._spawn(start.townhall, energy=START_TOWNHALL_ENERGY)
        if start.townhall in LARVA_PRODUCERS:
            townhall.larva_count = START_LARVA

        delay = self.settings.frames("worker_start_delay")
        for _ in range(START_WORKERS):
            worker = self._spawn(start.worker)
            worker.tasks.append(Task(delay, start_frame=s.frame))

        self._snapshots = {0: s.copy()}
        self._started = True
        self._result = None

    def run_until_end(self) -> SimResult:
        if self._result is not None:
            return self._result
        if not self._started:
            self.set_start()

        status = None
        if self.state.mid_frame:
            # Resumed from a snapshot taken inside the dispatch loop
            self.state.mid_frame = False
            self._dispatch_pending()
            status = self._end_frame()
        while status is None:
            self._run_frame()
            status = self._end_frame()

        self.state.events.sort(key=lambda e: e.start_frame)
        self._result = self._build_result(status)
        self._log_outcome(self._result)
        return self._result

    def result(self) -> SimResult:
        """Result of the last ``run_until_end`` call."""
        if self._result is None:
            raise RuntimeError("Simulation has not been run yet")
        return self._result

    def can_afford(self, item: ItemLike) -> bool:
        item = normalize_item(item)
        minerals, vespene, supply = self.get_cost(item)
        s = self.state
        return (minerals <= s.minerals and vespene <= s.vespene
                and (supply <= 0 or supply <= s.supply_left))

    def get_cost(self, item: ItemLike):
        """(minerals, vespene, supply) cost of a build order element."""
        item = normalize_item(item)
        if item.type == "upgrade":
            upgrade = UPGRADES[item.name]
            return upgrade.minerals, upgrade.vespene, 0
        if item.type == "action":
            return 0, 0, 0
        unit = UNITS[item.name]
        return unit.minerals, unit.vespene, unit.supply

    def idle_units(self) -> List[Unit]:
        return [u for u in self.state.units.values() if u.is_idle()]

    def busy_units(self) -> List[Unit]:
        return [u for u in self.state.units.values() if u.is_busy()]

    def unit_counts(self) -> Dict[str, int]:
        counts = Counter(u.name for u in self.state.units.values())
        for upgrade in self.state.upgrades:
            counts[upgrade] += 1
        return dict(counts)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def has_snapshot(self, bo_index: int) -> bool:
        return bo_index in self._snapshots

    def snapshot_indices(self) -> List[int]:
        return sorted(self._snapshots)

    def get_snapshot(self, bo_index: int) -> EngineState:
        """Independent copy of the state right after ``bo_index`` was reached."""
        if bo_index not in self._snapshots:
            raise KeyError(f"No snapshot for build order index {bo_index}")
        return self._snapshots[bo_index].copy()

    def resume_from(self, snapshot: EngineState):
        """Continue from a snapshot instead of the game start."""
        if snapshot.bo_index > len(self.bo):
            raise ValueError(f"Snapshot index {snapshot.bo_index} is past the end "
                             f"of a {len(self.bo)}-item build order")
        self.state = snapshot.copy()
        self._snapshots = {snapshot.bo_index: snapshot.copy()}
        self._started = True
        self._result = None

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def _run_frame(self):
        self._add_income()
        self._update_units()
        self._dispatch_pending()

    def _end_frame(self) -> Optional[SimStatus]:
        s = self.state
        s.frame += 1
        busy = len(self.busy_units())

        if s.bo_index >= len(self.bo) and busy == 0:
            return SimStatus.COMPLETED

        # Everyone waiting on resources or requirements for too long
        if busy == 0:
            s.idle_time += 1
            if s.idle_time >= self.settings.frames("idle_limit"):
                return SimStatus.STALLED
        else:
            s.idle_time = 0

        if s.frame >= FRAME_CAP:
            return SimStatus.TIMED_OUT
        return None

    # ------------------------------------------------------------------
    # Phase 1: Income
    # ------------------------------------------------------------------

    def _add_income(self):
        s = self.state
        self._count_workers()
        s.minerals += self.income.minerals_per_frame(
            s.workers_minerals, s.base_count, s.mule_count)
        s.vespene += self.income.vespene_per_frame(s.workers_vespene, s.gas_count)

    def _count_workers(self):
        minerals = vespene = 0
        for unit in self.state.units.values():
            if unit.name not in WORKER_NAMES or unit.tasks or unit.is_scouting:
                continue
            if unit.gather == "vespene":
                vespene += 1
            else:
                minerals += 1
        self.state.workers_minerals = minerals
        self.state.workers_vespene = vespene

    # ------------------------------------------------------------------
    # Phase 2: Unit state and task progress
    # ------------------------------------------------------------------

    def _update_units(self):
        s = self.state
        expired = []
        for unit in list(s.units.values()):
            if unit.update_unit_state(s.frame):
                expired.append(unit)
                continue
            for task in unit.update_unit(s.frame):
                self._complete_task(unit, task)
        for unit in expired:
            del s.units[unit.unit_id]
            if unit.name == "MULE":
                s.mule_count -= 1

    def _complete_task(self, owner: Unit, task: Task):
        effect = task.effect
        if effect is TaskEffect.PURE_DELAY:
            return

        name = task.target
        if effect is TaskEffect.PRODUCE_WORKER:
            self._spawn(name)
            category = "worker"
        elif effect is TaskEffect.PRODUCE_UNIT:
            self._spawn(name, energy=SPAWNED_UNIT_ENERGY)
            self._unit_online(name)
            category = "unit"
        elif effect is TaskEffect.PRODUCE_STRUCTURE:
            if UNITS[name].is_addon:
                owner.has_reactor = name == "Reactor"
                owner.has_techlab = name == "TechLab"
            else:
                self._spawn(name, energy=SPAWNED_UNIT_ENERGY)
                self._unit_online(name)
            category = "structure"
        elif effect is TaskEffect.MARK_UPGRADE:
            self.state.upgrades.append(name)
            category = "upgrade"
        else:
            owner.name = name
            owner.energy = SPAWNED_UNIT_ENERGY
            self._unit_online(name)
            category = "structure" if UNITS[name].is_structure else "unit"

        self._log_event(name, category, task.start_frame)

    def _unit_online(self, name: str):
        s = self.state
        unit = UNITS[name]
        if unit.supply < 0:
            s.supply_cap = min(MAX_SUPPLY, s.supply_cap - unit.supply)
            s.supply_left = s.supply_cap - s.supply_used
        if name in BASE_TOWNHALLS:
            s.base_count += 1
        if name in GAS_STRUCTURES:
            s.gas_count += 1

    # ------------------------------------------------------------------
    # Phase 3: Dispatch build order items
    # ------------------------------------------------------------------

    def _dispatch_pending(self):
        s = self.state
        while s.bo_index < len(self.bo):
            item = self.bo[s.bo_index]
            if not self._dispatch(item):
                break
            logger.debug("frame %d: started %s (%s), index -> %d",
                         s.frame, item.name, item.type, s.bo_index + 1)
            s.bo_index += 1
            snapshot = s.copy()
            snapshot.mid_frame = True
            self._snapshots[s.bo_index] = snapshot

    def _dispatch(self, item: BuildOrderItem) -> bool:
        if item.type == "action":
            return self._execute_action(item.name)
        if item.type == "upgrade":
            return self._research_upgrade(item)
        return self._train_unit(item)

    def _train_unit(self, item: BuildOrderItem) -> bool:
        if not self.can_afford(item):
            return False
        info = TRAINED_BY[item.name]
        if not self._requirements_met(info.required_structure, info.required_upgrade):
            return False

        data = UNITS[item.name]
        for unit in self.idle_units():
            slot = self._train_slot(unit, info, data)
            if slot is None:
                continue
            self._assign_production(unit, slot, item, info)
            self._spend(data.minerals, data.vespene, data.supply)
            return True
        return False

    def _train_slot(self, unit: Unit, info, data) -> Optional[str]:
        if unit.is_scouting:
            return None
        if unit.name in info.trained_by:
            if info.requires_techlab and not unit.has_techlab:
                return None
            if data.is_addon and unit.has_addon:
                return None
            if not unit.tasks:
                return PRIMARY
            if (unit.has_reactor and not unit.addon_tasks
                    and not data.is_structure and not info.is_morph):
                return ADDON
            return None
        if "Larva" in info.trained_by and unit.larva_count > 0:
            return LARVA
        return None

    def _assign_production(self, unit: Unit, slot: str, item: BuildOrderItem, info):
        frame = self.state.frame
        data = UNITS[item.name]
        if info.is_morph or info.consumes_unit:
            effect = TaskEffect.MORPH_OWNER
        elif item.type == "worker":
            effect = TaskEffect.PRODUCE_WORKER
        elif item.type == "structure":
            effect = TaskEffect.PRODUCE_STRUCTURE
        else:
            effect = TaskEffect.PRODUCE_UNIT

        if slot == LARVA:
            unit.larva_count -= 1
            unit.linked_tasks.append(Task(data.frames, effect, item.name, start_frame=frame))
        elif slot == ADDON:
            unit.addon_tasks.append(Task(data.frames, effect, item.name, start_frame=frame))
        elif data.is_structure and unit.name in WORKER_NAMES:
            self._assign_worker_build(unit, data, info, effect)
        else:
            unit.tasks.append(Task(data.frames, effect, item.name, start_frame=frame))

    def _assign_worker_build(self, worker: Unit, data, info, effect: TaskEffect):
        frame = self.state.frame
        walk = self.settings.frames("worker_build_delay")
        move = Task(walk, start_frame=frame)
        back = Task(self.settings.frames("worker_return_delay"))

        if info.consumes_unit:
            # Drone turns into the structure; its supply is freed right away
            worker.tasks += [move, Task(data.frames, effect, data.name)]
            self._release_supply(UNITS[worker.name].supply)
        elif data.race == "protoss":
            # Probe only starts the warp-in, then goes back to mining
            warp = Task(walk + data.frames, effect, data.name,
                        start_frame=frame + math.ceil(walk))
            worker.tasks += [move, back]
            worker.linked_tasks.append(warp)
        else:
            worker.tasks += [move, Task(data.frames, effect, data.name), back]

    def _research_upgrade(self, item: BuildOrderItem) -> bool:
        if not self.can_afford(item):
            return False
        info = RESEARCHED_BY[item.name]
        if not self._requirements_met(info.required_structure, info.required_upgrade):
            return False

        upgrade = UPGRADES[item.name]
        for unit in self.idle_units():
            if unit.name not in info.researched_by:
                continue
            if info.requires_techlab:
                if not unit.has_techlab or unit.addon_tasks:
                    continue
                queue = unit.addon_tasks
            elif not unit.tasks:
                queue = unit.tasks
            else:
                continue
            queue.append(Task(upgrade.frames, TaskEffect.MARK_UPGRADE, item.name,
                              start_frame=self.state.frame))
            self._spend(upgrade.minerals, upgrade.vespene, 0)
            return True
        return False

    def _requirements_met(self, structure: Optional[str], upgrade: Optional[str]) -> bool:
        if upgrade is not None and upgrade not in self.state.upgrades:
            return False
        if structure is None:
            return True
        return any(satisfies_requirement(u.name, structure)
                   for u in self.state.units.values())

    # ------------------------------------------------------------------
    # Custom actions
    # ------------------------------------------------------------------

    def _execute_action(self, name: str) -> bool:
        handlers = {
            "worker_to_gas": lambda: self._send_to_gas(1),
            "3worker_to_gas": lambda: self._send_to_gas(3),
            "worker_to_minerals": self._send_to_minerals,
            "worker_scout": self._send_scout,
            "call_down_mule": self._call_down_mule,
            "call_down_supply": self._call_down_supply,
            "swap_addon": self._swap_addon,
            "chrono_boost": self._chrono_boost,
            "inject": self._inject,
        }
        if name not in ACTIONS or not handlers[name]():
            return False
        self._log_event(name, "action", self.state.frame)
        return True

    def _mining_workers(self, gather: str) -> List[Unit]:
        return [u for u in self.state.units.values()
                if u.name in WORKER_NAMES and u.gather == gather
                and not u.tasks and not u.is_scouting]

    def _send_to_gas(self, count: int) -> bool:
        s = self.state
        assigned = sum(1 for u in s.units.values()
                       if u.name in WORKER_NAMES and u.gather == "vespene")
        if assigned + count > WORKERS_PER_GAS * s.gas_count:
            return False
        candidates = self._mining_workers("minerals")
        if len(candidates) < count:
            return False
        for worker in candidates[:count]:
            worker.gather = "vespene"
        return True

    def _send_to_minerals(self) -> bool:
        candidates = self._mining_workers("vespene")
        if not candidates:
            return False
        candidates[0].gather = "minerals"
        return True

    def _send_scout(self) -> bool:
        candidates = self._mining_workers("minerals")
        if not candidates:
            return False
        scout = candidates[0]
        scout.is_scouting = True
        scout.tasks.append(Task(seconds_to_frames(SCOUT_SECONDS), start_frame=self.state.frame))
        return True

    def _find_caster(self, names, energy: float) -> Optional[Unit]:
        for unit in self.state.units.values():
            if unit.name in names and unit.energy >= energy:
                return unit
        return None

    def _call_down_mule(self) -> bool:
        orbital = self._find_caster({"OrbitalCommand"}, MULE_ENERGY)
        if orbital is None:
            return False
        orbital.energy -= MULE_ENERGY
        mule = self._spawn("MULE")
        mule.expires_at = self.state.frame + seconds_to_frames(MULE_SECONDS)
        self.state.mule_count += 1
        return True

    def _call_down_supply(self) -> bool:
        s = self.state
        orbital = self._find_caster({"OrbitalCommand"}, SUPPLY_DROP_ENERGY)
        depot = next((u for u in s.units.values()
                      if u.name == "SupplyDepot" and not u.has_supply_drop), None)
        if orbital is None or depot is None:
            return False
        orbital.energy -= SUPPLY_DROP_ENERGY
        depot.has_supply_drop = True
        s.supply_cap = min(MAX_SUPPLY, s.supply_cap + SUPPLY_DROP_BONUS)
        s.supply_left = s.supply_cap - s.supply_used
        return True

    def _swap_addon(self) -> bool:
        units = self.state.units.values()
        source = next((u for u in units if u.name in ADDON_HOSTS and u.has_addon
                       and not u.tasks and not u.addon_tasks), None)
        target = next((u for u in units if u.name in ADDON_HOSTS and not u.has_addon
                       and not u.tasks and u is not source), None)
        if source is None or target is None:
            return False

        frame = self.state.frame
        delay = self.settings.frames("addon_swap_delay")
        target.has_reactor, target.has_techlab = source.has_reactor, source.has_techlab
        source.has_reactor = source.has_techlab = False
        source.tasks.append(Task(delay, start_frame=frame))
        target.tasks.append(Task(delay, start_frame=frame))
        target.addon_tasks.append(Task(delay, start_frame=frame))
        return True

    def _chrono_boost(self) -> bool:
        frame = self.state.frame
        nexus = self._find_caster({"Nexus"}, CHRONO_ENERGY)
        target = next((u for u in self.state.units.values()
                       if u.name in CHRONO_TARGETS and u.tasks
                       and not u.has_chrono(frame)), None)
        if nexus is None or target is None:
            return False
        nexus.energy -= CHRONO_ENERGY
        target.chrono_until = frame + seconds_to_frames(CHRONO_SECONDS)
        return True

    def _inject(self) -> bool:
        queen = self._find_caster({"Queen"}, INJECT_ENERGY)
        hatch = next((u for u in self.state.units.values()
                      if u.name in LARVA_PRODUCERS and u.inject_until is None), None)
        if queen is None or hatch is None:
            return False
        queen.energy -= INJECT_ENERGY
        hatch.inject_until = self.state.frame + seconds_to_frames(INJECT_SECONDS)
        return True

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def _spawn(self, name: str, energy: float = 0.0) -> Unit:
        s = self.state
        s.next_unit_id += 1
        unit = Unit(unit_id=s.next_unit_id, name=name, energy=energy)
        s.units[unit.unit_id] = unit
        return unit

    def _spend(self, minerals: float, vespene: float, supply: int):
        s = self.state
        s.minerals -= minerals
        s.vespene -= vespene
        if supply > 0:
            s.supply_used += supply
            s.supply_left -= supply

    def _release_supply(self, supply: int):
        s = self.state
        s.supply_used -= supply
        s.supply_left = s.supply_cap - s.supply_used

    def _log_event(self, name: str, category: str, start_frame: Optional[int]):
        s = self.state
        start = s.frame if start_frame is None else start_frame
        s.events.append(Event(name, name.upper(), category, start, s.frame))

    def _build_result(self, status: SimStatus) -> SimResult:
        s = self.state
        self._count_workers()
        blocked = self.bo[s.bo_index] if s.bo_index < len(self.bo) else None
        return SimResult(
            build_order_name=self.name,
            race=self.race,
            status=status,
            bo_index=s.bo_index,
            bo_length=len(self.bo),
            blocked_item=blocked,
            frame=s.frame,
            minerals=s.minerals,
            vespene=s.vespene,
            supply_used=s.supply_used,
            supply_left=s.supply_left,
            supply_cap=s.supply_cap,
            workers_minerals=s.workers_minerals,
            workers_vespene=s.workers_vespene,
            events=list(s.events),
            unit_counts=self.unit_counts(),
            upgrades=list(s.upgrades),
        )

    def _log_outcome(self, result: SimResult):
        if result.completed:
            logger.info("%s: completed %d items in %d frames",
                        self.name or self.race, result.bo_length, result.frame)
        else:
            logger.warning("%s: %s at item %d/%d (%s) after %d frames "
                           "[minerals=%.0f vespene=%.0f supply=%d/%d]",
                           self.name or self.race, result.status.value,
                           result.bo_index, result.bo_length,
                           result.blocked_item.name if result.blocked_item else "-",
                           result.frame, result.minerals, result.vespene,
                           result.supply_used, result.supply_cap)


# ---------------------------------------------------------------------------
# Incremental re-simulation
# ---------------------------------------------------------------------------

def common_prefix(a: Sequence[BuildOrderItem], b: Sequence[BuildOrderItem]) -> int:
    n = 0
    for left, right in zip(a, b):
        if left != right:
            break
        n += 1
    return n


def resimulate(previous: SimulationEngine, build_order: Iterable[ItemLike],
               edit_index: Optional[int] = None,
               settings: Optional[SimSettings] = None) -> SimulationEngine:
    """Engine for an edited build order, resumed from the last usable snapshot.

    Snapshots of ``previous`` at or before the first changed item stay valid.
    Changing race or settings forces a cold start. The returned engine has not
    been run yet.
    """
    settings = settings or previous.settings
    engine = SimulationEngine(previous.race, build_order, settings,
                              income=previous.income, name=previous.name)
    if settings != previous.settings:
        return engine

    limit = common_prefix(previous.bo, engine.bo)
    if edit_index is not None:
        limit = min(limit, edit_index)
    usable = [i for i in previous.snapshot_indices() if i <= limit]
    if not usable:
        return engine

    engine.resume_from(previous.get_snapshot(usable[-1]))
    engine._snapshots.update({i: previous._snapshots[i] for i in usable})
    logger.debug("resuming %s from index %d", engine.name or engine.race, usable[-1])
    return engine
