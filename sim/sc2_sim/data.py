"""
SC2 Build Order Simulator - Static Game Data
=============================================
Costs, build times, producer capabilities and prerequisites for all three
races (Legacy of the Void ladder values). Pure lookup tables, no logic.

Build times are stored in game seconds; use ``UnitData.frames`` for frames.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from sc2_sim.constants import seconds_to_frames


# =============================================================================
# RECORD TYPES
# =============================================================================

@dataclass(frozen=True)
class UnitData:
    name: str
    race: str
    minerals: int
    vespene: int
    supply: int            # negative = provides supply
    build_seconds: float
    is_structure: bool = False
    is_worker: bool = False
    is_addon: bool = False

    @property
    def frames(self) -> float:
        return seconds_to_frames(self.build_seconds)


@dataclass(frozen=True)
class TrainInfo:
    trained_by: FrozenSet[str]
    required_structure: Optional[str] = None
    required_upgrade: Optional[str] = None
    is_morph: bool = False          # the producer turns into the product
    consumes_unit: bool = False     # the producer is used up (drone -> structure)
    requires_techlab: bool = False


@dataclass(frozen=True)
class UpgradeData:
    name: str
    race: str
    minerals: int
    vespene: int
    research_seconds: float

    @property
    def frames(self) -> float:
        return seconds_to_frames(self.research_seconds)


@dataclass(frozen=True)
class ResearchInfo:
    researched_by: FrozenSet[str]
    required_structure: Optional[str] = None
    required_upgrade: Optional[str] = None
    requires_techlab: bool = False


@dataclass(frozen=True)
class ActionData:
    name: str
    race: Optional[str]     # None = every race
    description: str


@dataclass(frozen=True)
class RaceStart:
    townhall: str
    worker: str
    supply_cap: int


# =============================================================================
# RACES
# =============================================================================

RACES: Dict[str, RaceStart] = {
    "terran": RaceStart(townhall="CommandCenter", worker="SCV", supply_cap=15),
    "protoss": RaceStart(townhall="Nexus", worker="Probe", supply_cap=15),
    "zerg": RaceStart(townhall="Hatchery", worker="Drone", supply_cap=14),
}

TOWNHALLS = frozenset({
    "CommandCenter", "OrbitalCommand", "PlanetaryFortress",
    "Nexus", "Hatchery", "Lair", "Hive",
})
BASE_TOWNHALLS = frozenset({"CommandCenter", "Nexus", "Hatchery"})
GAS_STRUCTURES = frozenset({"Refinery", "Assimilator", "Extractor"})
LARVA_PRODUCERS = frozenset({"Hatchery", "Lair", "Hive"})
ADDON_HOSTS = frozenset({"Barracks", "Factory", "Starport"})
CHRONO_TARGETS = frozenset({
    "Nexus", "Gateway", "RoboticsFacility", "Stargate", "Forge",
    "CyberneticsCore", "TwilightCouncil", "RoboticsBay", "FleetBeacon",
    "TemplarArchive", "DarkShrine",
})

# A requirement on the key is also met by any of the morphed forms.
REQUIREMENT_ALIASES: Dict[str, FrozenSet[str]] = {
    "CommandCenter": frozenset({"OrbitalCommand", "PlanetaryFortress"}),
    "Hatchery": frozenset({"Lair", "Hive"}),
    "Lair": frozenset({"Hive"}),
    "Spire": frozenset({"GreaterSpire"}),
}


# =============================================================================
# UNITS & STRUCTURES
# =============================================================================

# (name, race, minerals, vespene, supply, seconds, kind, trained_by,
#  required_structure, flags)
# kind: worker | unit | structure | addon | special (never trained)
# flags: morph, consumes, techlab
_UNIT_SEED = [
    # --- Terran ---------------------------------------------------------
    ("SCV", "terran", 50, 0, 1, 12, "worker",
     ("CommandCenter", "OrbitalCommand", "PlanetaryFortress"), None, ""),
    ("MULE", "terran", 0, 0, 0, 0, "special", (), None, ""),
    ("Marine", "terran", 50, 0, 1, 18, "unit", ("Barracks",), None, ""),
    ("Reaper", "terran", 50, 50, 1, 32, "unit", ("Barracks",), None, ""),
    ("Marauder", "terran", 100, 25, 2, 21, "unit", ("Barracks",), None, "techlab"),
    ("Ghost", "terran", 150, 125, 2, 29, "unit", ("Barracks",), "GhostAcademy", "techlab"),
    ("Hellion", "terran", 100, 0, 2, 21, "unit", ("Factory",), None, ""),
    ("WidowMine", "terran", 75, 25, 2, 21, "unit", ("Factory",), None, ""),
    ("Cyclone", "terran", 125, 50, 3, 32, "unit", ("Factory",), None, "techlab"),
    ("SiegeTank", "terran", 150, 125, 3, 32, "unit", ("Factory",), None, "techlab"),
    ("Thor", "terran", 300, 200, 6, 43, "unit", ("Factory",), "Armory", "techlab"),
    ("VikingFighter", "terran", 150, 75, 2, 30, "unit", ("Starport",), None, ""),
    ("Medivac", "terran", 100, 100, 2, 30, "unit", ("Starport",), None, ""),
    ("Liberator", "terran", 150, 125, 3, 43, "unit", ("Starport",), None, ""),
    ("Banshee", "terran", 150, 100, 3, 43, "unit", ("Starport",), None, "techlab"),
    ("Raven", "terran", 100, 150, 2, 43, "unit", ("Starport",), None, "techlab"),
    ("Battlecruiser", "terran", 400, 300, 6, 64, "unit", ("Starport",), "FusionCore", "techlab"),
    ("CommandCenter", "terran", 400, 0, -15, 71, "structure", ("SCV",), None, ""),
    ("SupplyDepot", "terran", 100, 0, -8, 21, "structure", ("SCV",), None, ""),
    ("Refinery", "terran", 75, 0, 0, 21, "structure", ("SCV",), None, ""),
    ("Barracks", "terran", 150, 0, 0, 46, "structure", ("SCV",), "SupplyDepot", ""),
    ("EngineeringBay", "terran", 125, 0, 0, 25, "structure", ("SCV",), "CommandCenter", ""),
    ("Bunker", "terran", 100, 0, 0, 29, "structure", ("SCV",), "Barracks", ""),
    ("MissileTurret", "terran", 100, 0, 0, 18, "structure", ("SCV",), "EngineeringBay", ""),
    ("SensorTower", "terran", 125, 100, 0, 18, "structure", ("SCV",), "EngineeringBay", ""),
    ("Factory", "terran", 150, 100, 0, 43, "structure", ("SCV",), "Barracks", ""),
    ("GhostAcademy", "terran", 150, 50, 0, 29, "structure", ("SCV",), "Barracks", ""),
    ("Starport", "terran", 150, 100, 0, 36, "structure", ("SCV",), "Factory", ""),
    ("Armory", "terran", 150, 100, 0, 46, "structure", ("SCV",), "Factory", ""),
    ("FusionCore", "terran", 150, 150, 0, 46, "structure", ("SCV",), "Starport", ""),
    ("OrbitalCommand", "terran", 150, 0, 0, 25, "structure",
     ("CommandCenter",), "Barracks", "morph"),
    ("PlanetaryFortress", "terran", 150, 150, 0, 36, "structure",
     ("CommandCenter",), "EngineeringBay", "morph"),
    ("Reactor", "terran", 50, 50, 0, 36, "addon", ("Barracks", "Factory", "Starport"), None, ""),
    ("TechLab", "terran", 50, 25, 0, 18, "addon", ("Barracks", "Factory", "Starport"), None, ""),

    # --- Protoss --------------------------------------------------------
    ("Probe", "protoss", 50, 0, 1, 12, "worker", ("Nexus",), None, ""),
    ("Zealot", "protoss", 100, 0, 2, 27, "unit", ("Gateway",), None, ""),
    ("Adept", "protoss", 100, 25, 2, 30, "unit", ("Gateway",), "CyberneticsCore", ""),
    ("Stalker", "protoss", 125, 50, 2, 30, "unit", ("Gateway",), "CyberneticsCore", ""),
    ("Sentry", "protoss", 50, 100, 2, 26, "unit", ("Gateway",), "CyberneticsCore", ""),
    ("HighTemplar", "protoss", 50, 150, 2, 39, "unit", ("Gateway",), "TemplarArchive", ""),
    ("DarkTemplar", "protoss", 125, 125, 2, 39, "unit", ("Gateway",), "DarkShrine", ""),
    ("Observer", "protoss", 25, 75, 1, 21, "unit", ("RoboticsFacility",), None, ""),
    ("WarpPrism", "protoss", 250, 0, 2, 36, "unit", ("RoboticsFacility",), None, ""),
    ("Immortal", "protoss", 275, 100, 4, 39, "unit", ("RoboticsFacility",), None, ""),
    ("Colossus", "protoss", 300, 200, 6, 54, "unit", ("RoboticsFacility",), "RoboticsBay", ""),
    ("Disruptor", "protoss", 150, 150, 3, 36, "unit", ("RoboticsFacility",), "RoboticsBay", ""),
    ("Phoenix", "protoss", 150, 100, 2, 25, "unit", ("Stargate",), None, ""),
    ("Oracle", "protoss", 150, 150, 3, 37, "unit", ("Stargate",), None, ""),
    ("VoidRay", "protoss", 250, 150, 4, 43, "unit", ("Stargate",), None, ""),
    ("Tempest", "protoss", 250, 175, 5, 43, "unit", ("Stargate",), "FleetBeacon", ""),
    ("Carrier", "protoss", 350, 250, 6, 64, "unit", ("Stargate",), "FleetBeacon", ""),
    ("Nexus", "protoss", 400, 0, -15, 71, "structure", ("Probe",), None, ""),
    ("Pylon", "protoss", 100, 0, -8, 18, "structure", ("Probe",), None, ""),
    ("Assimilator", "protoss", 75, 0, 0, 21, "structure", ("Probe",), None, ""),
    ("Gateway", "protoss", 150, 0, 0, 46, "structure", ("Probe",), "Pylon", ""),
    ("Forge", "protoss", 150, 0, 0, 32, "structure", ("Probe",), "Pylon", ""),
    ("PhotonCannon", "protoss", 150, 0, 0, 29, "structure", ("Probe",), "Forge", ""),
    ("ShieldBattery", "protoss", 100, 0, 0, 29, "structure", ("Probe",), "CyberneticsCore", ""),
    ("CyberneticsCore", "protoss", 150, 0, 0, 36, "structure", ("Probe",), "Gateway", ""),
    ("TwilightCouncil", "protoss", 150, 100, 0, 36, "structure", ("Probe",), "CyberneticsCore", ""),
    ("RoboticsFacility", "protoss", 150, 100, 0, 46, "structure", ("Probe",), "CyberneticsCore", ""),
    ("Stargate", "protoss", 150, 150, 0, 43, "structure", ("Probe",), "CyberneticsCore", ""),
    ("TemplarArchive", "protoss", 150, 200, 0, 36, "structure", ("Probe",), "TwilightCouncil", ""),
    ("DarkShrine", "protoss", 150, 150, 0, 71, "structure", ("Probe",), "TwilightCouncil", ""),
    ("RoboticsBay", "protoss", 150, 150, 0, 46, "structure", ("Probe",), "RoboticsFacility", ""),
    ("FleetBeacon", "protoss", 300, 200, 0, 43, "structure", ("Probe",), "Stargate", ""),

    # --- Zerg -----------------------------------------------------------
    ("Drone", "zerg", 50, 0, 1, 12, "worker", ("Larva",), None, ""),
    ("Overlord", "zerg", 100, 0, -8, 18, "unit", ("Larva",), None, ""),
    ("Zergling", "zerg", 50, 0, 1, 17, "unit", ("Larva",), "SpawningPool", ""),
    ("Queen", "zerg", 150, 0, 2, 36, "unit", ("Hatchery", "Lair", "Hive"), "SpawningPool", ""),
    ("Roach", "zerg", 75, 25, 2, 19, "unit", ("Larva",), "RoachWarren", ""),
    ("Ravager", "zerg", 25, 75, 1, 9, "unit", ("Roach",), "RoachWarren", "morph"),
    ("Baneling", "zerg", 25, 25, 0, 14, "unit", ("Zergling",), "BanelingNest", "morph"),
    ("Overseer", "zerg", 50, 50, 0, 12, "unit", ("Overlord",), "Lair", "morph"),
    ("Hydralisk", "zerg", 100, 50, 2, 24, "unit", ("Larva",), "HydraliskDen", ""),
    ("Mutalisk", "zerg", 100, 100, 2, 24, "unit", ("Larva",), "Spire", ""),
    ("Corruptor", "zerg", 150, 100, 2, 29, "unit", ("Larva",), "Spire", ""),
    ("Infestor", "zerg", 100, 150, 2, 36, "unit", ("Larva",), "InfestationPit", ""),
    ("SwarmHost", "zerg", 100, 75, 3, 29, "unit", ("Larva",), "InfestationPit", ""),
    ("Viper", "zerg", 100, 200, 3, 29, "unit", ("Larva",), "Hive", ""),
    ("Ultralisk", "zerg", 275, 200, 6, 39, "unit", ("Larva",), "UltraliskCavern", ""),
    ("Hatchery", "zerg", 300, 0, -6, 71, "structure", ("Drone",), None, "consumes"),
    ("Extractor", "zerg", 25, 0, 0, 21, "structure", ("Drone",), None, "consumes"),
    ("SpawningPool", "zerg", 200, 0, 0, 46, "structure", ("Drone",), "Hatchery", "consumes"),
    ("EvolutionChamber", "zerg", 75, 0, 0, 25, "structure", ("Drone",), "Hatchery", "consumes"),
    ("RoachWarren", "zerg", 150, 0, 0, 39, "structure", ("Drone",), "SpawningPool", "consumes"),
    ("BanelingNest", "zerg", 100, 50, 0, 43, "structure", ("Drone",), "SpawningPool", "consumes"),
    ("SpineCrawler", "zerg", 100, 0, 0, 36, "structure", ("Drone",), "SpawningPool", "consumes"),
    ("SporeCrawler", "zerg", 75, 0, 0, 21, "structure", ("Drone",), "SpawningPool", "consumes"),
    ("HydraliskDen", "zerg", 100, 100, 0, 29, "structure", ("Drone",), "Lair", "consumes"),
    ("Spire", "zerg", 200, 200, 0, 71, "structure", ("Drone",), "Lair", "consumes"),
    ("InfestationPit", "zerg", 100, 100, 0, 36, "structure", ("Drone",), "Lair", "consumes"),
    ("UltraliskCavern", "zerg", 150, 200, 0, 46, "structure", ("Drone",), "Hive", "consumes"),
    ("Lair", "zerg", 150, 100, 0, 57, "structure", ("Hatchery",), "SpawningPool", "morph"),
    ("Hive", "zerg", 200, 150, 0, 71, "structure", ("Lair",), "InfestationPit", "morph"),
    ("GreaterSpire", "zerg", 100, 150, 0, 71, "structure", ("Spire",), "Hive", "morph"),
]


def _build_unit_tables():
    units, trained_by = {}, {}
    for (name, race, minerals, vespene, supply, seconds, kind,
         producers, required, flags) in _UNIT_SEED:
        units[name] = UnitData(
            name=name, race=race, minerals=minerals, vespene=vespene,
            supply=supply, build_seconds=seconds,
            is_structure=kind in ("structure", "addon"),
            is_worker=kind == "worker",
            is_addon=kind == "addon",
        )
        if kind == "special":
            continue
        trained_by[name] = TrainInfo(
            trained_by=frozenset(producers),
            required_structure=required,
            is_morph="morph" in flags,
            consumes_unit="consumes" in flags,
            requires_techlab="techlab" in flags,
        )
    return units, trained_by


UNITS, TRAINED_BY = _build_unit_tables()


# =============================================================================
# UPGRADES
# =============================================================================

# (name, race, minerals, vespene, seconds, researched_by, required_structure,
#  required_upgrade, requires_techlab)
_UPGRADE_SEED = [
    # --- Terran ---------------------------------------------------------
    ("Stimpack", "terran", 100, 100, 100, ("Barracks",), None, None, True),
    ("CombatShield", "terran", 100, 100, 79, ("Barracks",), None, None, True),
    ("ConcussiveShells", "terran", 50, 50, 43, ("Barracks",), None, None, True),
    ("InfernalPreIgniter", "terran", 100, 100, 79, ("Factory",), None, None, True),
    ("BansheeCloak", "terran", 100, 100, 79, ("Starport",), None, None, True),
    ("TerranInfantryWeaponsLevel1", "terran", 100, 100, 114,
     ("EngineeringBay",), None, None, False),
    ("TerranInfantryWeaponsLevel2", "terran", 175, 175, 136,
     ("EngineeringBay",), "Armory", "TerranInfantryWeaponsLevel1", False),
    ("TerranInfantryArmorsLevel1", "terran", 100, 100, 114,
     ("EngineeringBay",), None, None, False),
    ("TerranInfantryArmorsLevel2", "terran", 175, 175, 136,
     ("EngineeringBay",), "Armory", "TerranInfantryArmorsLevel1", False),
    # --- Protoss --------------------------------------------------------
    ("WarpGateResearch", "protoss", 50, 50, 100, ("CyberneticsCore",), None, None, False),
    ("Charge", "protoss", 100, 100, 100, ("TwilightCouncil",), None, None, False),
    ("Blink", "protoss", 150, 150, 121, ("TwilightCouncil",), None, None, False),
    ("ResonatingGlaives", "protoss", 100, 100, 100, ("TwilightCouncil",), None, None, False),
    ("ExtendedThermalLance", "protoss", 150, 150, 100, ("RoboticsBay",), None, None, False),
    ("ProtossGroundWeaponsLevel1", "protoss", 100, 100, 129, ("Forge",), None, None, False),
    ("ProtossGroundWeaponsLevel2", "protoss", 150, 150, 154,
     ("Forge",), "TwilightCouncil", "ProtossGroundWeaponsLevel1", False),
    ("ProtossGroundArmorsLevel1", "protoss", 100, 100, 129, ("Forge",), None, None, False),
    # --- Zerg -----------------------------------------------------------
    ("zerglingmovementspeed", "zerg", 100, 100, 79, ("SpawningPool",), None, None, False),
    ("GlialReconstitution", "zerg", 100, 100, 79, ("RoachWarren",), "Lair", None, False),
    ("CentrificalHooks", "zerg", 100, 100, 71, ("BanelingNest",), "Lair", None, False),
    ("Burrow", "zerg", 100, 100, 71, ("Hatchery", "Lair", "Hive"), None, None, False),
    ("overlordspeed", "zerg", 100, 100, 43, ("Hatchery", "Lair", "Hive"), None, None, False),
    ("ZergMissileWeaponsLevel1", "zerg", 100, 100, 114, ("EvolutionChamber",), None, None, False),
    ("ZergGroundArmorsLevel1", "zerg", 150, 150, 114, ("EvolutionChamber",), None, None, False),
    ("ZergMissileWeaponsLevel2", "zerg", 150, 150, 136,
     ("EvolutionChamber",), "Lair", "ZergMissileWeaponsLevel1", False),
]


def _build_upgrade_tables():
    upgrades, researched_by = {}, {}
    for (name, race, minerals, vespene, seconds, researchers,
         required, required_upgrade, techlab) in _UPGRADE_SEED:
        upgrades[name] = UpgradeData(name, race, minerals, vespene, seconds)
        researched_by[name] = ResearchInfo(
            researched_by=frozenset(researchers),
            required_structure=required,
            required_upgrade=required_upgrade,
            requires_techlab=techlab,
        )
    return upgrades, researched_by


UPGRADES, RESEARCHED_BY = _build_upgrade_tables()


# =============================================================================
# CUSTOM ACTIONS
# =============================================================================

ACTIONS: Dict[str, ActionData] = {a.name: a for a in [
    ActionData("worker_to_gas", None, "Send one mineral worker to gas"),
    ActionData("3worker_to_gas", None, "Send three mineral workers to gas"),
    ActionData("worker_to_minerals", None, "Send one gas worker back to minerals"),
    ActionData("worker_scout", None, "Send one mineral worker to scout"),
    ActionData("call_down_mule", "terran", "Orbital Command calls down a MULE"),
    ActionData("call_down_supply", "terran", "Orbital Command drops supplies on a depot"),
    ActionData("swap_addon", "terran", "Move an addon to an addon-less production structure"),
    ActionData("chrono_boost", "protoss", "Nexus chrono boosts a busy structure"),
    ActionData("inject", "zerg", "Queen injects larva into a townhall"),
]}


# =============================================================================
# LOOKUPS
# =============================================================================

def item_race(name: str) -> Optional[str]:
    if name in UNITS:
        return UNITS[name].race
    if name in UPGRADES:
        return UPGRADES[name].race
    if name in ACTIONS:
        return ACTIONS[name].race
    return None


def infer_item_type(name: str) -> Optional[str]:
    """Map a bare name to its build order type ("worker", "unit", ...)."""
    if name in TRAINED_BY:
        unit = UNITS[name]
        if unit.is_worker:
            return "worker"
        return "structure" if unit.is_structure else "unit"
    if name in UPGRADES:
        return "upgrade"
    if name in ACTIONS:
        return "action"
    return None


def satisfies_requirement(unit_name: str, required: str) -> bool:
    return unit_name == required or unit_name in REQUIREMENT_ALIASES.get(required, ())


def names_for_race(race: str) -> Dict[str, list]:
    """Group every trainable / researchable / action name of a race by type."""
    groups = {"worker": [], "unit": [], "structure": [], "upgrade": [], "action": []}
    for name in TRAINED_BY:
        if UNITS[name].race == race:
            groups[infer_item_type(name)].append(name)
    for name, upgrade in UPGRADES.items():
        if upgrade.race == race:
            groups["upgrade"].append(name)
    for name, action in ACTIONS.items():
        if action.race in (None, race):
            groups["action"].append(name)
    return groups
