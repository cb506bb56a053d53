"""
SC2 Build Order Simulator - Income Model
=========================================
Mining income as a pure function of worker saturation.

Rates are per game second; ``IncomeModel`` converts them to per-frame values
and memoizes by exact input tuple. The input space is small (worker, base and
structure counts), so the cache is never invalidated.
"""

from typing import Dict, Tuple

from sc2_sim.constants import FRAMES_PER_SECOND, MULE_SECONDS

# ---------------------------------------------------------------------------
# Mining rates (per second)
# ---------------------------------------------------------------------------

MINERAL_PATCHES_PER_BASE = 8
MINERALS_PER_WORKER = 0.9375         # first two workers on a patch
MINERALS_PER_THIRD_WORKER = 0.4      # third worker on a patch
MINERALS_PER_MULE = 225 / MULE_SECONDS

VESPENE_PER_WORKER = 0.94            # first two workers on a geyser
VESPENE_PER_THIRD_WORKER = 0.74


def income_minerals(workers: int, bases: int, mules: int = 0) -> float:
    """Mineral income per second for ``workers`` spread across ``bases``."""
    bases = max(bases, 0)
    optimal = min(workers, 2 * MINERAL_PATCHES_PER_BASE * bases)
    oversaturated = min(workers - optimal, MINERAL_PATCHES_PER_BASE * bases)
    return (optimal * MINERALS_PER_WORKER
            + max(oversaturated, 0) * MINERALS_PER_THIRD_WORKER
            + max(mules, 0) * MINERALS_PER_MULE)


def income_vespene(workers: int, gases: int) -> float:
    """Vespene income per second for ``workers`` spread across ``gases``."""
    gases = max(gases, 0)
    optimal = min(workers, 2 * gases)
    third = min(workers - optimal, gases)
    return optimal * VESPENE_PER_WORKER + max(third, 0) * VESPENE_PER_THIRD_WORKER


class IncomeModel:
    """Read-through cache of per-frame income keyed by the formula inputs.

    One instance may be shared by several engines (the web server and the
    compare command do this); cached values are immutable floats.
    """

    def __init__(self):
        self._minerals: Dict[Tuple[int, int, int], float] = {}
        self._vespene: Dict[Tuple[int, int], float] = {}

    def minerals_per_frame(self, workers: int, bases: int, mules: int) -> float:
        key = (workers, bases, mules)
        value = self._minerals.get(key)
        if value is None:
            value = income_minerals(workers, bases, mules) / FRAMES_PER_SECOND
            self._minerals[key] = value
        return value

    def vespene_per_frame(self, workers: int, gases: int) -> float:
        key = (workers, gases)
        value = self._vespene.get(key)
        if value is None:
            value = income_vespene(workers, gases) / FRAMES_PER_SECOND
            self._vespene[key] = value
        return value

    @property
    def cache_size(self) -> int:
        return len(self._minerals) + len(self._vespene)
