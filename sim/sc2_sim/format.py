"""
SC2 Build Order Simulator - Output Formatting
==============================================
Pretty-printing for simulation results.
"""

from typing import Optional

from sc2_sim.constants import FRAMES_PER_SECOND
from sc2_sim.models import SimResult, SimStatus


def fmt_time(frame: Optional[float]) -> str:
    """Game clock (m:ss) for a frame number."""
    if frame is None:
        return "--"
    m, s = divmod(int(frame // FRAMES_PER_SECOND), 60)
    return f"{m}:{s:02d}"


def first_event_frame(result: SimResult, category: str) -> Optional[int]:
    """End frame of the first finished event of ``category``."""
    frames = [e.end_frame for e in result.events if e.category == category]
    return min(frames) if frames else None


def print_full_report(result: SimResult):
    print()
    print("=" * 70)
    print(f"  SC2 BUILD ORDER SIMULATOR")
    print(f"  Build Order: {result.build_order_name or '(unnamed)'} [{result.race}]")
    print(f"  Status: {result.status.value.upper()}")
    print(f"  Duration: {fmt_time(result.frame)}")
    print("=" * 70)

    print_timeline(result)
    if not result.completed:
        print_blocked(result)
    print_unit_counts(result)
    print_summary(result)


def print_timeline(result: SimResult):
    print()
    print("--- TIMELINE ---")
    print(f" {'Start':>6} {'End':>6}  {'Category':<10} {'Name':<28}")
    print(f" {'-----':>6} {'---':>6}  {'--------':<10} {'----':<28}")
    for e in result.events:
        print(f" {fmt_time(e.start_frame):>6} {fmt_time(e.end_frame):>6}  "
              f"{e.category:<10} {e.name:<28}")


def print_blocked(result: SimResult):
    print()
    print("--- BLOCKED ---")
    item = result.blocked_item
    label = f"{item.name} ({item.type})" if item else "-"
    print(f" Stopped at item {result.bo_index + 1}/{result.bo_length}: {label}")
    reason = "idle limit reached" if result.status is SimStatus.STALLED else "time limit reached"
    print(f" Reason: {reason}")


def print_unit_counts(result: SimResult):
    print()
    print("--- UNITS ---")
    if not result.unit_counts:
        print(" None")
        return
    for name in sorted(result.unit_counts):
        print(f" {name:<28} {result.unit_counts[name]:>4}")


def print_summary(result: SimResult):
    print()
    print("--- SUMMARY ---")
    print(f" Items started:    {result.bo_index}/{result.bo_length}")
    print(f" Minerals:         {result.minerals:.0f}")
    print(f" Vespene:          {result.vespene:.0f}")
    print(f" Supply:           {result.supply_used}/{result.supply_cap}")
    print(f" Workers:          {result.workers_minerals} minerals, "
          f"{result.workers_vespene} vespene")
    if result.upgrades:
        print(f" Upgrades:         {', '.join(result.upgrades)}")
