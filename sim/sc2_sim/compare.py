"""
SC2 Build Order Simulator - Comparison
=======================================
Side-by-side build order comparison.
"""

from typing import List

from sc2_sim.format import first_event_frame, fmt_time
from sc2_sim.models import SimResult


def compare_and_print(results: List[SimResult]):
    if not results:
        return

    names = [r.build_order_name or r.race for r in results]
    col_w = max(20, max(len(n) for n in names) + 2)

    print()
    print("=" * (16 + col_w * len(results)))
    print("  BUILD ORDER COMPARISON")
    print("=" * (16 + col_w * len(results)))

    _print_row("", names, col_w)
    _print_row("", ["=" * (col_w - 2)] * len(results), col_w)

    print("\nOUTCOME")
    _print_row("Status", [r.status.value for r in results], col_w)
    _print_row("Items", [f"{r.bo_index}/{r.bo_length}" for r in results], col_w)
    _print_row("Finish", [fmt_time(r.frame) for r in results], col_w)

    print("\nFIRST COMPLETION")
    for category, label in [("worker", "Worker"), ("structure", "Structure"),
                            ("unit", "Unit"), ("upgrade", "Upgrade")]:
        _print_row(label, [fmt_time(first_event_frame(r, category)) for r in results], col_w)

    print("\nECONOMY AT END")
    _print_row("Min workers", [str(r.workers_minerals) for r in results], col_w)
    _print_row("Gas workers", [str(r.workers_vespene) for r in results], col_w)
    _print_row("Supply", [f"{r.supply_used}/{r.supply_cap}" for r in results], col_w)
    _print_row("Minerals", [f"{r.minerals:.0f}" for r in results], col_w)
    _print_row("Vespene", [f"{r.vespene:.0f}" for r in results], col_w)

    finished = [i for i, r in enumerate(results) if r.completed]
    if finished:
        best = min(finished, key=lambda i: results[i].frame)
        print(f"\n Fastest complete build: {names[best]} ({fmt_time(results[best].frame)})")
    print()


def _print_row(label: str, values: List[str], col_w: int):
    print(f" {label:<15}", end="")
    for v in values:
        print(f"{v:>{col_w}}", end="")
    print()
