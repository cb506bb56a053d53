"""
SC2 Build Order Simulator - Interactive REPL
=============================================
Edit a build order line by line. Every edit re-simulates, resuming from the
snapshot cached at the edited position.
"""

import cmd
import copy
from typing import Optional

import yaml

from sc2_sim.compare import compare_and_print
from sc2_sim.data import RACES, TRAINED_BY, UNITS, UPGRADES, names_for_race
from sc2_sim.engine import SimulationEngine, resimulate
from sc2_sim.format import fmt_time, print_full_report, print_timeline, print_unit_counts
from sc2_sim.income import IncomeModel
from sc2_sim.io import load_build_order, parse_items, save_build_order
from sc2_sim.models import BuildOrder, BuildOrderError, SimResult, SimSettings


class BuildOrderREPL(cmd.Cmd):
    intro = (
        "\n"
        "================================================\n"
        "  SC2 Build Order Simulator - Interactive Mode\n"
        "================================================\n"
        "Type 'help' for commands. Type 'units' for available names.\n"
    )
    prompt = "sc2> "

    def __init__(self, race: str = "terran", stdout=None):
        super().__init__(stdout=stdout)
        self.bo = BuildOrder(name="Untitled", race=race)
        self.income = IncomeModel()
        self.engine: Optional[SimulationEngine] = None
        self.last_result: Optional[SimResult] = None
        self.undo_stack = []
        self.redo_stack = []

    def _save_undo(self):
        self.undo_stack.append(copy.deepcopy(self.bo))
        self.redo_stack.clear()

    def _resimulate(self, edit_index: Optional[int] = None) -> bool:
        """Re-run the current build order and print a one-line status."""
        try:
            if self.engine is None or self.engine.race != self.bo.race:
                engine = SimulationEngine.from_build_order(self.bo, income=self.income)
            else:
                engine = resimulate(self.engine, self.bo.items, edit_index,
                                    settings=self.bo.settings)
                engine.name = self.bo.name
        except BuildOrderError as e:
            print(f"Error: {e}")
            return False
        self.last_result = engine.run_until_end()
        self.engine = engine
        r = self.last_result
        print(f"  -> {r.status.value} at {fmt_time(r.frame)} "
              f"({r.bo_index}/{r.bo_length} items started)")
        return True

    def _commit_edit(self, edit_index: Optional[int] = None):
        """Simulate the edited order; put the previous one back if it is rejected."""
        if not self._resimulate(edit_index):
            self.bo = self.undo_stack.pop()
            print("Edit reverted.")

    def _parse_position(self, text: str, upper: int) -> Optional[int]:
        """1-based position from the user -> 0-based index, or None."""
        try:
            pos = int(text) - 1
        except ValueError:
            print(f"Not a position: {text}")
            return None
        if not 0 <= pos < upper:
            print(f"Invalid position {pos + 1}")
            return None
        return pos

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def do_load(self, arg):
        """Load build order from YAML: load <filepath>"""
        if not arg:
            print("Usage: load <filepath>")
            return
        try:
            bo = load_build_order(arg.strip())
        except (OSError, yaml.YAMLError, BuildOrderError) as e:
            print(f"Error: {e}")
            return
        self._save_undo()
        self.bo = bo
        self.engine = None
        print(f"Loaded: {self.bo.name} ({self.bo.race}, {len(self.bo.items)} items)")
        self._commit_edit()

    def do_save(self, arg):
        """Save build order to YAML: save <filepath>"""
        if not arg:
            print("Usage: save <filepath>")
            return
        try:
            save_build_order(self.bo, arg.strip())
            print(f"Saved to {arg.strip()}")
        except OSError as e:
            print(f"Error: {e}")

    def do_name(self, arg):
        """Set build order name: name <text>"""
        if arg:
            self.bo.name = arg.strip()
            print(f"Name: {self.bo.name}")

    def do_race(self, arg):
        """Switch race (clears the build order): race terran|protoss|zerg"""
        race = arg.strip().lower()
        if race not in RACES:
            print(f"Usage: race {'|'.join(RACES)}")
            return
        self._save_undo()
        self.bo = BuildOrder(name=self.bo.name, race=race, settings=self.bo.settings)
        self.engine = None
        print(f"Race: {race}")

    def do_show(self, arg):
        """Show current build order"""
        print(f"\nBuild Order: {self.bo.name} [{self.bo.race}]")
        started = self.last_result.bo_index if self.last_result else 0
        for i, item in enumerate(self.bo.items):
            mark = " " if i < started else "x"
            print(f"  {mark} {i + 1:>3}. {item.name:<28} ({item.type})")
        print()

    def do_add(self, arg):
        """Append an item: add <name> [type]"""
        self._insert(len(self.bo.items), arg.split())

    def do_insert(self, arg):
        """Insert an item before a position: insert <position> <name> [type]"""
        parts = arg.split()
        if len(parts) < 2:
            print("Usage: insert <position> <name> [type]")
            return
        pos = self._parse_position(parts[0], len(self.bo.items) + 1)
        if pos is not None:
            self._insert(pos, parts[1:])

    def _insert(self, pos: int, parts):
        if not parts:
            print("Usage: add <name> [type]")
            return
        entry = {"name": parts[0]}
        if len(parts) > 1:
            entry["type"] = parts[1]
        try:
            item = parse_items([entry])[0]
        except BuildOrderError as e:
            print(f"Error: {e}. Type 'units' for list.")
            return
        self._save_undo()
        self.bo.items.insert(pos, item)
        print(f"Added {item.name} at {pos + 1}")
        self._commit_edit(pos)

    def do_remove(self, arg):
        """Remove an item: remove <position>"""
        if not arg:
            print("Usage: remove <position>")
            return
        pos = self._parse_position(arg.strip(), len(self.bo.items))
        if pos is None:
            return
        self._save_undo()
        removed = self.bo.items.pop(pos)
        print(f"Removed {removed.name} from {pos + 1}")
        self._commit_edit(pos)

    def do_move(self, arg):
        """Move an item: move <from> <to>"""
        parts = arg.split()
        if len(parts) < 2:
            print("Usage: move <from> <to>")
            return
        src = self._parse_position(parts[0], len(self.bo.items))
        dst = self._parse_position(parts[1], len(self.bo.items))
        if src is None or dst is None:
            return
        self._save_undo()
        item = self.bo.items.pop(src)
        self.bo.items.insert(dst, item)
        print(f"Moved {item.name} to {dst + 1}")
        self._commit_edit(min(src, dst))

    def do_set(self, arg):
        """Set an engine timing in seconds: set <setting> <value>
        Settings: worker_start_delay, worker_build_delay, worker_return_delay,
        idle_limit, addon_swap_delay"""
        parts = arg.split()
        if len(parts) < 2:
            print("Usage: set <setting> <value>")
            return
        data = self.bo.settings.to_dict()
        try:
            data[parts[0]] = float(parts[1])
            settings = SimSettings.from_dict(data)
        except ValueError as e:
            print(f"Error: {e}")
            return
        self._save_undo()
        self.bo.settings = settings
        print(f"Set {parts[0]} = {parts[1]}")
        self._resimulate()

    def do_run(self, arg):
        """Simulate and print the full report"""
        self._resimulate()
        if self.last_result:
            print_full_report(self.last_result)

    def do_timeline(self, arg):
        """Show the event timeline of the last run"""
        if not self.last_result:
            print("Run 'run' first.")
            return
        print_timeline(self.last_result)
        print_unit_counts(self.last_result)

    def do_compare(self, arg):
        """Compare with files: compare <file1> [file2...]"""
        if not arg:
            print("Usage: compare <file1> [file2...]")
            return
        results = [SimulationEngine.from_build_order(self.bo, income=self.income).run_until_end()]
        for f in arg.split():
            try:
                bo = load_build_order(f.strip())
                results.append(SimulationEngine.from_build_order(bo, income=self.income).run_until_end())
            except (OSError, yaml.YAMLError, BuildOrderError) as e:
                print(f"Error loading {f}: {e}")
        compare_and_print(results)

    def do_units(self, arg):
        """List available names for the current race: units [race]"""
        race = arg.strip().lower() or self.bo.race
        if race not in RACES:
            print(f"Unknown race: {race}")
            return
        print(f"\n{'Name':<28} {'Type':<10} {'Min':>5} {'Gas':>5} {'Time':>6}")
        print("-" * 58)
        for item_type, names in names_for_race(race).items():
            for name in sorted(names):
                if name in TRAINED_BY:
                    u = UNITS[name]
                    print(f"{name:<28} {item_type:<10} {u.minerals:>5} {u.vespene:>5} "
                          f"{u.build_seconds:>5.0f}s")
                elif name in UPGRADES:
                    u = UPGRADES[name]
                    print(f"{name:<28} {item_type:<10} {u.minerals:>5} {u.vespene:>5} "
                          f"{u.research_seconds:>5.0f}s")
                else:
                    print(f"{name:<28} {item_type:<10}")
        print()

    def do_undo(self, arg):
        """Undo last change"""
        if self.undo_stack:
            self.redo_stack.append(copy.deepcopy(self.bo))
            self.bo = self.undo_stack.pop()
            print("Undone.")
            self._resimulate()
        else:
            print("Nothing to undo.")

    def do_redo(self, arg):
        """Redo last undone change"""
        if self.redo_stack:
            self.undo_stack.append(copy.deepcopy(self.bo))
            self.bo = self.redo_stack.pop()
            print("Redone.")
            self._resimulate()
        else:
            print("Nothing to redo.")

    def do_quit(self, arg):
        """Exit the REPL"""
        print("Bye!")
        return True

    do_exit = do_quit
    do_q = do_quit
