"""
SC2 Build Order Simulator - CLI Entry Point
============================================
Usage:
    python cli.py simulate <file> [--race zerg] [--set idle_limit=60] [--export-json out.json]
    python cli.py compare <file1> <file2> [...]
    python cli.py interactive [--race protoss]
    python cli.py units [--race terran]
    python cli.py web [--port 8080]
"""

import argparse
import logging
import sys

import yaml

from sc2_sim.compare import compare_and_print
from sc2_sim.data import RACES
from sc2_sim.engine import SimulationEngine
from sc2_sim.format import print_full_report
from sc2_sim.income import IncomeModel
from sc2_sim.io import export_events_json, load_build_order
from sc2_sim.models import BuildOrderError, SimSettings


def _parse_overrides(pairs) -> dict:
    """['idle_limit=60', ...] -> {'idle_limit': 60.0}"""
    overrides = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got '{pair}'")
        try:
            overrides[key.strip()] = float(value)
        except ValueError:
            raise ValueError(f"Setting '{key.strip()}' needs a number, got '{value}'")
    return overrides


def cmd_simulate(args) -> int:
    try:
        bo = load_build_order(args.file)
        if args.race:
            bo.race = args.race
        if args.set:
            data = bo.settings.to_dict()
            data.update(_parse_overrides(args.set))
            bo.settings = SimSettings.from_dict(data)
        engine = SimulationEngine.from_build_order(bo)
    except (OSError, yaml.YAMLError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = engine.run_until_end()
    print_full_report(result)

    if args.export_json:
        export_events_json(result, args.export_json)
        print(f"\nExported JSON to {args.export_json}")
    return 0 if result.completed else 2


def cmd_compare(args) -> int:
    income = IncomeModel()
    results = []
    for f in args.files:
        try:
            bo = load_build_order(f)
            results.append(SimulationEngine.from_build_order(bo, income=income).run_until_end())
        except (OSError, yaml.YAMLError, BuildOrderError) as e:
            print(f"Error loading {f}: {e}", file=sys.stderr)
    if not results:
        return 1
    compare_and_print(results)
    return 0


def cmd_interactive(args) -> int:
    from sc2_sim.repl import BuildOrderREPL
    repl = BuildOrderREPL(race=args.race)
    repl.cmdloop()
    return 0


def cmd_units(args) -> int:
    from sc2_sim.repl import BuildOrderREPL
    BuildOrderREPL(race=args.race).do_units("")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SC2 Build Order Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log engine progress (-v info, -vv debug)")
    sub = parser.add_subparsers(dest="command", help="Command to run")

    # simulate
    p_sim = sub.add_parser("simulate", aliases=["sim"],
                           help="Simulate a build order from YAML")
    p_sim.add_argument("file", help="Path to build order YAML file")
    p_sim.add_argument("--race", "-r", choices=sorted(RACES), default=None,
                       help="Override the race declared in the file")
    p_sim.add_argument("--set", action="append", default=None, metavar="KEY=VALUE",
                       help="Override an engine timing in seconds (repeatable)")
    p_sim.add_argument("--export-json", default=None,
                       help="Export the event timeline as JSON")

    # compare
    p_cmp = sub.add_parser("compare", aliases=["cmp"],
                           help="Compare multiple build orders")
    p_cmp.add_argument("files", nargs="+", help="Build order YAML files")

    # interactive
    p_int = sub.add_parser("interactive", aliases=["repl", "i"],
                           help="Interactive REPL mode")
    p_int.add_argument("--race", "-r", choices=sorted(RACES), default="terran")

    # units
    p_units = sub.add_parser("units", help="List build order names for a race")
    p_units.add_argument("--race", "-r", choices=sorted(RACES), default="terran")

    # web
    p_web = sub.add_parser("web", aliases=["serve"],
                           help="Start the HTTP API")
    p_web.add_argument("--port", type=int, default=8080,
                       help="Port to serve on (default: 8080)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if args.command in ("simulate", "sim"):
        return cmd_simulate(args)
    if args.command in ("compare", "cmp"):
        return cmd_compare(args)
    if args.command in ("interactive", "repl", "i"):
        return cmd_interactive(args)
    if args.command == "units":
        return cmd_units(args)
    if args.command in ("web", "serve"):
        from sc2_sim.web import start_server
        start_server(port=args.port)
        return 0
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
