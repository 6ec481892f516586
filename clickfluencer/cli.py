from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys

from clickfluencer.codec import decode_system, diff
from clickfluencer.composer import click_breakdown, production_breakdown
from clickfluencer.definition import GameDefinition
from clickfluencer.formatting import (
    format_breakdown,
    format_number,
    format_simulation_report,
    format_time,
)
from clickfluencer.results import InvalidSaveFormat
from clickfluencer.simulation import Simulation
from clickfluencer.slots import SaveSlotManager
from clickfluencer.store import JsonFileStore, StoreError
from clickfluencer.strategy import GreedyCheapest, Idle, Strategy


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clickfluencer",
        description="Clickfluencer simulation core CLI",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--definition",
        default=None,
        help="Python module with define_game() (default: shipped catalogue)",
    )
    sub = parser.add_subparsers(dest="command")

    sim = sub.add_parser("simulate", help="Run a headless simulation")
    sim.add_argument(
        "--strategy",
        default="greedy_cheapest",
        choices=["greedy_cheapest", "idle"],
        help="Purchase strategy (default: greedy_cheapest)",
    )
    sim.add_argument("--cps", type=float, default=0.0, help="Clicks per second")
    sim.add_argument("--tick-ms", type=int, default=1000, help="Milliseconds per tick")
    sim.add_argument(
        "--duration", type=float, default=3600, help="Simulated time (seconds)"
    )
    sim.add_argument("--seed", type=int, default=None, help="Random seed")
    sim.add_argument(
        "--prestige",
        action="store_true",
        help="Prestige at the first opportunity",
    )
    sim.add_argument("--export-csv", default=None, help="CSV export path prefix")
    sim.add_argument("--export-json", default=None, help="JSON export path")
    sim.add_argument("--plot", default=None, help="Plot output path (PNG)")

    inspect = sub.add_parser("inspect", help="Summarize a save file and its schema drift")
    inspect.add_argument("save_file", help="Path to a save file")
    inspect.add_argument(
        "--breakdown", action="store_true", help="Show yield breakdowns per slot"
    )

    new = sub.add_parser("new", help="Create a new game in a save file")
    new.add_argument("save_file", help="Path to a save file")
    new.add_argument("--slot", type=int, default=1, help="Slot id (1-3)")
    new.add_argument("--name", default=None, help="Slot name")

    return parser


def load_game(module_path: str) -> GameDefinition:
    """Import module and call define_game()."""
    mod = importlib.import_module(module_path)
    if not hasattr(mod, "define_game"):
        print(f"Error: module {module_path!r} has no define_game() function")
        sys.exit(1)
    return mod.define_game()


def _definition(args: argparse.Namespace) -> GameDefinition | None:
    return load_game(args.definition) if args.definition else None


def build_strategy(name: str, prestige: bool) -> Strategy:
    mode = "first_opportunity" if prestige else "never"
    if name == "idle":
        strategy = Idle()
        strategy.prestige_mode = mode
        return strategy
    return GreedyCheapest(prestige_mode=mode)


def _run_simulate(args: argparse.Namespace) -> int:
    sim = Simulation(
        definition=_definition(args),
        strategy=build_strategy(args.strategy, args.prestige),
        clicks_per_second=args.cps,
        duration_ms=args.duration * 1000,
        tick_ms=args.tick_ms,
        seed=args.seed,
    )
    report = sim.run()
    print(format_simulation_report(report))

    if args.export_csv:
        from clickfluencer.export import export_csv
        export_csv(report, args.export_csv)
        print(f"\nCSV exported to {args.export_csv}_*.csv")

    if args.export_json:
        from clickfluencer.export import export_json
        export_json(report, args.export_json)
        print(f"\nJSON exported to {args.export_json}")

    if args.plot:
        from clickfluencer.visualization import plot_simulation
        plot_simulation(report, args.plot)
        print(f"\nPlot saved to {args.plot}")
    return 0


def _run_inspect(args: argparse.Namespace) -> int:
    store = JsonFileStore(args.save_file)
    try:
        stored = store.load()
    except StoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if stored is None:
        print(f"No save at {args.save_file}", file=sys.stderr)
        return 1

    raw_slots = stored.save_data.get("slots", {})
    print(f"Save version {stored.version}, active slot {stored.save_data.get('active_slot')}")
    for key, raw in sorted(raw_slots.items()):
        game = raw.get("game", {}) if isinstance(raw, dict) else {}
        drift = diff(game)
        print(f"\nSlot {key}: {raw.get('name', '') if isinstance(raw, dict) else ''}")
        if drift.matches:
            print("  Schema: up to date")
        else:
            print(f"  Missing keys: {', '.join(drift.missing) or '-'}")
            print(f"  Extra keys: {', '.join(drift.extra) or '-'}")

    manager = SaveSlotManager(store, _definition(args))
    try:
        system = decode_system(stored.save_data)
    except InvalidSaveFormat as exc:
        print(f"\n{exc}")
        return 1
    manager.system = system
    for info in manager.slots_overview():
        game = info.game
        print(f"\nSlot {info.id} '{info.name}'{' (active)' if info.active else ''}")
        print(f"  Creds: {format_number(game.creds)}  Awards: {game.awards}  Prestige: {game.prestige}")
        print(f"  Play time: {format_time(game.stats.play_time)}  Achievements: {info.achievements_unlocked}")
        if args.breakdown:
            print("  Click power:")
            print(format_breakdown(click_breakdown(game)))
            print("  Production:")
            print(format_breakdown(production_breakdown(game)))
    return 0


def _run_new(args: argparse.Namespace) -> int:
    manager = SaveSlotManager(JsonFileStore(args.save_file), _definition(args))
    load = manager.load()
    if load.error:
        print(f"Error: {load.error}", file=sys.stderr)
        return 1
    result = manager.create_slot(args.slot, args.name)
    if not result.success:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1
    if not manager.save():
        print(f"Error: {manager.last_error}", file=sys.stderr)
        return 1
    print(json.dumps({"slot": args.slot, "path": args.save_file}))
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "simulate":
        code = _run_simulate(args)
    elif args.command == "inspect":
        code = _run_inspect(args)
    else:
        code = _run_new(args)
    if code:
        sys.exit(code)
