"""Command line entrypoint for the Mapty web app."""

from __future__ import annotations

import argparse
from pathlib import Path

from mapty.geo.location import parse_location_arg
from mapty.workout.storage import STORAGE_KEY, JsonFileStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mapty workout tracker")
    parser.add_argument(
        "--web-host",
        default="127.0.0.1",
        help="Host bind for the web UI",
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=8080,
        help="Port for the web UI",
    )
    parser.add_argument(
        "--storage-path",
        type=Path,
        default=None,
        help="JSON file holding saved workouts (default: ~/.mapty/storage.json)",
    )
    parser.add_argument(
        "--sim-location",
        type=parse_location_arg,
        default=None,
        metavar="LAT,LNG",
        help="Use a fixed position instead of browser geolocation",
    )
    parser.add_argument(
        "--sim-no-location",
        action="store_true",
        help="Simulate a failed location request",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print form, map and storage events",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete saved workouts and exit",
    )
    return parser


def run_reset(storage_path: Path | None) -> int:
    store = JsonFileStore(storage_path)
    store.remove_item(STORAGE_KEY)
    print(f"Cleared saved workouts in {store.path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.reset:
        return run_reset(args.storage_path)

    from mapty.ui.web_app import run_web_ui

    return run_web_ui(
        host=args.web_host,
        port=args.web_port,
        storage_path=args.storage_path,
        sim_location=args.sim_location,
        sim_no_location=args.sim_no_location,
        debug=args.debug,
    )


if __name__ == "__main__":
    raise SystemExit(main())
