"""
Dive planner - Bühlmann ZH-L16C decompression and gas planning

Plans a square dive, calculates the ascent with deco stops and gas switches,
the gas consumption and reserve of all tanks and the safety events.

Usage:
    python main.py                              # Run with default settings below
    python main.py --depth 30 --time 12         # Quick square profile override
    python main.py --depth 40 --time 20 --gas 21 --he 35 --deco-gas 50
    python main.py --gf 30 70                   # Override gradient factors (percent)
"""

import argparse
import logging

from decoplan import (
    BuhlmannAlgorithm,
    Consumption,
    DepthConverter,
    Gas,
    PlanFactory,
    ProfileEvents,
    Tank,
    load_effective_config,
)
from decoplan.physics import to_minutes
from decoplan.tanks import to_gases


# --- USER CONFIGURATION ---
# Edit these values to plan your dive, or override via CLI arguments.

DIVE_CONFIG = {
    "depth_m": 30,                  # Bottom depth (meters)
    "duration_min": 20,             # Total time at depth incl. descent (minutes)
    "o2_percent": 21,               # Bottom gas O2 (Air = 21)
    "he_percent": 0,                # Bottom gas helium
    "tank_size_l": 24,              # Bottom tank size (liters)
    "tank_pressure_bar": 200,       # Bottom tank fill
    "deco_o2_percent": None,        # Deco gas O2, e.g. 50 for EAN50
    "deco_tank_size_l": 11,
    "deco_tank_pressure_bar": 200,
}


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    console_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=console_level, format=log_format)


def build_tanks(config: dict) -> list:
    """First tank holds the bottom gas, the optional second one the deco gas."""
    bottom_gas = Gas(config["o2_percent"] / 100.0, config["he_percent"] / 100.0)
    tanks = [Tank(config["tank_size_l"], config["tank_pressure_bar"], bottom_gas)]

    if config["deco_o2_percent"]:
        deco_gas = Gas(config["deco_o2_percent"] / 100.0)
        tanks.append(Tank(config["deco_tank_size_l"], config["deco_tank_pressure_bar"], deco_gas))
    return tanks


def print_profile(profile) -> None:
    print("--- DIVE PROFILE ---")
    runtime = 0.0
    for segment in profile.segments:
        runtime += segment.duration
        kind = "plan" if segment.user_defined else "deco"
        print(
            f"{to_minutes(runtime):7.1f} min  {segment.start_depth:5.1f} -> {segment.end_depth:5.1f} m"
            f"  {to_minutes(segment.duration):5.1f} min  {segment.gas.name:<14} {kind}"
        )

    deepest_ceiling = max(ceiling.depth for ceiling in profile.ceilings)
    print(f"Total runtime: {to_minutes(runtime):.1f} min")
    print(f"Deepest ceiling: {deepest_ceiling:.1f} m ({len(profile.ceilings)} samples)")


def print_tanks(tanks: list) -> None:
    print("\n--- TANKS ---")
    for index, tank in enumerate(tanks):
        status = "OK" if tank.has_reserve else "RESERVE NOT KEPT"
        print(
            f"#{index} {tank.gas.name:<14} {tank.size:g} L/{tank.start_pressure:g} b: "
            f"end {tank.end_pressure:.0f} b, reserve {tank.reserve:.0f} b "
            f"({tank.percents_remaining:.0f} % remaining) {status}"
        )


def print_events(events: list) -> None:
    print("\n--- EVENTS ---")
    if not events:
        print("No events")
    for event in events:
        gas = f" {event.gas.name}" if event.gas is not None else ""
        print(f"{to_minutes(event.time_stamp):7.1f} min  {event.depth:5.1f} m  {event.type.value}{gas}")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments for quick overrides."""
    parser = argparse.ArgumentParser(
        description="Dive planner - Bühlmann ZH-L16C decompression and gas planning",
    )
    parser.add_argument("--depth", type=float, help="Dive depth in meters")
    parser.add_argument("--time", type=float, help="Time at depth in minutes incl. descent")
    parser.add_argument("--gas", type=float, help="Bottom gas O2 percent (e.g. 32 for EAN32)")
    parser.add_argument("--he", type=float, help="Bottom gas helium percent")
    parser.add_argument("--deco-gas", type=float, help="Deco gas O2 percent (e.g. 50 for EAN50)")
    parser.add_argument(
        "--gf", type=int, nargs=2, metavar=("LOW", "HIGH"),
        help="Gradient factors in percent, overrides config",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to planner config YAML (default: config.yaml)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(args.verbose)

    # Apply CLI overrides to config
    config = DIVE_CONFIG.copy()
    if args.depth is not None:
        config["depth_m"] = args.depth
    if args.time is not None:
        config["duration_min"] = args.time
    if args.gas is not None:
        config["o2_percent"] = args.gas
    if args.he is not None:
        config["he_percent"] = args.he
    if args.deco_gas is not None:
        config["deco_o2_percent"] = args.deco_gas

    settings = load_effective_config(gf_override=args.gf, config_path=args.config)
    options = settings["options"]
    consumption_options = settings["consumption_options"]

    tanks = build_tanks(config)
    bottom_gas = tanks[0].gas
    plan = PlanFactory.square(config["depth_m"], config["duration_min"], 0, bottom_gas, options)

    print(f"GF {options.gf_low * 100:.0f}/{options.gf_high * 100:.0f} ({settings['gf_source']})")
    algorithm = BuhlmannAlgorithm()
    profile = algorithm.decompression(plan, to_gases(tanks), options)
    if profile.errors:
        print("--- PLAN ERRORS ---")
        for message in profile.errors:
            print(message)
        return

    print_profile(profile)

    consumption = Consumption(DepthConverter.from_options(options))
    consumption.consume_from_tanks(profile.segments, options, tanks, consumption_options)
    print_tanks(tanks)

    events = ProfileEvents.from_profile(len(plan), profile.segments, profile.ceilings, options)
    print_events(events)

    print("\n--- LIMITS ---")
    ndl = algorithm.no_deco_limit(config["depth_m"], bottom_gas, options)
    print(f"No decompression limit: {ndl:.0f} min")
    max_bottom_time = consumption.calculate_max_bottom_time(plan, tanks, consumption_options, options)
    print(f"Maximum bottom time by gas reserve: {max_bottom_time} min")


if __name__ == "__main__":
    main()
