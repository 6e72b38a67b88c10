from __future__ import annotations

import argparse
import logging
import time

from app.config import load_config, setup_logging
from app.domain.plant import Plant
from app.enums.common import HumidityLevel, LightLevel
from app.enums.growth import CaudexType, GrowthPeriod
from app.services.container import ServiceContainer
from app.utils.time import coerce_datetime, format_datetime

logger = logging.getLogger(__name__)


def _format_plant(plant: Plant) -> str:
    line = (
        f"{plant.plant_id}  {plant.name:<24} next water {format_datetime(plant.next_watering_at, '%Y-%m-%d %H:%M')}"
        f"  every {plant.watering_interval_days}d ({plant.growth_period.value})"
    )
    if plant.is_caudex_plant:
        fed = format_datetime(plant.last_fertilized_at, "%Y-%m-%d") if plant.last_fertilized_at else "never"
        line += f"  caudex={plant.caudex_type.value} fed={fed}"
    return line


def _timestamp(value: str):
    parsed = coerce_datetime(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 timestamp: {value}")
    return parsed


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from None
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="plantcare", description="Houseplant care scheduler")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List plants in insertion order")
    list_cmd.add_argument("--caudex", action="store_true", help="Only caudex plants")
    list_cmd.add_argument("--growth-period", choices=[p.value for p in GrowthPeriod])

    due_cmd = sub.add_parser("due", help="Plants due for care now")
    due_cmd.add_argument("--kind", choices=["watering", "fertilizing", "all"], default="all")

    add_cmd = sub.add_parser("add", help="Add a plant")
    add_cmd.add_argument("name")
    add_cmd.add_argument("--interval", type=_positive_int, required=True, help="Base watering interval in days")
    add_cmd.add_argument("--species", default="")
    add_cmd.add_argument("--notes", default="")
    add_cmd.add_argument("--light", choices=[level.value for level in LightLevel], default=LightLevel.MEDIUM.value)
    add_cmd.add_argument(
        "--humidity", choices=[level.value for level in HumidityLevel], default=HumidityLevel.MEDIUM.value
    )
    add_cmd.add_argument("--caudex-type", choices=[c.value for c in CaudexType], default=CaudexType.NONE.value)
    add_cmd.add_argument(
        "--growth-period", choices=[p.value for p in GrowthPeriod], default=GrowthPeriod.ACTIVE.value
    )
    add_cmd.add_argument("--last-watered", type=_timestamp, help="ISO-8601, defaults to now")
    add_cmd.add_argument("--last-fertilized", type=_timestamp, help="ISO-8601, omit for never")

    for name, help_text in (
        ("water", "Mark a plant watered now"),
        ("fertilize", "Mark a plant fertilized now"),
        ("remove", "Remove a plant and its reminders"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("plant_id")

    sub.add_parser("run", help="Keep the reminder scheduler and store polling running")
    return parser


def _run_forever(container: ServiceContainer) -> int:
    logger.info("Scheduler running (press Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping scheduler...")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Inspect and edit the plant collection without starting the web server."""
    args = build_parser().parse_args(argv)

    config = load_config()
    setup_logging(debug=config.DEBUG, level=config.log_level, log_dir=config.log_dir)

    container = ServiceContainer.build(config, start_workers=args.command == "run")
    registry = container.registry
    try:
        if args.command == "run":
            return _run_forever(container)

        if args.command == "list":
            if args.caudex:
                plants = registry.caudex_plants()
            elif args.growth_period:
                plants = registry.filter_by_growth_period(GrowthPeriod(args.growth_period))
            else:
                plants = registry.plants()
            for plant in plants:
                print(_format_plant(plant))
            print(f"{len(plants)} plants")
            return 0

        if args.command == "due":
            if args.kind in ("watering", "all"):
                print("Needs water:")
                for plant in registry.plants_due_for_watering():
                    print("  " + _format_plant(plant))
            if args.kind in ("fertilizing", "all"):
                print("Needs fertilizer:")
                for plant in registry.plants_due_for_fertilizing():
                    print("  " + _format_plant(plant))
            return 0

        if args.command == "add":
            plant = registry.add(
                Plant(
                    name=args.name,
                    species=args.species,
                    watering_interval_days=args.interval,
                    last_watered_at=args.last_watered or registry.now(),
                    notes=args.notes,
                    light_level=LightLevel(args.light),
                    humidity_level=HumidityLevel(args.humidity),
                    caudex_type=CaudexType(args.caudex_type),
                    growth_period=GrowthPeriod(args.growth_period),
                    last_fertilized_at=args.last_fertilized,
                )
            )
            print(_format_plant(plant))
            return 0

        if args.command in ("water", "fertilize"):
            action = registry.mark_watered if args.command == "water" else registry.mark_fertilized
            plant = action(args.plant_id)
            if plant is None:
                print(f"Plant not found: {args.plant_id}")
                return 2
            print(_format_plant(plant))
            return 0

        if args.command == "remove":
            if registry.get(args.plant_id) is None:
                print(f"Plant not found: {args.plant_id}")
                return 2
            registry.remove(args.plant_id)
            print(f"Removed {args.plant_id}")
            return 0

        return 0
    finally:
        try:
            container.shutdown()
        except (RuntimeError, OSError):
            logger.exception("Failed to shut down cleanly")


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
