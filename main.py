import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from taxi_compare.config import load_settings
from taxi_compare.dashboard import TaxiComparisonDashboard
from taxi_compare.store import DatasetLoadError
from taxi_compare.types import VIEW_NAMES


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare NYC yellow taxi snapshots and print chart-ready views as JSON."
    )
    parser.add_argument(
        "--view",
        type=str,
        choices=["all", *VIEW_NAMES],
        default="all",
        help="View to compute (default: all).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="",
        help="Optional JSON file to write the views to instead of stdout.",
    )
    parser.add_argument(
        "--describe",
        action="store_true",
        help="Print snapshot row counts after loading.",
    )
    return parser.parse_args(argv)


def configure_stdout() -> None:
    if hasattr(sys.stdout, "reconfigure"):
        try:
            sys.stdout.reconfigure(encoding="utf-8")
        except (AttributeError, ValueError):
            pass


def configure_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        force=True,
    )


def main() -> int:
    configure_stdout()
    args = parse_args()
    load_dotenv()
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        return 1
    configure_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    dashboard = TaxiComparisonDashboard(settings)
    try:
        dashboard.load()
    except DatasetLoadError as exc:
        logger.error("Fatal error while loading datasets: %s", exc)
        print(f"Load error: {exc}")
        return 1

    if args.describe:
        print(json.dumps(dashboard.describe(), indent=2))

    selected = dashboard.available_views() if args.view == "all" else [args.view]
    results = {name: dashboard.query(name) for name in selected}
    if args.output:
        output_file = dashboard.save_views(args.output, results)
        print(f"Views written to: {output_file}")
    else:
        print(json.dumps(results, indent=2, ensure_ascii=False))

    failed = [name for name, result in results.items() if result.get("error")]
    if failed:
        logger.error("Views failed: %s", ", ".join(failed))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
