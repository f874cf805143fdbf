import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from taxi_compare.config import load_settings
from taxi_compare.dashboard import TaxiComparisonDashboard
from taxi_compare.store import DatasetLoadError


def main() -> int:
    load_dotenv()
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Cannot run smoke test: {exc}")
        return 1

    dashboard = TaxiComparisonDashboard(settings)
    try:
        dashboard.load()
    except DatasetLoadError as exc:
        print(f"Cannot run smoke test: {exc}")
        return 1

    print(f"Snapshots: {dashboard.describe()['trips']}")
    exit_code = 0
    for name, result in dashboard.query_all().items():
        print(f"\n--- {name} ---")
        print(f"Rows: {result.get('row_count', 0)}")
        for row in result.get("rows", [])[:3]:
            print(row)
        if result.get("error"):
            print(f"Error ({result.get('error_type')}): {result['error']}")
            exit_code = 1

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
