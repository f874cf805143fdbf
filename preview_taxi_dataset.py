import argparse
from pathlib import Path

from dotenv import load_dotenv
import pandas as pd
import pyarrow.parquet as pq

from taxi_compare.config import PROJECT_ROOT, load_settings
from taxi_compare.filters import quality_mask
from taxi_compare.schema import TRIP_TABLE, missing_columns, resolve_columns
from taxi_compare.store import CSV_READ_OPTIONS, normalize_trips


COLUMN_DESCRIPTIONS = {
    "pickup_datetime": "Trip pickup timestamp.",
    "pickup_location_id": "Pickup Taxi Zone ID (joins LocationID in the zone lookup).",
    "fare_amount": "Time-and-distance fare calculated by the meter.",
    "tip_amount": "Tip amount. Cash tips are not included.",
    "total_amount": "Total amount charged to passengers.",
    "trip_distance": "Trip distance in miles from taximeter.",
    "payment_type": "Payment method. 1=Card, 2=Cash, 3=No charge, 4=Dispute, 5=Unknown, 6=Voided trip.",
}

SAMPLE_ROWS = 20


def _resolve_path(raw: str) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path.resolve()


def read_sample(path: Path, nrows: int = SAMPLE_ROWS) -> pd.DataFrame:
    if path.suffix.lower() == ".parquet":
        parquet_file = pq.ParquetFile(path)
        for batch in parquet_file.iter_batches(batch_size=nrows):
            return batch.to_pandas()
        return pd.DataFrame(columns=parquet_file.schema_arrow.names)
    return pd.read_csv(path, nrows=nrows, **CSV_READ_OPTIONS)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Preview a trip snapshot source.")
    parser.add_argument(
        "path",
        nargs="?",
        default="",
        help="Snapshot file (default: TRIPS_BASELINE_PATH).",
    )
    parser.add_argument("--rows", type=int, default=SAMPLE_ROWS)
    args = parser.parse_args(argv)

    load_dotenv()
    path = _resolve_path(args.path) if args.path else load_settings().trips_baseline_path
    if not path.exists():
        print(f"Cannot find file: {path}")
        return 1

    df = read_sample(path, nrows=args.rows)
    print(f"File: {path}")
    print(f"Sample rows: {len(df)}")
    print(f"Column count: {len(df.columns)}")

    mapping = resolve_columns(TRIP_TABLE, df.columns)
    print("\nRequired columns:")
    for name in TRIP_TABLE.column_names:
        source = mapping.get(name, "MISSING")
        print(f"- {name} <- {source}: {COLUMN_DESCRIPTIONS.get(name, '')}")

    missing = missing_columns(TRIP_TABLE, df.columns)
    if missing:
        print(f"\nSource cannot be served, missing: {', '.join(missing)}")
        return 1

    sample = df[[mapping[name] for name in TRIP_TABLE.column_names]].rename(
        columns={source: name for name, source in mapping.items()}
    )
    trips = normalize_trips(sample)

    print("\nFirst 5 rows:")
    print(trips.head(5).to_string(index=False))

    print("\nDtypes by column:")
    print(trips.dtypes.to_string())

    print(f"\nMissing values in sample ({len(trips)} rows):")
    print(trips.isna().sum().to_string())

    passing = int(quality_mask(trips).sum())
    print(f"\nRows passing quality filter: {passing}/{len(trips)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
