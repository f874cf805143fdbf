from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
import pytest

from taxi_compare.config import Settings


ZONE_ROWS = [
    (1, "EWR", "Newark Airport", "EWR"),
    (132, "Queens", "JFK Airport", "Airports"),
    (161, "Manhattan", "Midtown Center", "Yellow Zone"),
    (230, "Manhattan", "Times Sq/Theatre District", "Yellow Zone"),
    (236, "Manhattan", "Upper East Side North", "Yellow Zone"),
    (237, "Manhattan", "Upper East Side South", "Yellow Zone"),
    (264, "Unknown", "NV", "N/A"),
    (265, "N/A", "Outside of NYC", "N/A"),
]

# Pickup counts per zone; 264 is the largest but sits in the Unknown borough.
BASELINE_ZONE_COUNTS = {161: 6, 237: 5, 236: 4, 230: 3, 132: 2, 1: 1, 264: 10}
COMPARISON_ZONE_COUNTS = {132: 7, 161: 3, 230: 3, 1: 2, 236: 1, 237: 1, 264: 20}


def tlc_trip(
    pickup: str,
    *,
    zone: int = 161,
    fare: float = 10.0,
    tip: float = 2.0,
    total: float = 13.0,
    distance: float = 1.5,
    payment: int = 1,
) -> Dict[str, Any]:
    return {
        "VendorID": 2,
        "tpep_pickup_datetime": pd.Timestamp(pickup),
        "tpep_dropoff_datetime": pd.Timestamp(pickup) + pd.Timedelta(minutes=12),
        "trip_distance": distance,
        "PULocationID": zone,
        "DOLocationID": 161,
        "payment_type": payment,
        "fare_amount": fare,
        "tip_amount": tip,
        "total_amount": total,
    }


def trips_for_zone_counts(day: str, zone_counts: Dict[int, int]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    index = 0
    for zone, count in zone_counts.items():
        for _ in range(count):
            hour = index % 24
            payment = (1, 1, 2, 4)[index % 4]
            rows.append(tlc_trip(f"{day} {hour:02d}:15:00", zone=zone, payment=payment))
            index += 1
    return rows


def write_zones(path: Path) -> Path:
    pd.DataFrame(
        ZONE_ROWS,
        columns=["LocationID", "Borough", "Zone", "service_zone"],
    ).to_csv(path, index=False)
    return path


def write_trips(path: Path, rows: List[Dict[str, Any]]) -> Path:
    pd.DataFrame(rows).to_parquet(path, index=False)
    return path


@pytest.fixture
def tlc_sources(tmp_path: Path) -> Dict[str, Path]:
    baseline_rows = trips_for_zone_counts("2019-02-04", BASELINE_ZONE_COUNTS)
    # Degenerate record: excluded by the quality filter everywhere.
    baseline_rows.append(tlc_trip("2019-02-04 05:00:00", zone=161, total=0.0))
    comparison_rows = trips_for_zone_counts("2023-02-05", COMPARISON_ZONE_COUNTS)
    comparison_rows.append(tlc_trip("2023-02-05 05:00:00", zone=132, distance=0.0))

    return {
        "baseline": write_trips(tmp_path / "yellow_tripdata_2019-02.parquet", baseline_rows),
        "comparison": write_trips(
            tmp_path / "yellow_tripdata_2023-02.parquet", comparison_rows
        ),
        "zones": write_zones(tmp_path / "taxi_zone_lookup.csv"),
    }


@pytest.fixture
def settings_for(tlc_sources: Dict[str, Path]) -> Settings:
    return Settings(
        trips_baseline_path=tlc_sources["baseline"],
        trips_comparison_path=tlc_sources["comparison"],
        zones_path=tlc_sources["zones"],
        baseline_label="2019",
        comparison_label="2023",
        top_zones_limit=5,
        excluded_borough="Unknown",
        log_level="INFO",
    )
