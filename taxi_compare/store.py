from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from pathlib import Path
import threading
from typing import Dict, List, Optional, Tuple

import pandas as pd
import pyarrow.parquet as pq

from .config import Settings
from .schema import TRIP_TABLE, ZONE_TABLE, TableSchema, missing_columns, resolve_columns


TRIP_NUMERIC_COLUMNS = ["fare_amount", "tip_amount", "total_amount", "trip_distance", "payment_type"]
SUPPORTED_SUFFIXES = {".parquet", ".csv"}
# Only empty cells are missing; the TLC lookup uses "N/A" as a real borough.
CSV_READ_OPTIONS = {"keep_default_na": False, "na_values": [""]}


class DatasetLoadError(ValueError):
    """A source could not be loaded; the store must not serve."""


class StoreNotReadyError(RuntimeError):
    """Raised when a view is requested before every table has loaded."""


@dataclass(frozen=True)
class Snapshot:
    label: str
    trips: pd.DataFrame

    @property
    def row_count(self) -> int:
        return int(len(self.trips))


@dataclass(frozen=True)
class LoadedTables:
    snapshots: Tuple[Snapshot, Snapshot]
    zones: pd.DataFrame
    loaded_at: datetime


def _source_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise DatasetLoadError(
            f"Unsupported source format {suffix or '<none>'!r} for {path}. "
            f"Use one of: {', '.join(sorted(SUPPORTED_SUFFIXES))}."
        )
    return suffix.lstrip(".")


def _read_source_names(path: Path, source_format: str) -> List[str]:
    if source_format == "parquet":
        return list(pq.read_schema(path).names)
    return [str(name) for name in pd.read_csv(path, nrows=0).columns]


def read_table(path: Path, table: TableSchema) -> pd.DataFrame:
    """Read only the required columns of ``table`` and rename them to canonical names."""
    if not path.exists():
        raise DatasetLoadError(f"Cannot find {table.table_name} source: {path}")

    source_format = _source_format(path)
    try:
        source_names = _read_source_names(path, source_format)
    except (OSError, ValueError) as exc:
        raise DatasetLoadError(f"Cannot read {table.table_name} source {path}: {exc}") from exc

    missing = missing_columns(table, source_names)
    if missing:
        raise DatasetLoadError(
            f"{table.table_name} source {path.name} is missing required columns: {missing}"
        )

    mapping = resolve_columns(table, source_names)
    columns = [mapping[name] for name in table.column_names]
    try:
        if source_format == "parquet":
            frame = pd.read_parquet(path, columns=columns)
        else:
            frame = pd.read_csv(path, usecols=columns, **CSV_READ_OPTIONS)
    except (OSError, ValueError) as exc:
        raise DatasetLoadError(f"Cannot read {table.table_name} source {path}: {exc}") from exc

    frame = frame.rename(columns={source: name for name, source in mapping.items()})
    frame = frame[table.column_names]
    if frame.empty:
        raise DatasetLoadError(f"{table.table_name} source {path.name} has no rows.")
    return frame


def _to_nullable_int(values: pd.Series) -> pd.Series:
    numeric = pd.to_numeric(values, errors="coerce").astype("float64")
    return numeric.where(numeric % 1 == 0).astype("Int64")


def normalize_trips(frame: pd.DataFrame) -> pd.DataFrame:
    # Unparseable values become NaT/NaN and are excluded per view.
    normalized = pd.DataFrame(index=frame.index)
    normalized["pickup_datetime"] = pd.to_datetime(frame["pickup_datetime"], errors="coerce")
    normalized["pickup_location_id"] = _to_nullable_int(frame["pickup_location_id"])
    for column in TRIP_NUMERIC_COLUMNS:
        normalized[column] = pd.to_numeric(frame[column], errors="coerce").astype("float64")
    return normalized.reset_index(drop=True)


def normalize_zones(frame: pd.DataFrame) -> pd.DataFrame:
    normalized = pd.DataFrame(index=frame.index)
    normalized["location_id"] = _to_nullable_int(frame["location_id"])
    normalized["borough"] = frame["borough"].astype("string").str.strip()
    normalized["zone"] = frame["zone"].astype("string").str.strip()
    return normalized.dropna(subset=["location_id"]).reset_index(drop=True)


class TripStore:
    def __init__(
        self,
        *,
        baseline_path: Path,
        comparison_path: Path,
        zones_path: Path,
        baseline_label: str = "2019",
        comparison_label: str = "2023",
        logger: logging.Logger | None = None,
    ):
        if baseline_label == comparison_label:
            raise ValueError(f"Snapshot labels must differ, both are {baseline_label!r}")
        self.baseline_path = Path(baseline_path)
        self.comparison_path = Path(comparison_path)
        self.zones_path = Path(zones_path)
        self.baseline_label = baseline_label
        self.comparison_label = comparison_label
        self.logger = logger or logging.getLogger(__name__)
        self._load_lock = threading.Lock()
        self._tables: Optional[LoadedTables] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        logger: logging.Logger | None = None,
    ) -> "TripStore":
        return cls(
            baseline_path=settings.trips_baseline_path,
            comparison_path=settings.trips_comparison_path,
            zones_path=settings.zones_path,
            baseline_label=settings.baseline_label,
            comparison_label=settings.comparison_label,
            logger=logger,
        )

    @property
    def is_ready(self) -> bool:
        return self._tables is not None

    def _load_snapshot(self, label: str, path: Path) -> Snapshot:
        self.logger.info("Loading snapshot %s from %s", label, path)
        trips = normalize_trips(read_table(path, TRIP_TABLE))
        return Snapshot(label=label, trips=trips)

    def load(self) -> LoadedTables:
        """Load every table, then publish them together.

        Nothing becomes visible to readers until all three tables have been
        read and validated. A failed reload keeps the previously published
        tables.
        """
        with self._load_lock:
            baseline = self._load_snapshot(self.baseline_label, self.baseline_path)
            comparison = self._load_snapshot(self.comparison_label, self.comparison_path)

            self.logger.info("Loading zone lookup from %s", self.zones_path)
            zones = normalize_zones(read_table(self.zones_path, ZONE_TABLE))
            if zones.empty:
                raise DatasetLoadError(
                    f"zones source {self.zones_path.name} has no usable location ids."
                )

            tables = LoadedTables(
                snapshots=(baseline, comparison),
                zones=zones,
                loaded_at=datetime.now(timezone.utc),
            )
            self._tables = tables

        for snapshot in tables.snapshots:
            self.logger.info("Trips %s: %d", snapshot.label, snapshot.row_count)
        self.logger.info("Zones: %d. Tables ready.", len(tables.zones))
        return tables

    def reload(self) -> LoadedTables:
        return self.load()

    def tables(self) -> LoadedTables:
        tables = self._tables
        if tables is None:
            raise StoreNotReadyError("Trip store is not loaded; call load() first.")
        return tables

    def snapshots(self) -> Tuple[Snapshot, Snapshot]:
        return self.tables().snapshots

    def zones(self) -> pd.DataFrame:
        return self.tables().zones

    def row_counts(self) -> Dict[str, int]:
        return {snapshot.label: snapshot.row_count for snapshot in self.snapshots()}

    def zone_count(self) -> int:
        return int(len(self.zones()))
