import logging
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from ..filters import apply_fare_quality_filter, apply_quality_filter
from ..store import Snapshot, TripStore
from ..types import PAYMENT_METHOD_ORDER, PaymentMethod, classify_payment_type
from ..views import (
    FareCompositionRow,
    HourlyDemandRow,
    PaymentMixRow,
    TopZoneRow,
    WeeklyDemandRow,
)


def count_by_hour(trips: pd.DataFrame) -> Dict[int, int]:
    hours = apply_quality_filter(trips)["pickup_datetime"].dt.hour.dropna()
    counts = hours.astype(int).value_counts()
    return {int(hour): int(count) for hour, count in counts.items()}


def count_by_day_of_week(trips: pd.DataFrame) -> Dict[int, int]:
    # pandas counts Monday as 0; the view counts Sunday as 0.
    weekdays = apply_quality_filter(trips)["pickup_datetime"].dt.dayofweek.dropna()
    counts = ((weekdays.astype(int) + 1) % 7).value_counts()
    return {int(day): int(count) for day, count in counts.items()}


def count_by_payment_method(trips: pd.DataFrame) -> Dict[PaymentMethod, int]:
    counts: Dict[PaymentMethod, int] = {method: 0 for method in PAYMENT_METHOD_ORDER}
    # Classify each distinct code once instead of every record.
    code_counts = apply_quality_filter(trips)["payment_type"].value_counts(dropna=False)
    for code, count in code_counts.items():
        counts[classify_payment_type(code)] += int(count)
    return counts


def rank_zones(
    trips: pd.DataFrame,
    zones: pd.DataFrame,
    *,
    limit: int,
    excluded_borough: str,
) -> List[Tuple[str, int]]:
    """Top ``limit`` pickup zones by trip count, ties broken by zone name."""
    location_counts = (
        apply_quality_filter(trips)["pickup_location_id"]
        .value_counts()
        .rename("count")
        .rename_axis("location_id")
        .reset_index()
    )
    eligible_zones = zones.loc[
        zones["borough"].notna()
        & (zones["borough"] != excluded_borough)
        & zones["zone"].notna(),
        ["location_id", "zone"],
    ]
    joined = location_counts.merge(eligible_zones, on="location_id", how="inner")
    if joined.empty:
        return []

    zone_counts = joined.groupby("zone", sort=False)["count"].sum().reset_index()
    ranked = zone_counts.sort_values(
        ["count", "zone"],
        ascending=[False, True],
        kind="mergesort",
    ).head(limit)
    return [(str(zone), int(count)) for zone, count in zip(ranked["zone"], ranked["count"])]


def mean_fares(trips: pd.DataFrame) -> Tuple[float | None, float | None, float | None]:
    filtered = apply_fare_quality_filter(trips)
    if filtered.empty:
        return None, None, None
    return (
        float(filtered["fare_amount"].mean()),
        float(filtered["tip_amount"].mean()),
        float(filtered["total_amount"].mean()),
    )


class AggregationService:
    def __init__(
        self,
        store: TripStore,
        *,
        top_zones_limit: int = 5,
        excluded_borough: str = "Unknown",
        logger: logging.Logger | None = None,
    ):
        if top_zones_limit < 1:
            raise ValueError(f"top_zones_limit must be >= 1, got: {top_zones_limit}")
        self.store = store
        self.top_zones_limit = top_zones_limit
        self.excluded_borough = excluded_borough
        self.logger = logger or logging.getLogger(__name__)

    def _snapshots(self) -> Sequence[Snapshot]:
        return self.store.snapshots()

    def hourly_demand(self) -> List[HourlyDemandRow]:
        per_period = [(s.label, count_by_hour(s.trips)) for s in self._snapshots()]
        rows = [
            HourlyDemandRow(period=label, hour=hour, count=counts[hour])
            for hour in range(24)
            for label, counts in per_period
            if hour in counts
        ]
        self.logger.debug("Hourly demand: %d rows", len(rows))
        return rows

    def weekly_demand(self) -> List[WeeklyDemandRow]:
        per_period = [(s.label, count_by_day_of_week(s.trips)) for s in self._snapshots()]
        rows = [
            WeeklyDemandRow(period=label, day_of_week=day, count=counts[day])
            for day in range(7)
            for label, counts in per_period
            if day in counts
        ]
        self.logger.debug("Weekly demand: %d rows", len(rows))
        return rows

    def payment_mix(self) -> List[PaymentMixRow]:
        rows: List[PaymentMixRow] = []
        for snapshot in self._snapshots():
            counts = count_by_payment_method(snapshot.trips)
            rows.extend(
                PaymentMixRow(period=snapshot.label, method=method, count=counts[method])
                for method in PAYMENT_METHOD_ORDER
            )
        return rows

    def top_zones(self) -> List[TopZoneRow]:
        tables = self.store.tables()
        rows: List[TopZoneRow] = []
        for snapshot in tables.snapshots:
            ranked = rank_zones(
                snapshot.trips,
                tables.zones,
                limit=self.top_zones_limit,
                excluded_borough=self.excluded_borough,
            )
            if len(ranked) < self.top_zones_limit:
                self.logger.warning(
                    "Only %d eligible zones for period %s (wanted %d).",
                    len(ranked),
                    snapshot.label,
                    self.top_zones_limit,
                )
            rows.extend(
                TopZoneRow(period=snapshot.label, zone_name=zone, count=count)
                for zone, count in ranked
            )
        return rows

    def fare_composition(self) -> List[FareCompositionRow]:
        rows: List[FareCompositionRow] = []
        for snapshot in self._snapshots():
            mean_fare, mean_tip, mean_total = mean_fares(snapshot.trips)
            if mean_fare is None:
                self.logger.warning(
                    "No qualifying fares for period %s; means are undefined.",
                    snapshot.label,
                )
            rows.append(
                FareCompositionRow(
                    period=snapshot.label,
                    mean_fare=mean_fare,
                    mean_tip=mean_tip,
                    mean_total=mean_total,
                )
            )
        return rows
