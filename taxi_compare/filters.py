"""Record-level inclusion predicates shared by every aggregation.

Each predicate returns a boolean mask aligned with the input frame. Missing or
unparseable values compare as False, so malformed records drop out of the
view they would have contributed to without failing the whole query.
"""

import pandas as pd


def quality_mask(trips: pd.DataFrame) -> pd.Series:
    return (trips["total_amount"] > 0) & (trips["trip_distance"] > 0)


def fare_quality_mask(trips: pd.DataFrame) -> pd.Series:
    return (
        quality_mask(trips)
        & (trips["fare_amount"] > 0)
        & trips["tip_amount"].notna()
    )


def apply_quality_filter(trips: pd.DataFrame) -> pd.DataFrame:
    return trips.loc[quality_mask(trips)]


def apply_fare_quality_filter(trips: pd.DataFrame) -> pd.DataFrame:
    return trips.loc[fare_quality_mask(trips)]
