from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple


@dataclass(frozen=True)
class ColumnSchema:
    column_name: str
    aliases: Tuple[str, ...] = ()

    @property
    def accepted_names(self) -> Tuple[str, ...]:
        return (self.column_name, *self.aliases)


@dataclass(frozen=True)
class TableSchema:
    table_name: str
    columns: List[ColumnSchema]

    @property
    def column_names(self) -> List[str]:
        return [col.column_name for col in self.columns]


TRIP_TABLE = TableSchema(
    table_name="trips",
    columns=[
        ColumnSchema("pickup_datetime", ("tpep_pickup_datetime", "lpep_pickup_datetime")),
        ColumnSchema("pickup_location_id", ("PULocationID",)),
        ColumnSchema("fare_amount"),
        ColumnSchema("tip_amount"),
        ColumnSchema("total_amount"),
        ColumnSchema("trip_distance"),
        ColumnSchema("payment_type"),
    ],
)

ZONE_TABLE = TableSchema(
    table_name="zones",
    columns=[
        ColumnSchema("location_id", ("LocationID",)),
        ColumnSchema("borough", ("Borough",)),
        ColumnSchema("zone", ("Zone", "zone_name")),
    ],
)


def resolve_columns(table: TableSchema, source_names: Iterable[str]) -> Dict[str, str]:
    """Map canonical column names to the matching source column names.

    Matching is case-insensitive; the first accepted name present wins.
    """
    by_lower: Dict[str, str] = {}
    for name in source_names:
        by_lower.setdefault(str(name).lower(), str(name))

    mapping: Dict[str, str] = {}
    for col in table.columns:
        for candidate in col.accepted_names:
            source = by_lower.get(candidate.lower())
            if source is not None:
                mapping[col.column_name] = source
                break
    return mapping


def missing_columns(table: TableSchema, source_names: Iterable[str]) -> List[str]:
    mapping = resolve_columns(table, source_names)
    return [name for name in table.column_names if name not in mapping]
