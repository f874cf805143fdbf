from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat

from .types import PaymentMethod, ViewName


class ViewRow(BaseModel):
    """Base of every aggregate row handed to the rendering layer.

    Rows are immutable and strictly typed: counts must be real ints and means
    real floats, so a renderer can rely on the JSON number kind.
    """

    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    period: str = Field(..., min_length=1)


class HourlyDemandRow(ViewRow):
    hour: int = Field(..., ge=0, le=23)
    count: int = Field(..., ge=0)


class WeeklyDemandRow(ViewRow):
    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday ... 6=Saturday")
    count: int = Field(..., ge=0)


class PaymentMixRow(ViewRow):
    method: PaymentMethod
    count: int = Field(..., ge=0)


class TopZoneRow(ViewRow):
    zone_name: str
    count: int = Field(..., ge=0)


class FareCompositionRow(ViewRow):
    # None when the period has no qualifying trips.
    mean_fare: Optional[NonNegativeFloat]
    mean_tip: Optional[float]
    mean_total: Optional[NonNegativeFloat]


VIEW_MODELS: Dict[ViewName, Type[ViewRow]] = {
    "hourly": HourlyDemandRow,
    "weekly": WeeklyDemandRow,
    "payments": PaymentMixRow,
    "top_zones": TopZoneRow,
    "fares": FareCompositionRow,
}

VIEW_COLUMNS: Dict[ViewName, List[str]] = {
    name: list(model.model_fields) for name, model in VIEW_MODELS.items()
}


def rows_to_records(rows: Sequence[ViewRow]) -> List[Dict[str, Any]]:
    return [row.model_dump(mode="json") for row in rows]
