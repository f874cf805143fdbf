from enum import Enum
import math
from typing import Any, Dict, List, Literal, Optional, TypedDict


class PaymentMethod(str, Enum):
    CARD = "Card"
    CASH = "Cash"
    OTHER = "Other"


# Display order of the payment mix view.
PAYMENT_METHOD_ORDER: List[PaymentMethod] = [
    PaymentMethod.CARD,
    PaymentMethod.CASH,
    PaymentMethod.OTHER,
]


def _normalize_payment_code(code: Any) -> Optional[int]:
    if code is None:
        return None
    try:
        value = float(code)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or not value.is_integer():
        return None
    return int(value)


def classify_payment_type(code: Any) -> PaymentMethod:
    match _normalize_payment_code(code):
        case 1:
            return PaymentMethod.CARD
        case 2:
            return PaymentMethod.CASH
        case _:
            return PaymentMethod.OTHER


ViewName = Literal["hourly", "weekly", "payments", "top_zones", "fares"]

VIEW_NAMES: List[ViewName] = ["hourly", "weekly", "payments", "top_zones", "fares"]


class ViewResult(TypedDict, total=False):
    view: str
    rows: List[Dict[str, Any]]
    row_count: int
    error: str
    error_type: str
