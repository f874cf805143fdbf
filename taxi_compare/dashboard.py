import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, cast

from .config import Settings
from .services.aggregation_service import AggregationService
from .store import LoadedTables, StoreNotReadyError, TripStore
from .types import VIEW_NAMES, ViewName, ViewResult
from .views import ViewRow, rows_to_records


class TaxiComparisonDashboard:
    def __init__(
        self,
        settings: Settings,
        *,
        store: Optional[TripStore] = None,
        aggregation_service: Optional[AggregationService] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)
        self.store_logger = self.logger.getChild("store")
        self.aggregation_logger = self.logger.getChild("aggregation")

        self.store = store or TripStore.from_settings(settings, logger=self.store_logger)
        self.aggregation_service = aggregation_service or AggregationService(
            self.store,
            top_zones_limit=settings.top_zones_limit,
            excluded_borough=settings.excluded_borough,
            logger=self.aggregation_logger,
        )
        self._handlers: Dict[ViewName, Callable[[], Sequence[ViewRow]]] = {
            "hourly": self.aggregation_service.hourly_demand,
            "weekly": self.aggregation_service.weekly_demand,
            "payments": self.aggregation_service.payment_mix,
            "top_zones": self.aggregation_service.top_zones,
            "fares": self.aggregation_service.fare_composition,
        }

    @property
    def is_ready(self) -> bool:
        return self.store.is_ready

    @staticmethod
    def available_views() -> List[str]:
        return list(VIEW_NAMES)

    def load(self) -> LoadedTables:
        return self.store.load()

    def describe(self) -> Dict[str, Any]:
        tables = self.store.tables()
        return {
            "periods": [snapshot.label for snapshot in tables.snapshots],
            "trips": {snapshot.label: snapshot.row_count for snapshot in tables.snapshots},
            "zones": int(len(tables.zones)),
            "loaded_at": tables.loaded_at.isoformat(),
        }

    def query(self, view: str) -> ViewResult:
        normalized_view = (view or "").strip().lower()
        handler = self._handlers.get(cast(ViewName, normalized_view))
        if handler is None:
            self.logger.warning("Unknown view requested: %r", view)
            return {
                "view": normalized_view,
                "rows": [],
                "row_count": 0,
                "error": (
                    f"Unknown view {view!r}. "
                    f"Available views: {', '.join(self.available_views())}."
                ),
                "error_type": "unknown_view",
            }

        try:
            rows = rows_to_records(handler())
        except StoreNotReadyError as exc:
            self.logger.error("View %s requested before load: %s", normalized_view, exc)
            return {
                "view": normalized_view,
                "rows": [],
                "row_count": 0,
                "error": str(exc),
                "error_type": "not_ready",
            }
        except Exception as exc:
            self.logger.exception("View %s failed: %s", normalized_view, exc)
            return {
                "view": normalized_view,
                "rows": [],
                "row_count": 0,
                "error": str(exc),
                "error_type": "internal",
            }

        return {
            "view": normalized_view,
            "rows": rows,
            "row_count": len(rows),
            "error": "",
            "error_type": "",
        }

    def query_all(self) -> Dict[str, ViewResult]:
        return {name: self.query(name) for name in self.available_views()}

    def save_views(
        self,
        file_path: str,
        results: Optional[Dict[str, ViewResult]] = None,
    ) -> str:
        payload = results if results is not None else self.query_all()
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return str(path.resolve())
