from dataclasses import dataclass
import os
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_BASELINE_PATH = "data/yellow_tripdata_2019-02.parquet"
DEFAULT_COMPARISON_PATH = "data/yellow_tripdata_2023-02.parquet"
DEFAULT_ZONES_PATH = "data/taxi_zone_lookup.csv"


@dataclass(frozen=True)
class Settings:
    trips_baseline_path: Path
    trips_comparison_path: Path
    zones_path: Path
    baseline_label: str
    comparison_label: str
    top_zones_limit: int
    excluded_borough: str
    log_level: str


def _get_int_env(name: str, default: int, min_value: int = 1) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got: {raw!r}") from exc

    if value < min_value:
        raise ValueError(f"{name} must be >= {min_value}, got: {value}")
    return value


def _get_log_level_env(name: str, default: str = "INFO") -> str:
    allowed_levels = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}
    raw = (os.getenv(name, default) or default).strip().upper()
    if raw in allowed_levels:
        return raw
    return default


def _get_str_env(name: str, default: str) -> str:
    return (os.getenv(name, default) or "").strip() or default


def _get_path_env(name: str, default: str) -> Path:
    path = Path(_get_str_env(name, default)).expanduser()
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path.resolve()


def load_settings() -> Settings:
    baseline_label = _get_str_env("BASELINE_PERIOD_LABEL", "2019")
    comparison_label = _get_str_env("COMPARISON_PERIOD_LABEL", "2023")
    if baseline_label == comparison_label:
        raise ValueError(
            "BASELINE_PERIOD_LABEL and COMPARISON_PERIOD_LABEL must differ, "
            f"both are {baseline_label!r}"
        )

    return Settings(
        trips_baseline_path=_get_path_env("TRIPS_BASELINE_PATH", DEFAULT_BASELINE_PATH),
        trips_comparison_path=_get_path_env(
            "TRIPS_COMPARISON_PATH", DEFAULT_COMPARISON_PATH
        ),
        zones_path=_get_path_env("ZONES_PATH", DEFAULT_ZONES_PATH),
        baseline_label=baseline_label,
        comparison_label=comparison_label,
        top_zones_limit=_get_int_env("TOP_ZONES_LIMIT", 5),
        excluded_borough=_get_str_env("EXCLUDED_BOROUGH", "Unknown"),
        log_level=_get_log_level_env("LOG_LEVEL", "INFO"),
    )
