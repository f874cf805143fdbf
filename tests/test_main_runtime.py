import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

from main import configure_stdout
from main import main as run_main
from taxi_compare.config import Settings
from taxi_compare.store import DatasetLoadError


def _settings() -> Settings:
    return Settings(
        trips_baseline_path=Path("baseline.parquet"),
        trips_comparison_path=Path("comparison.parquet"),
        zones_path=Path("zones.csv"),
        baseline_label="2019",
        comparison_label="2023",
        top_zones_limit=5,
        excluded_borough="Unknown",
        log_level="INFO",
    )


def _args(view: str = "all", output: str = "", describe: bool = False) -> argparse.Namespace:
    return argparse.Namespace(view=view, output=output, describe=describe)


class FakeDashboard:
    fail_load = False
    failing_views: List[str] = []

    def __init__(self, settings: Settings) -> None:
        _ = settings
        self.saved: Dict[str, Any] = {}

    @staticmethod
    def available_views() -> List[str]:
        return ["hourly", "weekly", "payments", "top_zones", "fares"]

    def load(self) -> None:
        if self.fail_load:
            raise DatasetLoadError("trips source yellow.parquet is missing required columns")

    def describe(self) -> Dict[str, Any]:
        return {"trips": {"2019": 3, "2023": 4}}

    def query(self, view: str) -> Dict[str, Any]:
        if view in self.failing_views:
            return {"view": view, "rows": [], "row_count": 0, "error": "boom", "error_type": "internal"}
        rows = [{"period": "2019", "view": view}]
        return {"view": view, "rows": rows, "row_count": 1, "error": "", "error_type": ""}

    def save_views(self, file_path: str, results: Dict[str, Any]) -> str:
        Path(file_path).write_text(json.dumps(results), encoding="utf-8")
        return file_path


def _patch(monkeypatch, args: argparse.Namespace, dashboard_cls: type = FakeDashboard) -> None:
    monkeypatch.setattr("main.parse_args", lambda: args)
    monkeypatch.setattr("main.load_dotenv", lambda: None)
    monkeypatch.setattr("main.load_settings", _settings)
    monkeypatch.setattr("main.TaxiComparisonDashboard", dashboard_cls)


def test_main_prints_all_views(monkeypatch, capsys) -> None:
    _patch(monkeypatch, _args())

    exit_code = run_main()
    out = capsys.readouterr().out

    assert exit_code == 0
    payload = json.loads(out)
    assert list(payload) == ["hourly", "weekly", "payments", "top_zones", "fares"]


def test_main_single_view_with_describe(monkeypatch, capsys) -> None:
    _patch(monkeypatch, _args(view="fares", describe=True))

    exit_code = run_main()
    out = capsys.readouterr().out

    assert exit_code == 0
    assert '"2019": 3' in out
    assert '"view": "fares"' in out
    assert '"hourly"' not in out


def test_main_writes_output_file(monkeypatch, capsys, tmp_path: Path) -> None:
    target = tmp_path / "views.json"
    _patch(monkeypatch, _args(view="payments", output=str(target)))

    exit_code = run_main()
    out = capsys.readouterr().out

    assert exit_code == 0
    assert f"Views written to: {target}" in out
    assert list(json.loads(target.read_text(encoding="utf-8"))) == ["payments"]


def test_main_config_error_returns_1(monkeypatch, capsys) -> None:
    def broken_settings() -> Settings:
        raise ValueError("TOP_ZONES_LIMIT must be an integer, got: 'x'")

    _patch(monkeypatch, _args())
    monkeypatch.setattr("main.load_settings", broken_settings)

    exit_code = run_main()
    out = capsys.readouterr().out

    assert exit_code == 1
    assert "Configuration error: TOP_ZONES_LIMIT" in out


def test_main_load_error_returns_1(monkeypatch, capsys) -> None:
    class FailingDashboard(FakeDashboard):
        fail_load = True

    _patch(monkeypatch, _args(), FailingDashboard)

    exit_code = run_main()
    out = capsys.readouterr().out

    assert exit_code == 1
    assert "Load error: trips source yellow.parquet" in out


def test_main_failed_view_returns_1(monkeypatch, capsys) -> None:
    class PartiallyFailingDashboard(FakeDashboard):
        failing_views = ["top_zones"]

    _patch(monkeypatch, _args(), PartiallyFailingDashboard)

    exit_code = run_main()
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["top_zones"]["error"] == "boom"
    assert payload["hourly"]["error"] == ""


def test_configure_stdout_tolerates_missing_reconfigure(monkeypatch) -> None:
    class DummyStream:
        pass

    monkeypatch.setattr("main.sys.stdout", DummyStream())
    configure_stdout()
