from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv
import requests
from tqdm import tqdm

from taxi_compare.config import Settings, load_settings


BASE_URL = "https://d37ci6vzurychx.cloudfront.net"
ZONE_LOOKUP_URL = f"{BASE_URL}/misc/taxi_zone_lookup.csv"

REQUEST_TIMEOUT = 60
DOWNLOAD_CHUNK_SIZE = 8 * 1024 * 1024  # 8 MB


def trip_data_url(file_name: str) -> str:
    return f"{BASE_URL}/trip-data/{file_name}"


def download(url: str, out_path: Path) -> bool:
    """Download ``url`` to ``out_path``; returns False when the file already exists."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if out_path.exists() and out_path.stat().st_size > 0:
        return False

    tmp_path = out_path.with_name(out_path.name + ".part")
    with requests.get(url, stream=True, timeout=REQUEST_TIMEOUT) as response:
        response.raise_for_status()
        total = int(response.headers.get("content-length", 0))

        with open(tmp_path, "wb") as file_obj, tqdm(
            total=total,
            unit="B",
            unit_scale=True,
            desc=f"Downloading {out_path.name}",
        ) as pbar:
            for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    file_obj.write(chunk)
                    pbar.update(len(chunk))
    tmp_path.replace(out_path)
    return True


def planned_downloads(settings: Settings) -> List[Tuple[str, Path]]:
    return [
        (trip_data_url(settings.trips_baseline_path.name), settings.trips_baseline_path),
        (trip_data_url(settings.trips_comparison_path.name), settings.trips_comparison_path),
        (ZONE_LOOKUP_URL, settings.zones_path),
    ]


def main() -> int:
    load_dotenv()
    settings = load_settings()
    for url, path in planned_downloads(settings):
        if download(url, path):
            print(f"Saved {path}")
        else:
            print(f"SKIP: {path.name} already present.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
