"""
Shared fixtures: a small on-disk GHCN dataset.
"""

import gzip
import json
import os

import pytest

from ghcn_trends.engine.calendar_index import date_from_day_of_year, year_length
from ghcn_trends.engine.stations import load_dataset_context


def station_line(
    station_id: str,
    lat: str,
    lon: str,
    elev: str,
    state: str,
    name: str,
    gsn: str = "",
    hcn: str = "",
    wmo: str = "",
) -> str:
    """Format one ghcnd-stations.txt line."""
    return (
        f"{station_id:<11} {lat:>8} {lon:>9} {elev:>6} {state:<2} "
        f"{name:<30} {gsn:<3} {hcn:<3} {wmo:<5}"
    )


def year_records(year: int, value: int, skip: tuple[int, ...] = ()) -> list[tuple[str, int]]:
    """One record per day of `year` with a constant value, minus `skip` indices."""
    return [
        (date_from_day_of_year(year, i), value)
        for i in range(year_length(year))
        if i not in skip
    ]


def write_observations(observations_dir, station_id: str, variable: str, records) -> str:
    """Write records as a gzipped `date,value` file."""
    station_dir = os.path.join(observations_dir, station_id)
    os.makedirs(station_dir, exist_ok=True)
    path = os.path.join(station_dir, f"{variable}.csv.gz")
    with gzip.open(path, "wt", encoding="utf-8") as f:
        for date, value in records:
            f.write(f"{date},{value}\n")
    return path


def warming_records(first_year: int, last_year: int, base: int) -> list[tuple[str, int]]:
    """Full years warming by 2 tenths of °C per year from `base` in 1950."""
    records = []
    for year in range(first_year, last_year + 1):
        records.extend(year_records(year, base + 2 * (year - 1950)))
    return records


STATIONS_TXT = "\n".join([
    station_line("USC00000001", "35.5950", "-82.5567", "682.1", "NC", "ASHEVILLE", hcn="HCN"),
    station_line("USC00000002", "36.0000", "-80.0000", "300.0", "NC", "SPARSE STATION"),
    station_line("USC00000003", "37.0000", "-81.0000", "400.0", "VA", "NO TMIN STATION"),
    station_line("USC00000004", "38.0000", "-82.0000", "500.0", "WV", "LATE START"),
    station_line("USC00000005", "39.0000", "-83.0000", "600.0", "OH", "BROKEN FILE"),
    station_line("CA000000006", "45.0000", "-75.0000", "100.0", "", "OTTAWA", wmo="71628"),
]) + "\n"


def _por(first: str, last: str, state: int = 3) -> dict:
    return {"min": first, "max": last, "state": state}


POR_SUMMARY = {
    "USC00000001": {"tmax": _por("19480101", "20121231"), "tmin": _por("19480101", "20121231"),
                    "prcp": _por("19480101", "20121231", 0)},
    "USC00000002": {"tmax": _por("19400101", "20151231"), "tmin": _por("19400101", "20151231")},
    "USC00000003": {"tmax": _por("19400101", "20151231"), "tmin": _por("19400101", "20151231")},
    "USC00000004": {"tmax": _por("19700101", "20151231"), "tmin": _por("19700101", "20151231")},
    "USC00000005": {"tmax": _por("19400101", "20151231"), "tmin": _por("19400101", "20151231")},
    "CA000000006": {"snow": _por("19400101", "20151231", 1)},
}


@pytest.fixture
def dataset_dir(tmp_path):
    """Data directory laid out as the package expects."""
    stations_dir = tmp_path / "stations"
    stations_dir.mkdir()
    (stations_dir / "ghcnd-stations.txt").write_text(STATIONS_TXT)
    (stations_dir / "summary.json").write_text(json.dumps(POR_SUMMARY))

    obs = str(tmp_path / "observations")

    # Complete record 1948-2012
    write_observations(obs, "USC00000001", "TMAX", warming_records(1948, 2012, 200))
    write_observations(obs, "USC00000001", "TMIN", warming_records(1948, 2012, 100))

    # Only 1950-1960 on file: coverage far below 0.9
    write_observations(obs, "USC00000002", "TMAX", warming_records(1950, 1960, 210))
    write_observations(obs, "USC00000002", "TMIN", warming_records(1950, 1960, 110))

    # TMIN file absent
    write_observations(obs, "USC00000003", "TMAX", warming_records(1948, 2012, 220))

    write_observations(obs, "USC00000004", "TMAX", warming_records(1970, 2015, 230))
    write_observations(obs, "USC00000004", "TMIN", warming_records(1970, 2015, 130))

    # Malformed value token
    write_observations(obs, "USC00000005", "TMAX", [("19500101", "abc")])
    write_observations(obs, "USC00000005", "TMIN", warming_records(1948, 2012, 140))

    return str(tmp_path)


@pytest.fixture
def dataset_context(dataset_dir):
    return load_dataset_context(dataset_dir)


@pytest.fixture
def uncached_context(dataset_dir):
    return load_dataset_context(dataset_dir, use_cache=False)
