"""
Station metadata and period-of-record summaries.

Parses the fixed-width ghcnd-stations.txt listing and the JSON
period-of-record summary, and supports searching and describing stations.
"""

import json
import logging
import os
from typing import Iterable, Optional

from ghcn_trends.config import (
    Variable,
    STATION_FIELDS,
    STATION_LINE_MIN_LENGTH,
    STATIONS_FILENAME,
    POR_SUMMARY_FILENAME,
    OBSERVATIONS_DIRNAME,
    CACHE_DIRNAME,
    EXPORTS_DIRNAME,
)
from ghcn_trends.engine.exceptions import FormatError, MissingFileError
from ghcn_trends.models.selection import DatasetContext
from ghcn_trends.models.station import StationMeta, PeriodOfRecord

logger = logging.getLogger(__name__)


def _trim_to_none(s: str) -> Optional[str]:
    """Strip whitespace; an empty field becomes None."""
    trimmed = s.strip()
    return trimmed or None


def parse_station_line(line: str) -> StationMeta:
    """
    Parse one line of ghcnd-stations.txt.

    Raises:
        FormatError: if the line stops before the end of the name field or
            has no station id.
    """
    line = line.rstrip("\r\n")
    if len(line) < STATION_LINE_MIN_LENGTH:
        raise FormatError(
            f"Truncated station line ({len(line)} chars, need {STATION_LINE_MIN_LENGTH}): '{line}'"
        )

    fields = {name: _trim_to_none(line[start:end]) for name, start, end in STATION_FIELDS}
    if fields["id"] is None:
        raise FormatError(f"Station line has no id: '{line}'")

    return StationMeta(**fields)


def parse_stations_txt(lines: Iterable[str]) -> dict[str, StationMeta]:
    """Parse a station listing into a map keyed by station id. Blank lines are skipped."""
    stations = {}
    for line_no, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            station = parse_station_line(line)
        except FormatError as e:
            raise FormatError(f"Line {line_no}: {e}") from e
        stations[station.id] = station
    return stations


def load_stations(path: str) -> dict[str, StationMeta]:
    """Read and parse a ghcnd-stations.txt file."""
    if not os.path.isfile(path):
        raise MissingFileError(f"Station listing not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        stations = parse_stations_txt(f)
    logger.info("Loaded %d stations from %s", len(stations), path)
    return stations


def parse_por_summary(raw: dict) -> dict[str, dict[str, PeriodOfRecord]]:
    """
    Parse a period-of-record summary of the form
    {station_id: {variable: {"min": "YYYYMMDD", "max": "YYYYMMDD", "state": n}}}.

    Variable keys are lower-cased.
    """
    summary = {}
    for station_id, variables in raw.items():
        if not isinstance(variables, dict):
            raise FormatError(f"Period-of-record entry for {station_id} is not an object.")
        try:
            summary[station_id] = {
                var.lower(): PeriodOfRecord.model_validate(por)
                for var, por in variables.items()
            }
        except ValueError as e:
            raise FormatError(f"Bad period-of-record entry for {station_id}: {e}") from e
    return summary


def load_por_summary(path: str) -> dict[str, dict[str, PeriodOfRecord]]:
    """Read and parse a period-of-record summary JSON file."""
    if not os.path.isfile(path):
        raise MissingFileError(f"Period-of-record summary not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid JSON in {path}: {e}") from e
    return parse_por_summary(raw)


def load_dataset_context(data_dir: str, use_cache: bool = True) -> DatasetContext:
    """Load station metadata and POR summaries from a data directory."""
    return DatasetContext(
        stations=load_stations(os.path.join(data_dir, STATIONS_FILENAME)),
        period_of_record=load_por_summary(os.path.join(data_dir, POR_SUMMARY_FILENAME)),
        observations_dir=os.path.join(data_dir, OBSERVATIONS_DIRNAME),
        cache_dir=os.path.join(data_dir, CACHE_DIRNAME) if use_cache else None,
        exports_dir=os.path.join(data_dir, EXPORTS_DIRNAME),
    )


def in_us(station: StationMeta) -> bool:
    """US stations are the ones carrying a state code."""
    return station.state is not None


def station_latlon(station: StationMeta) -> tuple[Optional[float], Optional[float]]:
    """(latitude, longitude) as floats; None where the field is blank."""
    try:
        lat = float(station.latitude) if station.latitude is not None else None
        lon = float(station.longitude) if station.longitude is not None else None
    except ValueError as e:
        raise FormatError(f"Bad coordinates for station {station.id}: {e}") from e
    return lat, lon


def station_display_name(station: StationMeta) -> str:
    """State code followed by station name, e.g. "NC ASHEVILLE"."""
    parts = [p for p in (station.state, station.name) if p]
    return " ".join(parts) if parts else station.id


def search_stations(
    stations: dict[str, StationMeta],
    query: str,
    limit: int = 20,
    us_only: bool = False,
) -> list[StationMeta]:
    """
    Search stations by id, name or state, case-insensitive partial match.
    Results are sorted by relevance (exact id, then name prefix first).
    """
    query_lower = query.lower().strip()
    candidates = [s for s in stations.values() if not us_only or in_us(s)]
    if not query_lower:
        return candidates[:limit]

    results = []
    for station in candidates:
        id_lower = station.id.lower()
        name_lower = (station.name or "").lower()
        state_lower = (station.state or "").lower()

        if id_lower == query_lower:
            results.append((0, station))
        elif name_lower.startswith(query_lower):
            results.append((1, station))
        elif query_lower in name_lower:
            results.append((2, station))
        elif state_lower == query_lower:
            results.append((3, station))
        elif query_lower in id_lower:
            results.append((4, station))

    results.sort(key=lambda x: x[0])
    return [r[1] for r in results[:limit]]


def por_covers_period(
    por: dict[str, PeriodOfRecord],
    start_year: int,
    end_year: int,
    variables: Iterable[Variable],
) -> bool:
    """
    True if every variable's period of record starts no later than Jan 1 of
    start_year and extends at least into end_year.
    """
    start = f"{start_year:04d}0101"
    end = f"{end_year:04d}0101"
    for variable in variables:
        entry = por.get(variable.value.lower())
        if entry is None:
            return False
        if entry.first > start or entry.last < end:
            return False
    return True
