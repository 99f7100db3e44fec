"""
Daily observation file parser.

Reads per-station, per-variable GHCN daily files (one `date,value` pair per
line, values in tenths of °C, usually gzip-compressed) and arranges them into
year-indexed daily series with explicit missing slots.
"""

import gzip
import logging
import os
import re
import zlib
from typing import Iterable, Optional

from ghcn_trends.config import Variable, OBSERVATION_FILE_TEMPLATE
from ghcn_trends.engine.calendar_index import day_of_year_index, year_length
from ghcn_trends.engine.exceptions import FormatError, MissingFileError
from ghcn_trends.models.series import SeriesMap

logger = logging.getLogger(__name__)

Observation = tuple[str, int]

# ASCII only; int() would also accept other Unicode digits
VALUE_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_observation_lines(lines: Iterable[str]) -> list[Observation]:
    """
    Parse `date,value` lines into (date, value) pairs.

    Blank lines are skipped. Any malformed line aborts the whole parse.

    Args:
        lines: Text lines, e.g. "19090801,389"

    Returns:
        List of (YYYYMMDD string, int tenths of °C) in file order.

    Raises:
        FormatError: on a line without two fields, a malformed date, or a
            non-integer value.
    """
    records: list[Observation] = []

    for line_no, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line:
            continue

        parts = line.split(",")
        if len(parts) != 2:
            raise FormatError(
                f"Line {line_no}: expected 'date,value', got '{line}'."
            )

        date = parts[0].strip()
        # Validates the date; the index itself is recomputed when placing
        try:
            day_of_year_index(date)
        except FormatError as e:
            raise FormatError(f"Line {line_no}: {e}") from e

        token = parts[1].strip()
        if not VALUE_PATTERN.fullmatch(token):
            raise FormatError(f"Line {line_no}: value '{token}' is not an integer.")

        records.append((date, int(token)))

    return records


def build_series_map(
    records: Iterable[Observation],
    station_id: str,
    variable: Variable,
) -> SeriesMap:
    """
    Arrange observations into one all-missing-initialized series per year.

    Only years with at least one observation appear in the result.

    Raises:
        FormatError: if the same date occurs twice.
    """
    by_year: dict[int, list[Optional[float]]] = {}
    seen: set[str] = set()

    for date, value in records:
        if date in seen:
            raise FormatError(
                f"Duplicate date {date} in {station_id}/{variable.value}."
            )
        seen.add(date)

        year = int(date[0:4])
        if year not in by_year:
            by_year[year] = [None] * year_length(year)
        by_year[year][day_of_year_index(date)] = value

    return SeriesMap(
        station_id=station_id,
        variable=variable,
        years={year: tuple(values) for year, values in by_year.items()},
    )


def read_observation_file(path: str) -> list[Observation]:
    """
    Read a `date,value` file, gzip-compressed if the name ends in `.gz`.

    Raises:
        MissingFileError: if `path` does not exist.
        FormatError: if the file is not valid gzip/UTF-8 or a line is malformed.
    """
    if not os.path.isfile(path):
        raise MissingFileError(f"Observation file not found: {path}")

    opener = gzip.open if path.endswith(".gz") else open
    try:
        with opener(path, "rt", encoding="utf-8") as f:
            records = parse_observation_lines(f)
    except (OSError, EOFError, zlib.error, UnicodeDecodeError) as e:
        raise FormatError(f"Could not decode {path}: {e}") from e

    logger.debug("Read %d observations from %s", len(records), path)
    return records


def decode_observation_bytes(content: bytes) -> list[Observation]:
    """Parse uploaded file content, gunzipping it if it carries the gzip magic."""
    try:
        if content[:2] == b"\x1f\x8b":
            content = gzip.decompress(content)
        text = content.decode("utf-8")
    except (OSError, EOFError, zlib.error, UnicodeDecodeError) as e:
        raise FormatError(f"Could not decode observation file: {e}") from e
    return parse_observation_lines(text.splitlines())


def observation_path(observations_dir: str, station_id: str, variable: Variable) -> str:
    """Location of the raw file for one station/variable."""
    return os.path.join(
        observations_dir,
        station_id,
        OBSERVATION_FILE_TEMPLATE.format(variable=variable.value),
    )


def load_series_map(
    observations_dir: str,
    station_id: str,
    variable: Variable,
) -> SeriesMap:
    """Read and arrange the raw file for one station/variable."""
    path = observation_path(observations_dir, station_id, variable)
    records = read_observation_file(path)
    series = build_series_map(records, station_id, variable)
    logger.info(
        "Loaded %s/%s: %d observations over %d years",
        station_id, variable.value, len(records), len(series.years),
    )
    return series

