"""
GHCN Trends configuration and constants.
"""

import os
from enum import Enum


class UnitSystem(str, Enum):
    IP = "IP"  # Inch-Pound (°F)
    SI = "SI"  # Metric (°C)


class Variable(str, Enum):
    TMAX = "TMAX"  # daily maximum temperature
    TMIN = "TMIN"  # daily minimum temperature
    TAVG = "TAVG"  # (TMAX + TMIN) / 2, synthesized


# Variables read from raw observation files
RAW_VARIABLES: tuple[Variable, ...] = (Variable.TMAX, Variable.TMIN)

# Derived variables and the pair of raw variables each is averaged from
DERIVED_VARIABLES: dict[Variable, tuple[Variable, Variable]] = {
    Variable.TAVG: (Variable.TMAX, Variable.TMIN),
}

# Default selection period and thresholds
DEFAULT_START_YEAR = 1950
DEFAULT_END_YEAR = 2010
DEFAULT_MIN_COVERAGE = 0.9
DEFAULT_MAX_MISSING_RUN = 7  # days

# Stations analyzed concurrently
DEFAULT_MAX_WORKERS = 4

# Raw GHCN temperatures are stored in tenths of a degree Celsius
RAW_TEMPERATURE_SCALE = 10.0

# Days per month, non-leap year
MONTH_DAYS: tuple[int, ...] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# ghcnd-stations.txt fixed-width layout: (field, start, end)
STATION_FIELDS: list[tuple[str, int, int]] = [
    ("id", 0, 11),
    ("latitude", 12, 20),
    ("longitude", 21, 30),
    ("elevation", 31, 37),
    ("state", 38, 40),
    ("name", 41, 71),
    ("gsn_flag", 72, 75),
    ("hcn_crn_flag", 76, 79),
    ("wmo_id", 80, 85),
]

# A station line must reach the end of the name field; trailing flags are optional
STATION_LINE_MIN_LENGTH = 71

# Data directory layout
DATA_DIR = os.environ.get(
    "GHCN_TRENDS_DATA_DIR",
    os.path.join(os.path.dirname(__file__), "..", "..", "data"),
)
STATIONS_FILENAME = os.path.join("stations", "ghcnd-stations.txt")
POR_SUMMARY_FILENAME = os.path.join("stations", "summary.json")
OBSERVATIONS_DIRNAME = "observations"
CACHE_DIRNAME = "cache"
EXPORTS_DIRNAME = "exports"

# Raw observation file name per (station, variable)
OBSERVATION_FILE_TEMPLATE = "{variable}.csv.gz"

# Browser origins allowed by CORS, comma-separated; none by default
CORS_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.environ.get("GHCN_TRENDS_CORS_ORIGINS", "").split(",")
    if origin.strip()
]
