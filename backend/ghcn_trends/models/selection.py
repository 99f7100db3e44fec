"""
Pydantic models for station selection: dataset context, criteria and results.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ghcn_trends.config import (
    UnitSystem,
    Variable,
    RAW_VARIABLES,
    DEFAULT_START_YEAR,
    DEFAULT_END_YEAR,
    DEFAULT_MIN_COVERAGE,
    DEFAULT_MAX_MISSING_RUN,
    DEFAULT_MAX_WORKERS,
)
from ghcn_trends.models.series import StationTrends
from ghcn_trends.models.station import StationMeta, PeriodOfRecord


class DatasetContext(BaseModel):
    """
    Everything the selector reads besides the raw observation files.

    Loaded once and passed explicitly to each component.
    """
    model_config = ConfigDict(frozen=True)

    stations: dict[str, StationMeta]
    period_of_record: dict[str, dict[str, PeriodOfRecord]]
    observations_dir: str
    cache_dir: Optional[str] = None
    exports_dir: Optional[str] = None


class SelectionCriteria(BaseModel):
    """Target period and data-quality thresholds for station selection."""
    start_year: int = DEFAULT_START_YEAR
    end_year: int = DEFAULT_END_YEAR
    min_coverage: float = Field(DEFAULT_MIN_COVERAGE, ge=0.0, le=1.0)
    max_missing_run: int = Field(DEFAULT_MAX_MISSING_RUN, ge=0)
    variables: list[Variable] = Field(default_factory=lambda: list(RAW_VARIABLES), min_length=1)
    unit_system: UnitSystem = UnitSystem.IP
    clip_to_period: bool = True  # restrict usable years to [start_year, end_year]
    station_ids: Optional[list[str]] = None  # None = every station in the summary
    max_workers: int = Field(DEFAULT_MAX_WORKERS, ge=1)
    fail_fast: bool = False  # abort the batch on the first FormatError

    @model_validator(mode="after")
    def _check_period(self) -> "SelectionCriteria":
        if self.start_year > self.end_year:
            raise ValueError("start_year must not be after end_year.")
        if Variable.TAVG in self.variables:
            raise ValueError("TAVG is derived and cannot be a required raw variable.")
        return self


class StationFailure(BaseModel):
    """A station excluded from the result because of an error."""
    station_id: str
    error_kind: str
    detail: str


class SelectionResult(BaseModel):
    """Output of a selection run."""
    criteria: SelectionCriteria
    candidates: list[str]                       # passed the period-of-record check
    coverage: dict[str, dict[Variable, float]]  # station -> variable -> fraction
    good_years: dict[str, list[int]]            # usable years of retained stations
    results: dict[str, StationTrends]
    failures: list[StationFailure]
    # Raw-file digests per candidate at run time (None = file absent); empty without a cache
    source_digests: dict[str, dict[Variable, Optional[str]]] = {}


class StationAnalysis(BaseModel):
    """Coverage, usable years and (if retained) trends for one station."""
    station_id: str
    coverage: dict[Variable, float]
    meets_coverage: bool
    good_years: list[int]
    trends: Optional[StationTrends] = None


class ObservationAnalysisOutput(BaseModel):
    """Analysis of one station's uploaded TMAX/TMIN files."""
    start_year: int
    end_year: int
    unit_system: UnitSystem
    longest_missing_runs: dict[Variable, dict[int, int]]
    analysis: StationAnalysis
