"""
Pydantic models for per-station daily series, annual means and trends.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from ghcn_trends.config import Variable
from ghcn_trends.engine.calendar_index import year_length

# One slot per day of the year; None marks a missing day
YearSeries = tuple[Optional[float], ...]


class SeriesMap(BaseModel):
    """Daily values for one station/variable, keyed by calendar year."""
    model_config = ConfigDict(frozen=True)

    station_id: str
    variable: Variable
    years: dict[int, YearSeries]

    @model_validator(mode="after")
    def _check_year_lengths(self) -> "SeriesMap":
        for year, values in self.years.items():
            if len(values) != year_length(year):
                raise ValueError(
                    f"Year {year} has {len(values)} slots, expected {year_length(year)}."
                )
        return self

    def year_set(self) -> set[int]:
        return set(self.years)


class AnnualMean(BaseModel):
    """Mean of one year's present daily values, in output units."""
    year: int
    value: float


class TrendResult(BaseModel):
    """Least-squares line value = intercept + slope * year."""
    intercept: float
    slope: float


class VariableTrend(BaseModel):
    """Annual series for one variable and its fitted trend."""
    series: list[AnnualMean]
    trend: TrendResult


class StationTrends(BaseModel):
    """Per-variable annual series and trends for one station."""
    station_id: str
    variables: dict[Variable, VariableTrend]
