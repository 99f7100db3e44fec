"""
Missing-data accounting for daily series.

Coverage is measured against the full calendar of the requested period, so
years with no observations at all count entirely against a station.
"""

from typing import Iterable

from ghcn_trends.engine.calendar_index import days_in_year_range
from ghcn_trends.engine.exceptions import InsufficientDataError
from ghcn_trends.models.series import SeriesMap, YearSeries


def coverage_fraction(series: SeriesMap, year1: int, year2: int) -> float:
    """
    Fraction of calendar days in [year1, year2] with a present value.

    The denominator counts every day of every year in the range, including
    years absent from `series`.

    Raises:
        ValueError: if year1 > year2.
        InsufficientDataError: if no year of `series` lies in the range.
    """
    if year1 > year2:
        raise ValueError(f"Invalid period: {year1} is after {year2}.")

    years_in_range = [y for y in series.years if year1 <= y <= year2]
    if not years_in_range:
        raise InsufficientDataError(
            f"{series.station_id}/{series.variable.value} has no data in {year1}-{year2}."
        )

    present = sum(
        sum(1 for v in series.years[y] if v is not None)
        for y in years_in_range
    )
    return present / days_in_year_range(year1, year2)


def longest_missing_run(year_series: YearSeries) -> int:
    """Length of the longest run of consecutive missing slots within one year."""
    current = 0
    longest = 0
    for v in year_series:
        if v is None:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def longest_missing_run_map(series: SeriesMap) -> dict[int, int]:
    """Longest missing run for every year present in `series`."""
    return {year: longest_missing_run(values) for year, values in series.years.items()}


def good_years(series: SeriesMap, max_run: int) -> set[int]:
    """Years present in `series` whose longest missing run is at most `max_run` days."""
    return {
        year for year, run in longest_missing_run_map(series).items()
        if run <= max_run
    }


def common_good_years(series_maps: Iterable[SeriesMap], max_run: int) -> set[int]:
    """Years that are good in every one of `series_maps`."""
    result = None
    for series in series_maps:
        years = good_years(series, max_run)
        result = years if result is None else result & years
    return result if result is not None else set()
