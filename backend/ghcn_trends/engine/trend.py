"""
Annual aggregation and linear trend estimation.

Each year's daily series is reduced to the mean of its present values, the
means are converted from raw tenths of °C to display units, and an ordinary
least-squares line is fit with year as the independent variable.
"""

from typing import Iterable, Optional, Sequence

import numpy as np
from scipy import stats

from ghcn_trends.config import UnitSystem, RAW_TEMPERATURE_SCALE
from ghcn_trends.engine.exceptions import InsufficientDataError
from ghcn_trends.models.series import AnnualMean, SeriesMap, TrendResult, YearSeries


def annual_mean(year_series: YearSeries) -> Optional[float]:
    """Mean of the present slots, or None when every slot is missing."""
    present = [v for v in year_series if v is not None]
    if not present:
        return None
    return float(np.mean(present))


def unit_convert(raw: float) -> float:
    """Convert tenths of °C to °F."""
    return (raw / RAW_TEMPERATURE_SCALE) * 9.0 / 5.0 + 32.0


def convert_temperature(raw: float, unit_system: UnitSystem) -> float:
    """Convert tenths of °C to °F (IP) or °C (SI)."""
    if unit_system == UnitSystem.IP:
        return unit_convert(raw)
    return raw / RAW_TEMPERATURE_SCALE


def annual_series(
    series: SeriesMap,
    years: Iterable[int],
    unit_system: UnitSystem = UnitSystem.IP,
) -> list[AnnualMean]:
    """
    Annual means of `series` over `years`, converted to display units.

    Years absent from `series` or with no present values are skipped.
    The result is sorted by year.
    """
    result = []
    for year in sorted(set(years)):
        values = series.years.get(year)
        if values is None:
            continue
        mean = annual_mean(values)
        if mean is None:
            continue
        result.append(AnnualMean(year=year, value=convert_temperature(mean, unit_system)))
    return result


def fit_trend(points: Sequence[tuple[int, float]]) -> TrendResult:
    """
    Ordinary least-squares fit of value against year.

    Args:
        points: (year, value) pairs.

    Returns:
        TrendResult with intercept and slope (units per year).

    Raises:
        InsufficientDataError: if fewer than two distinct years are given.
    """
    if len({year for year, _ in points}) < 2:
        raise InsufficientDataError(
            f"Trend fit needs at least 2 distinct years, got {len(points)} point(s)."
        )

    x = np.array([year for year, _ in points], dtype=float)
    y = np.array([value for _, value in points], dtype=float)

    fit = stats.linregress(x, y)
    return TrendResult(intercept=float(fit.intercept), slope=float(fit.slope))
