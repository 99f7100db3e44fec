"""
Derived daily series synthesized from two raw series.
"""

from ghcn_trends.config import Variable
from ghcn_trends.models.series import SeriesMap


def average_series(
    a: SeriesMap,
    b: SeriesMap,
    variable: Variable = Variable.TAVG,
) -> SeriesMap:
    """
    Pointwise mean of two series for the same station.

    Only years present in both inputs are kept. A slot is missing in the
    result whenever it is missing in either input.
    """
    if a.station_id != b.station_id:
        raise ValueError(
            f"Cannot average series of different stations: {a.station_id}, {b.station_id}."
        )

    years = {}
    for year in sorted(a.year_set() & b.year_set()):
        years[year] = tuple(
            None if va is None or vb is None else (va + vb) / 2.0
            for va, vb in zip(a.years[year], b.years[year])
        )

    return SeriesMap(station_id=a.station_id, variable=variable, years=years)
