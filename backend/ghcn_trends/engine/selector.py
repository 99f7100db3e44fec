"""
Orchestrator for station selection and trend computation.

Period-of-record check → per-variable coverage → good-year intersection →
annual means and least-squares trends for raw and derived variables.
Stations are processed independently on a worker pool; a station that
fails is excluded from the result and its cause recorded.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from ghcn_trends.config import Variable, DERIVED_VARIABLES
from ghcn_trends.engine.cache import (
    build_series,
    load_artifact,
    save_artifact,
    selection_artifact_path,
    station_source_digests,
)
from ghcn_trends.engine.completeness import common_good_years, coverage_fraction
from ghcn_trends.engine.derived import average_series
from ghcn_trends.engine.exceptions import FormatError, GHCNTrendsError, MissingFileError
from ghcn_trends.engine.stations import por_covers_period
from ghcn_trends.engine.trend import annual_series, fit_trend
from ghcn_trends.models.selection import (
    DatasetContext,
    SelectionCriteria,
    SelectionResult,
    StationAnalysis,
    StationFailure,
)
from ghcn_trends.models.series import SeriesMap, StationTrends, VariableTrend

logger = logging.getLogger(__name__)


def stations_covering_period(
    context: DatasetContext,
    criteria: SelectionCriteria,
) -> list[str]:
    """Station ids whose period of record spans the target period for every required variable."""
    if criteria.station_ids is not None:
        ids = [sid for sid in criteria.station_ids if sid in context.period_of_record]
    else:
        ids = list(context.period_of_record)

    return sorted(
        sid for sid in ids
        if por_covers_period(
            context.period_of_record[sid],
            criteria.start_year,
            criteria.end_year,
            criteria.variables,
        )
    )


def trend_variables(required: list[Variable]) -> list[Variable]:
    """Required raw variables plus every derived variable computable from them."""
    derived = [
        var for var, sources in DERIVED_VARIABLES.items()
        if all(source in required for source in sources)
    ]
    return list(required) + derived


def analyze_series(
    series_maps: dict[Variable, SeriesMap],
    criteria: SelectionCriteria,
) -> StationAnalysis:
    """
    Run coverage, good-year and trend analysis on one station's raw series.

    Args:
        series_maps: Raw series for every variable in criteria.variables.
            Derived variables are synthesized here when not supplied.
        criteria: Period and thresholds.

    Returns:
        StationAnalysis; `trends` is None when coverage is below threshold.

    Raises:
        InsufficientDataError: if a variable has no data in the period, or
            fewer than two usable years remain for the trend fit.
    """
    station_id = next(iter(series_maps.values())).station_id

    # Step 1: Coverage per required variable
    coverage = {
        var: coverage_fraction(series_maps[var], criteria.start_year, criteria.end_year)
        for var in criteria.variables
    }
    meets_coverage = all(frac >= criteria.min_coverage for frac in coverage.values())
    if not meets_coverage:
        return StationAnalysis(
            station_id=station_id,
            coverage=coverage,
            meets_coverage=False,
            good_years=[],
        )

    # Step 2: Years usable for every required variable
    years = common_good_years(
        (series_maps[var] for var in criteria.variables),
        criteria.max_missing_run,
    )
    if criteria.clip_to_period:
        years = {y for y in years if criteria.start_year <= y <= criteria.end_year}

    # Step 3: Annual means and trends, synthesizing derived series as needed
    trends: dict[Variable, VariableTrend] = {}
    for var in trend_variables(criteria.variables):
        series = series_maps.get(var)
        if series is None:
            first, second = DERIVED_VARIABLES[var]
            series = average_series(series_maps[first], series_maps[second], variable=var)
        means = annual_series(series, years, criteria.unit_system)
        trend = fit_trend([(m.year, m.value) for m in means])
        trends[var] = VariableTrend(series=means, trend=trend)

    return StationAnalysis(
        station_id=station_id,
        coverage=coverage,
        meets_coverage=True,
        good_years=sorted(years),
        trends=StationTrends(station_id=station_id, variables=trends),
    )


def analyze_station(
    context: DatasetContext,
    station_id: str,
    criteria: SelectionCriteria,
) -> StationAnalysis:
    """Load one station's series (through the cache, if configured) and analyze them."""
    series_maps = {
        var: build_series(context.observations_dir, station_id, var, context.cache_dir)
        for var in criteria.variables
    }
    if context.cache_dir is not None:
        # Pull derived series through the cache too so they are persisted
        for var in trend_variables(criteria.variables):
            if var not in series_maps:
                series_maps[var] = build_series(
                    context.observations_dir, station_id, var, context.cache_dir
                )
    return analyze_series(series_maps, criteria)


def _select_station(
    context: DatasetContext,
    station_id: str,
    criteria: SelectionCriteria,
    digests: dict[str, dict[Variable, Optional[str]]],
) -> StationAnalysis:
    # Digest before reading; a file changed mid-run then reads as stale.
    # Each worker writes only its own station key.
    if context.cache_dir is not None:
        digests[station_id] = station_source_digests(
            context.observations_dir, station_id, criteria.variables
        )
    return analyze_station(context, station_id, criteria)


def run_selection(
    context: DatasetContext,
    criteria: Optional[SelectionCriteria] = None,
) -> SelectionResult:
    """
    Select well-covered stations and compute their annual series and trends.

    Each candidate station is analyzed on a worker pool. Any error raised
    while processing a station excludes that station only, and its cause is
    recorded in `failures`. With criteria.fail_fast set, the first
    FormatError aborts the batch instead.
    """
    criteria = criteria or SelectionCriteria()
    candidates = stations_covering_period(context, criteria)
    logger.info(
        "%d stations cover %d-%d for %s",
        len(candidates), criteria.start_year, criteria.end_year,
        ", ".join(v.value for v in criteria.variables),
    )

    coverage: dict[str, dict[Variable, float]] = {}
    good_years: dict[str, list[int]] = {}
    results: dict[str, StationTrends] = {}
    failures: list[StationFailure] = []
    digests: dict[str, dict[Variable, Optional[str]]] = {}

    with ThreadPoolExecutor(max_workers=criteria.max_workers) as executor:
        futures = {
            executor.submit(_select_station, context, sid, criteria, digests): sid
            for sid in candidates
        }
        for future in as_completed(futures):
            station_id = futures[future]
            try:
                analysis = future.result()
            except Exception as e:
                if criteria.fail_fast and isinstance(e, FormatError):
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise
                if isinstance(e, GHCNTrendsError):
                    logger.warning("Excluding station %s: %s", station_id, e)
                else:
                    logger.exception("Unexpected error processing station %s", station_id)
                failures.append(StationFailure(
                    station_id=station_id,
                    error_kind=type(e).__name__,
                    detail=str(e),
                ))
                continue

            coverage[station_id] = analysis.coverage
            if analysis.trends is not None:
                good_years[station_id] = analysis.good_years
                results[station_id] = analysis.trends

    logger.info(
        "Selection complete: %d retained, %d below coverage, %d failed",
        len(results),
        len(coverage) - len(results),
        len(failures),
    )

    result = SelectionResult(
        criteria=criteria,
        candidates=candidates,
        coverage=dict(sorted(coverage.items())),
        good_years=dict(sorted(good_years.items())),
        results=dict(sorted(results.items())),
        failures=sorted(failures, key=lambda f: f.station_id),
        source_digests=dict(sorted(digests.items())),
    )

    if context.cache_dir is not None:
        save_artifact(selection_artifact_path(context.cache_dir, criteria), result)

    return result


def load_selection(context: DatasetContext, criteria: SelectionCriteria) -> SelectionResult:
    """
    Previously saved result of run_selection for the same criteria, provided
    the candidate stations and their raw files are unchanged since it was saved.

    Raises:
        MissingFileError: if no cache is configured, nothing was saved, or the
            saved result is stale.
        FormatError: if the saved artifact cannot be read.
    """
    if context.cache_dir is None:
        raise MissingFileError("No cache directory configured.")
    path = selection_artifact_path(context.cache_dir, criteria)
    result = load_artifact(path, SelectionResult)

    if stations_covering_period(context, criteria) != result.candidates:
        raise MissingFileError(f"Saved selection {path} is stale: candidate stations changed.")

    for station_id in result.candidates:
        current = station_source_digests(context.observations_dir, station_id, criteria.variables)
        if result.source_digests.get(station_id) != current:
            raise MissingFileError(
                f"Saved selection {path} is stale: raw input for {station_id} changed."
            )
    return result
