"""
API routes for analyzing uploaded daily observation files.
"""

from fastapi import APIRouter, HTTPException, UploadFile, File, Query

from ghcn_trends.config import (
    UnitSystem,
    Variable,
    DEFAULT_START_YEAR,
    DEFAULT_END_YEAR,
    DEFAULT_MIN_COVERAGE,
    DEFAULT_MAX_MISSING_RUN,
)
from ghcn_trends.engine.completeness import longest_missing_run_map
from ghcn_trends.engine.observations import build_series_map, decode_observation_bytes
from ghcn_trends.engine.selector import analyze_series
from ghcn_trends.models.selection import ObservationAnalysisOutput, SelectionCriteria

router = APIRouter(prefix="/api/v1", tags=["observations"])

ALLOWED_EXTENSIONS = (".csv", ".csv.gz", ".gz")


async def _read_upload(file: UploadFile) -> bytes:
    filename = (file.filename or "").lower()
    if not any(filename.endswith(ext) for ext in ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail="Observation files must be .csv or .csv.gz files.",
        )
    try:
        return await file.read()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not read file: {e}")


@router.post("/observations/analyze", response_model=ObservationAnalysisOutput)
async def analyze_observation_files(
    tmax_file: UploadFile = File(...),
    tmin_file: UploadFile = File(...),
    station_id: str = Query("UPLOAD"),
    start_year: int = Query(DEFAULT_START_YEAR),
    end_year: int = Query(DEFAULT_END_YEAR),
    min_coverage: float = Query(DEFAULT_MIN_COVERAGE, ge=0.0, le=1.0),
    max_missing_run: int = Query(DEFAULT_MAX_MISSING_RUN, ge=0),
    unit_system: UnitSystem = Query(UnitSystem.IP),
):
    """
    Upload one station's TMAX and TMIN `date,value` files and get coverage,
    missing-run statistics, usable years, and annual series with trends for
    TMAX, TMIN and TAVG.
    """
    uploads = {
        Variable.TMAX: await _read_upload(tmax_file),
        Variable.TMIN: await _read_upload(tmin_file),
    }

    try:
        criteria = SelectionCriteria(
            start_year=start_year,
            end_year=end_year,
            min_coverage=min_coverage,
            max_missing_run=max_missing_run,
            unit_system=unit_system,
        )
        series_maps = {
            var: build_series_map(decode_observation_bytes(content), station_id, var)
            for var, content in uploads.items()
        }
        analysis = analyze_series(series_maps, criteria)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ObservationAnalysisOutput(
        start_year=start_year,
        end_year=end_year,
        unit_system=unit_system,
        longest_missing_runs={
            var: longest_missing_run_map(series) for var, series in series_maps.items()
        },
        analysis=analysis,
    )
