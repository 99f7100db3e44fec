"""
API routes for station selection, trend computation and export.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from ghcn_trends.api.dependencies import get_dataset_context
from ghcn_trends.engine.export import (
    build_export,
    build_station_index,
    export_paths,
    write_json_export,
)
from ghcn_trends.engine.selector import run_selection
from ghcn_trends.models.export import ExportRecord, StationIndexEntry
from ghcn_trends.models.selection import DatasetContext, SelectionCriteria, SelectionResult

router = APIRouter(prefix="/api/v1", tags=["trends"])


def _export_paths(context: DatasetContext) -> dict[str, str]:
    if context.exports_dir is None:
        raise HTTPException(status_code=400, detail="No export directory configured.")
    return export_paths(context.exports_dir)


@router.post("/trends/select", response_model=SelectionResult)
def select_stations(
    body: SelectionCriteria,
    context: DatasetContext = Depends(get_dataset_context),
):
    """
    Select stations with well-covered records over the target period and
    compute annual series and trends for each.
    """
    try:
        return run_selection(context, body)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/trends/export", response_model=list[ExportRecord])
def export_trends(
    body: SelectionCriteria,
    write: bool = Query(False, description="Also write the export file to the data directory"),
    context: DatasetContext = Depends(get_dataset_context),
):
    """Run a selection and return export records with station location and name."""
    paths = _export_paths(context) if write else None
    try:
        result = run_selection(context, body)
        records = build_export(context, result.results)
        if paths is not None:
            write_json_export(paths["trends"], records)
        return records
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/exports/station-index", response_model=list[StationIndexEntry])
def station_index(
    write: bool = Query(False, description="Also write the index file to the data directory"),
    context: DatasetContext = Depends(get_dataset_context),
):
    """Id, display name and location of every US station."""
    paths = _export_paths(context) if write else None
    try:
        entries = build_station_index(context)
        if paths is not None:
            write_json_export(paths["station_index"], entries)
        return entries
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
