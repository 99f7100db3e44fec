"""
API routes for station metadata lookup and search.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from ghcn_trends.api.dependencies import get_dataset_context
from ghcn_trends.engine.exceptions import FormatError
from ghcn_trends.engine.stations import search_stations, station_display_name, station_latlon
from ghcn_trends.models.selection import DatasetContext
from ghcn_trends.models.station import StationDetail, StationSearchResult

router = APIRouter(prefix="/api/v1", tags=["stations"])


@router.get("/stations/search", response_model=list[StationSearchResult])
def search_station_listing(
    q: str = Query("", description="Search query (station id, name or state)"),
    limit: int = Query(20, ge=1, le=100),
    us_only: bool = Query(False),
    context: DatasetContext = Depends(get_dataset_context),
):
    """Search the station listing."""
    results = []
    for station in search_stations(context.stations, q, limit=limit, us_only=us_only):
        try:
            lat, lon = station_latlon(station)
        except FormatError as e:
            raise HTTPException(status_code=422, detail=str(e))
        results.append(StationSearchResult(
            id=station.id,
            name=station.name,
            state=station.state,
            latitude=lat,
            longitude=lon,
        ))
    return results


@router.get("/stations/{station_id}", response_model=StationDetail)
def get_station(
    station_id: str,
    context: DatasetContext = Depends(get_dataset_context),
):
    """Station metadata with its period-of-record summary."""
    station = context.stations.get(station_id)
    if station is None:
        raise HTTPException(status_code=404, detail=f"Station '{station_id}' not found.")

    try:
        lat, lon = station_latlon(station)
    except FormatError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return StationDetail(
        station=station,
        display_name=station_display_name(station),
        latitude=lat,
        longitude=lon,
        period_of_record=context.period_of_record.get(station_id, {}),
    )
