"""
Final export of per-station trends and the station index.

Combines selection results with station metadata into records suitable for
JSON interchange.
"""

import json
import logging
import os

from ghcn_trends.engine.stations import in_us, station_display_name, station_latlon
from ghcn_trends.models.export import ExportRecord, ExportSeries, StationIndexEntry
from ghcn_trends.models.selection import DatasetContext
from ghcn_trends.models.series import StationTrends
from ghcn_trends.models.station import StationMeta

logger = logging.getLogger(__name__)

TRENDS_EXPORT_FILENAME = "stations-data-trend-map.json"
STATION_INDEX_FILENAME = "us-station-map.json"


def build_export_record(station: StationMeta, trends: StationTrends) -> ExportRecord:
    """Attach location and display name to one station's trends."""
    lat, lon = station_latlon(station)
    return ExportRecord(
        id=station.id,
        name=station_display_name(station),
        latitude=lat,
        longitude=lon,
        variables={
            var.value.lower(): ExportSeries(
                data=[(m.year, m.value) for m in vt.series],
                trend=(vt.trend.intercept, vt.trend.slope),
            )
            for var, vt in trends.variables.items()
        },
    )


def build_export(
    context: DatasetContext,
    results: dict[str, StationTrends],
) -> list[ExportRecord]:
    """Export records for every station with results, sorted by id."""
    records = []
    for station_id in sorted(results):
        station = context.stations.get(station_id)
        if station is None:
            logger.warning("No metadata for station %s; skipping export", station_id)
            continue
        records.append(build_export_record(station, results[station_id]))
    return records


def build_station_index(context: DatasetContext) -> list[StationIndexEntry]:
    """Id, display name and location of every US station."""
    entries = []
    for station_id in sorted(context.stations):
        station = context.stations[station_id]
        if not in_us(station):
            continue
        lat, lon = station_latlon(station)
        entries.append(StationIndexEntry(
            id=station.id,
            name=station_display_name(station),
            latitude=lat,
            longitude=lon,
        ))
    return entries


def write_json_export(path: str, records: list) -> str:
    """Serialize a list of pydantic models to a JSON array file."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([r.model_dump(mode="json") for r in records], f)
    logger.info("Wrote %d records to %s", len(records), path)
    return path


def export_paths(exports_dir: str) -> dict[str, str]:
    """Export file locations within an exports directory."""
    return {
        "trends": os.path.join(exports_dir, TRENDS_EXPORT_FILENAME),
        "station_index": os.path.join(exports_dir, STATION_INDEX_FILENAME),
    }
