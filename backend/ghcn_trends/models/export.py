"""
Pydantic models for the final per-station export.
"""

from typing import Optional

from pydantic import BaseModel


class ExportSeries(BaseModel):
    """Annual series as [year, value] pairs plus [intercept, slope]."""
    data: list[tuple[int, float]]
    trend: tuple[float, float]


class ExportRecord(BaseModel):
    """One station in the export file."""
    id: str
    name: str
    latitude: Optional[float]
    longitude: Optional[float]
    variables: dict[str, ExportSeries]  # keyed by lower-case variable name


class StationIndexEntry(BaseModel):
    """Location entry for the station index export."""
    id: str
    name: str
    latitude: Optional[float]
    longitude: Optional[float]
