"""
Pydantic models for station metadata and period-of-record summaries.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StationMeta(BaseModel):
    """One line of ghcnd-stations.txt. Blank fields are None."""
    id: str
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    elevation: Optional[str] = None
    state: Optional[str] = None
    name: Optional[str] = None
    gsn_flag: Optional[str] = None
    hcn_crn_flag: Optional[str] = None
    wmo_id: Optional[str] = None


class PeriodOfRecord(BaseModel):
    """First and last observation dates (YYYYMMDD) for one station/variable."""
    model_config = ConfigDict(populate_by_name=True)

    first: str = Field(alias="min")
    last: str = Field(alias="max")
    state: Optional[int] = None  # opaque upstream status code, passed through


class StationSearchResult(BaseModel):
    """Abbreviated station info for search results."""
    id: str
    name: Optional[str]
    state: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]


class StationDetail(BaseModel):
    """Station metadata with its period-of-record summary."""
    station: StationMeta
    display_name: str
    latitude: Optional[float]
    longitude: Optional[float]
    period_of_record: dict[str, PeriodOfRecord]
