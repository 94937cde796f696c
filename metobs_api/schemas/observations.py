"""
Observation schemas.

This module contains Pydantic schemas for upstream series samples, the
merged observation rows returned by the API, and the parsed query inputs.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import Field

from metobs_api.schemas.base import BaseSchema, ValueSchema

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def from_epoch_ms(ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime (no float rounding)."""
    return EPOCH + timedelta(milliseconds=ms)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SeriesPoint(ValueSchema):
    """A single (timestamp, value) sample for one station and parameter."""
    timestamp: datetime
    value: Optional[float] = None


class ObservationRow(ValueSchema):
    """
    Unified observation for one station at one instant.

    Measurement fields are None when the corresponding upstream series did
    not carry the timestamp. They are never filled with zero.
    """
    station_id: str
    station_name: str
    lat: float
    lon: float
    timestamp_utc: datetime
    gust_ms: Optional[float] = Field(None, description="Wind gust in m/s (parameter 21)")
    air_temp_c: Optional[float] = Field(None, description="Air temperature in Celsius (parameter 1)")
    wind_speed_ms: Optional[float] = Field(None, description="Wind speed in m/s (parameter 4)")


class ObservationQuery(BaseSchema):
    """Parsed inputs of an observations request."""
    station_id: Optional[str] = None
    range: Optional[str] = None
    from_: Optional[datetime] = None
    to: Optional[datetime] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    radius_km: Optional[float] = None
