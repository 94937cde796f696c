# Pydantic schemas package

from metobs_api.schemas.base import BaseSchema, ValueSchema
from metobs_api.schemas.stations import Station, UNKNOWN_STATION_NAME
from metobs_api.schemas.observations import (
    SeriesPoint, ObservationRow, ObservationQuery,
    from_epoch_ms, ensure_utc,
)

__all__ = [
    # Base schemas
    "BaseSchema", "ValueSchema",

    # Station schemas
    "Station", "UNKNOWN_STATION_NAME",

    # Observation schemas
    "SeriesPoint", "ObservationRow", "ObservationQuery",
    "from_epoch_ms", "ensure_utc",
]
