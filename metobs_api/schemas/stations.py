"""
Station schemas.
"""

from pydantic import Field

from metobs_api.schemas.base import ValueSchema

UNKNOWN_STATION_NAME = "Unknown"


class Station(ValueSchema):
    """A weather observation station as listed by the upstream catalog."""
    id: str = Field(..., min_length=1, description="Upstream station identifier")
    name: str = Field(..., description="Display name")
    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")

    @classmethod
    def placeholder(cls, station_id: str) -> "Station":
        """Station for an id the catalog does not know about."""
        return cls(id=station_id, name=UNKNOWN_STATION_NAME, lat=0.0, lon=0.0)
