"""Capability protocol for upstream observation sources."""

from typing import List, Protocol

from metobs_api.schemas import SeriesPoint, Station


class ObservationSource(Protocol):
    """Anything that can serve parameter series and station catalogs."""

    async def fetch_series(
        self, station_id: str, parameter_id: int, range_: str
    ) -> List[SeriesPoint]:
        """Fetch one parameter series for a station over a range."""
        ...

    async def fetch_catalog(self, parameter_id: int) -> List[Station]:
        """Fetch the station catalog published for a parameter."""
        ...
