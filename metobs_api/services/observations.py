"""
Observation merging, filtering and ordering.

For every resolved station three parameter series (air temperature, wind
speed, wind gust) are fetched and aligned by timestamp into sparse rows.
Rows from all stations are then filtered by time window and distance and
sorted newest first.
"""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

from metobs_api.clients.base import ObservationSource
from metobs_api.clients.exceptions import UpstreamError
from metobs_api.clients.smhi import (
    PARAM_AIR_TEMPERATURE,
    PARAM_WIND_GUST,
    PARAM_WIND_SPEED,
    normalize_range,
)
from metobs_api.schemas import ObservationQuery, ObservationRow, SeriesPoint, Station, ensure_utc
from metobs_api.services.stations import StationService
from metobs_api.utils.geo import haversine_km
from metobs_api.utils.logging_config import get_logger

logger = get_logger(__name__)


def series_to_map(points: Optional[List[SeriesPoint]]) -> Dict[datetime, Optional[float]]:
    """Index a series by timestamp; a repeated timestamp keeps the last value."""
    return {point.timestamp: point.value for point in points or []}


def merge_series(
    station: Station,
    temperature: Optional[List[SeriesPoint]],
    wind_speed: Optional[List[SeriesPoint]],
    gust: Optional[List[SeriesPoint]],
) -> List[ObservationRow]:
    """
    Merge the three parameter series of one station into rows.

    One row is produced for each timestamp present in at least one series,
    in ascending time order. A measurement is None when its series has no
    sample at that timestamp.
    """
    temp_by_ts = series_to_map(temperature)
    wind_by_ts = series_to_map(wind_speed)
    gust_by_ts = series_to_map(gust)

    timestamps = sorted(set(temp_by_ts) | set(wind_by_ts) | set(gust_by_ts))

    return [
        ObservationRow(
            station_id=station.id,
            station_name=station.name,
            lat=station.lat,
            lon=station.lon,
            timestamp_utc=ts,
            gust_ms=gust_by_ts.get(ts),
            air_temp_c=temp_by_ts.get(ts),
            wind_speed_ms=wind_by_ts.get(ts),
        )
        for ts in timestamps
    ]


def filter_rows(
    rows: List[ObservationRow],
    from_: Optional[datetime] = None,
    to: Optional[datetime] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    radius_km: Optional[float] = None,
) -> List[ObservationRow]:
    """
    Apply the time window and the radius filter.

    Both time bounds are inclusive. The radius filter only applies when
    lat, lon and a positive radius_km are all given.
    """
    from_ = ensure_utc(from_)
    to = ensure_utc(to)
    geo_active = lat is not None and lon is not None and radius_km is not None and radius_km > 0

    def keep(row: ObservationRow) -> bool:
        if from_ is not None and row.timestamp_utc < from_:
            return False
        if to is not None and row.timestamp_utc > to:
            return False
        if geo_active and haversine_km(lat, lon, row.lat, row.lon) > radius_km:
            return False
        return True

    return [row for row in rows if keep(row)]


def sort_rows(rows: List[ObservationRow]) -> List[ObservationRow]:
    """Newest first; rows sharing a timestamp are ordered by station id."""
    # Two stable passes: secondary key first, then primary key.
    by_station = sorted(rows, key=lambda row: row.station_id)
    return sorted(by_station, key=lambda row: row.timestamp_utc, reverse=True)


class ObservationService:
    """
    Builds the merged observation result set for a request.
    """

    def __init__(
        self,
        source: ObservationSource,
        stations: StationService,
        degrade_on_error: bool = True,
        max_concurrent_stations: int = 8,
    ):
        self.source = source
        self.stations = stations
        self.degrade_on_error = degrade_on_error
        self.max_concurrent_stations = max(1, max_concurrent_stations)

    async def _fetch_series(
        self, station: Station, parameter_id: int, range_: str
    ) -> List[SeriesPoint]:
        try:
            return await self.source.fetch_series(station.id, parameter_id, range_)
        except UpstreamError as e:
            if not self.degrade_on_error:
                raise
            logger.warning(
                "Series %s for station %s unavailable, treating as empty: %s",
                parameter_id, station.id, e,
            )
            return []

    async def get_station_rows(self, station: Station, range_: Optional[str]) -> List[ObservationRow]:
        """
        Fetch and merge the three parameter series for one station.

        Args:
            station: Station to fetch
            range_: Requested range, normalized to "last-hour" or "last-day"

        Returns:
            Merged rows in ascending timestamp order
        """
        effective_range = normalize_range(range_)
        temperature, wind_speed, gust = await asyncio.gather(
            self._fetch_series(station, PARAM_AIR_TEMPERATURE, effective_range),
            self._fetch_series(station, PARAM_WIND_SPEED, effective_range),
            self._fetch_series(station, PARAM_WIND_GUST, effective_range),
        )
        return merge_series(station, temperature, wind_speed, gust)

    async def get_merged_observations(self, query: ObservationQuery) -> List[ObservationRow]:
        """
        Resolve stations, merge their series, then filter and sort.

        Args:
            query: Parsed request parameters

        Returns:
            Filtered rows, newest first, ties broken by station id

        Raises:
            UpstreamError: Only when degradation is disabled
        """
        stations = await self.stations.resolve(query.station_id)
        effective_range = normalize_range(query.range)
        semaphore = asyncio.Semaphore(self.max_concurrent_stations)

        async def rows_for(station: Station) -> List[ObservationRow]:
            async with semaphore:
                return await self.get_station_rows(station, effective_range)

        per_station = await asyncio.gather(*(rows_for(s) for s in stations))
        merged = [row for rows in per_station for row in rows]

        filtered = filter_rows(
            merged,
            from_=query.from_,
            to=query.to,
            lat=query.lat,
            lon=query.lon,
            radius_km=query.radius_km,
        )
        logger.info(
            "Merged %d rows from %d stations (%s), %d after filtering",
            len(merged), len(stations), effective_range, len(filtered),
        )
        return sort_rows(filtered)
