"""
SMHI MetObs open data HTTP client.

This module fetches parameter series and station catalogs from the SMHI
meteorological observations API and parses them into schema objects.
"""

import math
from typing import Any, List, Optional

import httpx

from metobs_api.clients.exceptions import UpstreamConnectionError, UpstreamResponseError
from metobs_api.config import settings
from metobs_api.schemas import SeriesPoint, Station, UNKNOWN_STATION_NAME, from_epoch_ms
from metobs_api.utils.logging_config import get_logger

logger = get_logger(__name__)

# SMHI parameter identifiers
PARAM_AIR_TEMPERATURE = 1
PARAM_WIND_SPEED = 4
PARAM_WIND_GUST = 21

RANGE_LAST_HOUR = "last-hour"
RANGE_LAST_DAY = "last-day"

# Public range name -> SMHI period path segment
PERIOD_BY_RANGE = {
    RANGE_LAST_HOUR: "latest-hour",
    RANGE_LAST_DAY: "latest-day",
}


def normalize_range(range_: Optional[str]) -> str:
    """
    Normalize a requested range.

    Only "last-hour" and "last-day" are recognised. Anything else, including
    None or blank, falls back to "last-hour".
    """
    candidate = (range_ or "").strip()
    return candidate if candidate in PERIOD_BY_RANGE else RANGE_LAST_HOUR


def _coerce_float(value: Any) -> Optional[float]:
    """Return value as a finite float, or None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _coerce_epoch_ms(value: Any) -> Optional[int]:
    """Return an epoch-millisecond timestamp as int, or None."""
    number = _coerce_float(value)
    if number is None:
        return None
    return int(number)


def _coerce_station_id(value: Any) -> Optional[str]:
    """Station ids arrive as numbers or strings; normalise to a non-empty string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


def parse_series(payload: Any) -> List[SeriesPoint]:
    """
    Parse a data.json payload into series points.

    Expected shape: {"value": [{"date": <epoch-ms>, "value": <number|string|null>}, ...]}.
    SMHI serialises measurements as decimal strings. A point without a usable
    date is dropped; a non-numeric value becomes None.

    Args:
        payload: Decoded JSON body

    Returns:
        Series points in upstream order (possibly empty)
    """
    if not isinstance(payload, dict):
        return []
    values = payload.get("value")
    if not isinstance(values, list):
        return []

    points: List[SeriesPoint] = []
    for item in values:
        if not isinstance(item, dict):
            continue
        epoch_ms = _coerce_epoch_ms(item.get("date"))
        if epoch_ms is None:
            continue
        points.append(
            SeriesPoint(
                timestamp=from_epoch_ms(epoch_ms),
                value=_coerce_float(item.get("value")),
            )
        )
    return points


def _parse_station(entry: Any) -> Optional[Station]:
    """Parse one catalog entry, returning None if it has no identifier."""
    if not isinstance(entry, dict):
        return None

    station_id = _coerce_station_id(entry.get("id"))
    if station_id is None:
        return None

    raw_name = entry.get("name")
    if raw_name is None:
        raw_name = entry.get("name_en")
    name = str(raw_name) if raw_name is not None else UNKNOWN_STATION_NAME

    lat = _coerce_float(entry.get("latitude"))
    lon = _coerce_float(entry.get("longitude"))

    return Station(
        id=station_id,
        name=name,
        lat=lat if lat is not None else 0.0,
        lon=lon if lon is not None else 0.0,
    )


def parse_catalog(payload: Any) -> List[Station]:
    """
    Parse a parameter catalog payload into stations.

    Station entries are looked up under "station", then "stations", and as a
    last resort in every array-valued field of the root object. Entries
    without an id are skipped, and the first occurrence of a duplicate id
    wins. A payload with no recognizable array yields an empty list.

    Args:
        payload: Decoded JSON body

    Returns:
        Stations in upstream order
    """
    if not isinstance(payload, dict):
        return []

    entries = payload.get("station")
    if not isinstance(entries, list):
        entries = payload.get("stations")
    if not isinstance(entries, list):
        entries = [
            entry
            for value in payload.values()
            if isinstance(value, list)
            for entry in value
        ]

    stations: List[Station] = []
    seen: set = set()
    for entry in entries:
        station = _parse_station(entry)
        if station is None or station.id in seen:
            continue
        seen.add(station.id)
        stations.append(station)
    return stations


class SMHIClient:
    """
    Async HTTP client for the SMHI MetObs API.

    Implements the ObservationSource protocol. Failures are raised as
    UpstreamError subclasses; deciding whether to degrade is left to callers.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        response_timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize SMHI client.

        Args:
            base_url: API root, e.g. https://opendata-download-metobs.smhi.se/api/version/1.0
            response_timeout: Seconds to wait for a response
            connect_timeout: Seconds to wait for a connection
            http_client: Optional custom HTTP client for testing
        """
        self.base_url = (base_url or settings.SMHI_BASE_URL).rstrip("/")
        self.response_timeout = response_timeout or settings.SMHI_RESPONSE_TIMEOUT
        self.connect_timeout = connect_timeout or settings.SMHI_CONNECT_TIMEOUT
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-initialize HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.response_timeout, connect=self.connect_timeout),
                follow_redirects=True,
                headers={"Accept": "application/json", "Accept-Encoding": "gzip"},
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _get(self, url: str) -> httpx.Response:
        try:
            return await self.http_client.get(url)
        except httpx.TransportError as e:
            raise UpstreamConnectionError(f"Request to {url} failed: {e!r}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamResponseError(
                f"Upstream returned {response.status_code} for {response.request.url}",
                status_code=response.status_code,
            ) from e

    def series_url(self, station_id: str, parameter_id: int, range_: str) -> str:
        period = PERIOD_BY_RANGE[normalize_range(range_)]
        return (
            f"{self.base_url}/parameter/{parameter_id}"
            f"/station/{station_id}/period/{period}/data.json"
        )

    def catalog_url(self, parameter_id: int) -> str:
        return f"{self.base_url}/parameter/{parameter_id}.json"

    async def fetch_series(
        self, station_id: str, parameter_id: int, range_: str
    ) -> List[SeriesPoint]:
        """
        Fetch one parameter series for a station.

        A 404 means the station does not report this parameter and yields an
        empty series.

        Args:
            station_id: SMHI station id
            parameter_id: SMHI parameter id (1, 4, 21, ...)
            range_: "last-hour" or "last-day"

        Returns:
            Series points (possibly empty)

        Raises:
            UpstreamConnectionError: On timeout or transport failure
            UpstreamResponseError: On non-2xx (other than 404) or invalid JSON
        """
        url = self.series_url(station_id, parameter_id, range_)
        response = await self._get(url)

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.debug("No data for station %s parameter %s (404)", station_id, parameter_id)
            return []
        self._raise_for_status(response)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamResponseError(f"Invalid JSON from {url}") from e

        points = parse_series(payload)
        logger.debug(
            "Fetched %d points for station %s parameter %s", len(points), station_id, parameter_id
        )
        return points

    async def fetch_catalog(self, parameter_id: int) -> List[Station]:
        """
        Fetch the station catalog for a parameter.

        An unparseable body yields an empty catalog.

        Raises:
            UpstreamConnectionError: On timeout or transport failure
            UpstreamResponseError: On non-2xx responses
        """
        url = self.catalog_url(parameter_id)
        response = await self._get(url)
        self._raise_for_status(response)

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Catalog for parameter %s is not valid JSON; treating as empty", parameter_id)
            return []

        stations = parse_catalog(payload)
        logger.info("Loaded %d stations for parameter %s", len(stations), parameter_id)
        return stations
