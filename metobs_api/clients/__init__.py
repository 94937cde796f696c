# Upstream API clients package

from metobs_api.clients.base import ObservationSource
from metobs_api.clients.exceptions import (
    UpstreamError, UpstreamConnectionError, UpstreamResponseError
)
from metobs_api.clients.smhi import (
    SMHIClient,
    PARAM_AIR_TEMPERATURE, PARAM_WIND_SPEED, PARAM_WIND_GUST,
    RANGE_LAST_HOUR, RANGE_LAST_DAY,
    normalize_range, parse_series, parse_catalog,
)

__all__ = [
    "ObservationSource",
    "UpstreamError", "UpstreamConnectionError", "UpstreamResponseError",
    "SMHIClient",
    "PARAM_AIR_TEMPERATURE", "PARAM_WIND_SPEED", "PARAM_WIND_GUST",
    "RANGE_LAST_HOUR", "RANGE_LAST_DAY",
    "normalize_range", "parse_series", "parse_catalog",
]
