# Business logic package

from metobs_api.services.stations import (
    StationService, parse_station_ids, classify_stations,
    SET_ALL, SET_CORE, SET_ADDITIONAL,
)
from metobs_api.services.observations import (
    ObservationService, merge_series, filter_rows, sort_rows, series_to_map,
)

__all__ = [
    "StationService", "parse_station_ids", "classify_stations",
    "SET_ALL", "SET_CORE", "SET_ADDITIONAL",
    "ObservationService", "merge_series", "filter_rows", "sort_rows", "series_to_map",
]
