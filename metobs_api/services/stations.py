"""
Station resolution and station set classification.

This module turns request inputs into the list of stations to query and
partitions the upstream catalog into "core" and "additional" stations.
"""

from typing import Iterable, List, Optional

from metobs_api.clients.base import ObservationSource
from metobs_api.clients.exceptions import UpstreamError
from metobs_api.schemas import Station
from metobs_api.utils.logging_config import get_logger

logger = get_logger(__name__)

SET_ALL = "all"
SET_CORE = "core"
SET_ADDITIONAL = "additional"


def parse_station_ids(raw: Optional[str]) -> List[str]:
    """
    Split a comma-separated station id filter.

    Tokens are trimmed, blanks dropped and duplicates removed, keeping
    first-seen order.

    Example:
        >>> parse_station_ids(" 98210, ,159880,98210 ")
        ['98210', '159880']
    """
    if not raw:
        return []
    ids: List[str] = []
    for token in raw.split(","):
        token = token.strip()
        if token and token not in ids:
            ids.append(token)
    return ids


def classify_stations(
    catalog: List[Station],
    set_name: Optional[str],
    core_ids: Iterable[str],
) -> List[Station]:
    """
    Select a named subset of the catalog by id membership.

    Args:
        catalog: Full station catalog
        set_name: "core", "additional", "all" or blank (case-insensitive)
        core_ids: Identifiers making up the core set

    Returns:
        The matching stations in catalog order. Unknown set names return
        the whole catalog.
    """
    normalized = (set_name or "").strip().lower()
    core = set(core_ids)

    if normalized == SET_CORE:
        return [s for s in catalog if s.id in core]
    if normalized == SET_ADDITIONAL:
        return [s for s in catalog if s.id not in core]
    if normalized not in ("", SET_ALL):
        logger.debug("Unknown station set '%s'; returning full catalog", set_name)
    return list(catalog)


class StationService:
    """
    Resolves stations against the upstream catalog.
    """

    def __init__(
        self,
        source: ObservationSource,
        catalog_parameter_id: int,
        core_ids: Iterable[str],
        degrade_on_error: bool = True,
    ):
        self.source = source
        self.catalog_parameter_id = catalog_parameter_id
        self.core_ids = frozenset(core_ids)
        self.degrade_on_error = degrade_on_error

    async def get_catalog(self) -> List[Station]:
        """
        Fetch the station catalog.

        Returns an empty catalog on upstream failure when degrading,
        otherwise lets the UpstreamError propagate.
        """
        try:
            return await self.source.fetch_catalog(self.catalog_parameter_id)
        except UpstreamError as e:
            if not self.degrade_on_error:
                raise
            logger.warning(
                "Station catalog for parameter %s unavailable, continuing without it: %s",
                self.catalog_parameter_id, e,
            )
            return []

    async def resolve(self, raw_ids: Optional[str]) -> List[Station]:
        """
        Resolve the stations to query for a request.

        Args:
            raw_ids: Comma-separated station ids, or None/blank for all stations

        Returns:
            The full catalog when raw_ids is None or blank. Otherwise one
            station per distinct non-blank id, using catalog metadata when
            the id is known and a placeholder ("Unknown", 0, 0) when it is
            not. A filter made only of separators resolves to no stations.
        """
        if raw_ids is None or not raw_ids.strip():
            return await self.get_catalog()

        requested = parse_station_ids(raw_ids)
        if not requested:
            return []

        catalog = await self.get_catalog()

        by_id = {station.id: station for station in catalog}
        stations = []
        for station_id in requested:
            station = by_id.get(station_id)
            if station is None:
                logger.debug("Station %s not in catalog; using placeholder", station_id)
                station = Station.placeholder(station_id)
            stations.append(station)
        return stations

    async def get_station_set(self, set_name: Optional[str]) -> List[Station]:
        """Return the catalog restricted to the named set."""
        catalog = await self.get_catalog()
        return classify_stations(catalog, set_name, self.core_ids)
