"""
Service dependencies.

Provides the shared upstream client and the request-scoped services to
route handlers. Tests swap the source out via app.dependency_overrides.
"""

from typing import Optional

from fastapi import Depends

from metobs_api.clients.base import ObservationSource
from metobs_api.clients.smhi import SMHIClient
from metobs_api.config import settings
from metobs_api.services.observations import ObservationService
from metobs_api.services.stations import StationService

_smhi_client: Optional[SMHIClient] = None


def get_observation_source() -> ObservationSource:
    """Return the process-wide SMHI client, creating it on first use."""
    global _smhi_client
    if _smhi_client is None:
        _smhi_client = SMHIClient(
            base_url=settings.SMHI_BASE_URL,
            response_timeout=settings.SMHI_RESPONSE_TIMEOUT,
            connect_timeout=settings.SMHI_CONNECT_TIMEOUT,
        )
    return _smhi_client


async def close_observation_source() -> None:
    """Close the shared SMHI client if one was created."""
    global _smhi_client
    if _smhi_client is not None:
        await _smhi_client.close()
        _smhi_client = None


def get_station_service(
    source: ObservationSource = Depends(get_observation_source),
) -> StationService:
    return StationService(
        source,
        catalog_parameter_id=settings.CATALOG_PARAMETER_ID,
        core_ids=settings.CORE_STATION_IDS,
        degrade_on_error=settings.DEGRADE_ON_UPSTREAM_ERROR,
    )


def get_observation_service(
    source: ObservationSource = Depends(get_observation_source),
    stations: StationService = Depends(get_station_service),
) -> ObservationService:
    return ObservationService(
        source,
        stations,
        degrade_on_error=settings.DEGRADE_ON_UPSTREAM_ERROR,
        max_concurrent_stations=settings.MAX_CONCURRENT_STATIONS,
    )
