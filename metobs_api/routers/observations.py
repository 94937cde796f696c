"""
Observations router.

This module contains the station listing and merged observation endpoints.
"""

from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, Security
from slowapi import Limiter
from slowapi.util import get_remote_address

from metobs_api.config import settings
from metobs_api.dependencies.auth import get_api_key
from metobs_api.dependencies.services import get_observation_service, get_station_service
from metobs_api.schemas import ObservationQuery, ObservationRow, Station
from metobs_api.services.observations import ObservationService
from metobs_api.services.stations import SET_CORE, StationService

router = APIRouter(
    tags=["Observations"],
    dependencies=[Security(get_api_key)],
    responses={
        401: {"description": "Unauthorized"},
        502: {"description": "Upstream observation API failure"},
    },
)

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
RATE_LIMIT = f"{settings.RATE_LIMIT_REQUESTS}/{settings.RATE_LIMIT_WINDOW}seconds"


@router.get("/stations", response_model=List[Station])
@limiter.limit(RATE_LIMIT)
async def get_stations(
    request: Request,
    set_name: Optional[str] = Query(
        SET_CORE,
        alias="set",
        description="Station set: core, additional or all (blank means all)",
    ),
    service: StationService = Depends(get_station_service),
):
    """
    List weather stations from the upstream catalog.

    Unknown set names return the full catalog.
    """
    return await service.get_station_set(set_name)


@router.get("/observations", response_model=List[ObservationRow])
@limiter.limit(RATE_LIMIT)
async def get_observations(
    request: Request,
    station_id: Optional[str] = Query(
        None, alias="stationId", description="Comma-separated station ids (default: all stations)"
    ),
    range_: Optional[str] = Query(
        "last-hour", alias="range", description="last-hour or last-day; anything else is treated as last-hour"
    ),
    from_: Optional[datetime] = Query(None, alias="from", description="Inclusive lower bound (ISO-8601)"),
    to: Optional[datetime] = Query(None, description="Inclusive upper bound (ISO-8601)"),
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Center latitude for radius filter"),
    lon: Optional[float] = Query(None, ge=-180, le=180, description="Center longitude for radius filter"),
    radius_km: Optional[float] = Query(None, alias="radiusKm", description="Radius in km around lat/lon"),
    service: ObservationService = Depends(get_observation_service),
):
    """
    Merged air temperature, wind speed and wind gust observations.

    Rows are sorted newest first, with ties ordered by station id.
    Measurements missing upstream are returned as null.
    """
    query = ObservationQuery(
        station_id=station_id,
        range=range_,
        from_=from_,
        to=to,
        lat=lat,
        lon=lon,
        radius_km=radius_km,
    )
    return await service.get_merged_observations(query)
