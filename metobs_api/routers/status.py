"""
Status router.

This module contains the authenticated API status endpoint.
"""

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from metobs_api.config import settings
from metobs_api.dependencies.auth import get_api_key

router = APIRouter(
    prefix="/status",
    tags=["status"],
    responses={
        401: {"description": "Unauthorized"},
    },
)

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@router.get("", response_model=dict)
@limiter.limit("60/minute")
async def get_status(
    request: Request,
    api_key: str = Depends(get_api_key)
):
    """
    Get API status.

    Requires valid API key authentication.

    Rate limit: 60 requests per minute

    Returns:
        dict: Status information
    """
    return {
        "status": "ok",
        "authenticated": True,
        "version": settings.VERSION,
        "upstream": settings.SMHI_BASE_URL,
        "degrade_on_upstream_error": settings.DEGRADE_ON_UPSTREAM_ERROR,
    }
