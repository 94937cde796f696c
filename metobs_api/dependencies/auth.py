"""
Authentication dependencies.

This module contains the shared-secret API key check applied to all
protected routes.
"""

import secrets
from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from metobs_api.config import settings

API_KEY_HEADER_NAME = "x-api-key"
INVALID_API_KEY_DETAIL = "invalid api key"

# Define the API key header security scheme for Swagger UI
api_key_header_scheme = APIKeyHeader(
    name=API_KEY_HEADER_NAME,
    scheme_name="ApiKeyAuth",  # Must match the name in OpenAPI schema
    auto_error=False  # Don't auto-raise, we'll handle errors manually
)


def is_valid_api_key(candidate: Optional[str], configured: Optional[str]) -> bool:
    """
    Exact-match comparison of a presented key against the configured key.

    Always False when no key is configured.
    """
    if not configured or candidate is None:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), configured.encode("utf-8"))


async def get_api_key(
    api_key_value: Optional[str] = Security(api_key_header_scheme),
) -> str:
    """
    Validate the x-api-key header.

    Args:
        api_key_value: API key from x-api-key header (extracted by FastAPI)

    Returns:
        The validated API key

    Raises:
        HTTPException: 401 if the key is missing or does not match
    """
    if not is_valid_api_key(api_key_value, settings.API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_API_KEY_DETAIL,
            headers={"WWW-Authenticate": "ApiKey"},
        )
    return api_key_value
