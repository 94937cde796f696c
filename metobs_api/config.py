"""
Application configuration using Pydantic settings.

This module contains all configuration settings for the application,
loaded from environment variables with sensible defaults.
"""

import json
from typing import List, Optional, Union

from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


def _split_csv(v: Union[str, List[str], None]) -> List[str]:
    """Parse a comma-separated string (or an already parsed list) into a list."""
    if v is None or v == "":
        return []
    if isinstance(v, str):
        if v.lstrip().startswith("["):
            return [str(i).strip() for i in json.loads(v) if str(i).strip()]
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list):
        return [str(i).strip() for i in v if str(i).strip()]
    elif isinstance(v, (int, float)) and not isinstance(v, bool):
        # A single numeric id arrives JSON-decoded from the environment
        return [str(v)]
    raise ValueError(f"Invalid list format: {v}")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden with environment variables.
    """

    # API Configuration
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "SMHI Weather Observations API"
    VERSION: str = "1.0.0"

    # Shared secret expected in the x-api-key header. When unset every
    # protected request is rejected.
    API_KEY: Optional[str] = None

    # Server Configuration
    DEBUG: bool = False

    # CORS Configuration
    # Note: Using Union[str, List] to avoid pydantic-settings 2.6+ JSON parsing issues
    BACKEND_CORS_ORIGINS: Union[str, List[str]] = "http://localhost:3000,http://localhost:8080,http://localhost:5173"

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(
        cls, v: Union[str, List[str]]
    ) -> List[str]:
        """
        Parse CORS origins from environment variable.

        Supports:
        - Comma-separated string: "http://localhost,http://example.com"
        - Already parsed list: ["http://localhost"]
        - Empty string: returns empty list
        """
        return _split_csv(v)

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW: int = 60  # seconds

    # Upstream SMHI MetObs API
    SMHI_BASE_URL: str = "https://opendata-download-metobs.smhi.se/api/version/1.0"
    SMHI_RESPONSE_TIMEOUT: float = 15.0  # seconds
    SMHI_CONNECT_TIMEOUT: float = 5.0  # seconds

    # Parameter whose catalog is treated as the authoritative station list
    CATALOG_PARAMETER_ID: int = 1

    # Station ids forming the "core" set; everything else is "additional"
    CORE_STATION_IDS: Union[str, List[str]] = (
        "159880,98210,97400,71420,52350,53430,62040,64020,"
        "74460,86340,105370,127310,134110,162860,180940,188790"
    )

    @field_validator("CORE_STATION_IDS", mode="before")
    @classmethod
    def assemble_core_station_ids(
        cls, v: Union[str, List[str]]
    ) -> List[str]:
        """Parse the core station allowlist (comma-separated or JSON list)."""
        return _split_csv(v)

    MAX_CONCURRENT_STATIONS: int = 8

    # When True an upstream failure counts as "no data" for that series or
    # catalog; when False it fails the request with 502.
    DEGRADE_ON_UPSTREAM_ERROR: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create global settings instance
settings = Settings()
