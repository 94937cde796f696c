"""
Exceptions for upstream MetObs operations.
"""

from typing import Optional


class UpstreamError(Exception):
    """Base exception for failures talking to the upstream observation API."""

    pass


class UpstreamConnectionError(UpstreamError):
    """Transport failure: timeout, refused connection, DNS error."""

    pass


class UpstreamResponseError(UpstreamError):
    """Upstream answered with a non-2xx status or an undecodable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
