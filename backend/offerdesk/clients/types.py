"""
Warehouse API client types and exceptions.

WHAT: Shared result types and errors for the Request Store and Distance Service
WHY: Callers handle one exception family regardless of which endpoint failed
HOW: Dataclass for distance readings, exception classes by failure kind
"""

from dataclasses import dataclass


@dataclass
class DistanceReading:
    """Vendor-to-warehouse distance for one offer."""
    offer_id: str
    meters: float | None = None


@dataclass
class StoreStatus:
    """Health status of the Request Store."""
    available: bool
    base_url: str
    error: str | None = None


class RequestStoreError(Exception):
    """Base class for warehouse API failures."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RequestStoreTimeoutError(RequestStoreError):
    """Request to the warehouse API timed out."""
    pass


class RequestStoreUnavailableError(RequestStoreError):
    """Warehouse API is not reachable."""
    pass


class RequestStoreRejectedError(RequestStoreError):
    """
    Warehouse API answered with a non-success status.

    server_message is the payload's `error` field, or None when the body
    carried none.
    """

    def __init__(self, status_code: int, server_message: str | None = None):
        super().__init__(server_message or f"HTTP {status_code}", status_code=status_code)
        self.server_message = server_message


class RequestStoreResponseError(RequestStoreError):
    """Warehouse API returned a body that could not be parsed."""
    pass
