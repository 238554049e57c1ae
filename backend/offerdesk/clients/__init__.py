"""Warehouse API client layer."""

from .types import (
    DistanceReading,
    StoreStatus,
    RequestStoreError,
    RequestStoreTimeoutError,
    RequestStoreUnavailableError,
    RequestStoreRejectedError,
    RequestStoreResponseError,
)
from .protocol import RequestStore, DistanceService
from .client_factory import get_request_store, get_distance_service, close_clients, reset_clients

__all__ = [
    "DistanceReading",
    "StoreStatus",
    "RequestStoreError",
    "RequestStoreTimeoutError",
    "RequestStoreUnavailableError",
    "RequestStoreRejectedError",
    "RequestStoreResponseError",
    "RequestStore",
    "DistanceService",
    "get_request_store",
    "get_distance_service",
    "close_clients",
    "reset_clients",
]
