"""
Warehouse API client factory with singleton pattern.

WHAT: Shared Request Store and Distance Service clients
WHY: One connection pool per process instead of one per page view
HOW: Lazily created module-level singletons, closable on shutdown
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .warehouse_api import RequestStoreClient, DistanceServiceClient

# Singleton instances
_request_store: "RequestStoreClient | None" = None
_distance_service: "DistanceServiceClient | None" = None


def get_request_store() -> "RequestStoreClient":
    """Get the Request Store client singleton."""
    global _request_store

    if _request_store is None:
        from .warehouse_api import RequestStoreClient
        from ..utils.logger import get_logger

        _request_store = RequestStoreClient()
        get_logger(__name__).info(f"Request Store client initialized: {_request_store.base_url}")

    return _request_store


def get_distance_service() -> "DistanceServiceClient":
    """Get the Distance Service client singleton."""
    global _distance_service

    if _distance_service is None:
        from .warehouse_api import DistanceServiceClient
        from ..utils.logger import get_logger

        _distance_service = DistanceServiceClient()
        get_logger(__name__).info(f"Distance Service client initialized: {_distance_service.base_url}")

    return _distance_service


async def close_clients() -> None:
    """Close open connection pools and forget the singletons."""
    global _request_store, _distance_service

    for client in (_request_store, _distance_service):
        if client is not None:
            await client.close()
    reset_clients()


def reset_clients() -> None:
    """Reset the client singletons (useful for testing)."""
    global _request_store, _distance_service
    _request_store = None
    _distance_service = None
