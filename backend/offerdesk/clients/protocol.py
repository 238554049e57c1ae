"""
Warehouse API protocol definitions.

WHAT: Abstract interfaces for the Request Store and Distance Service
WHY: Decouple the decision controller from the HTTP implementation
HOW: Use Protocol to define the async methods the controller calls
"""

from typing import Protocol

from .types import DistanceReading, StoreStatus
from ..models.request import ItemRequest, OfferStatus


class RequestStore(Protocol):
    """System of record for item requests and offers."""

    async def ping(self) -> StoreStatus:
        """Check store availability."""
        ...

    async def list_item_requests(self, *, token: str | None) -> list[ItemRequest]:
        """Fetch every item request with its offers."""
        ...

    async def update_offer_status(
        self,
        offer_id: str,
        status: OfferStatus,
        *,
        token: str | None
    ) -> dict:
        """Ask the store to move an offer to a terminal status."""
        ...


class DistanceService(Protocol):
    """Source of precomputed vendor-to-warehouse distances."""

    async def get_offer_distances(
        self,
        request_id: str,
        *,
        token: str | None
    ) -> list[DistanceReading]:
        """Fetch distances for all offers of a request."""
        ...
