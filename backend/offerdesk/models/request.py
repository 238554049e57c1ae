"""
Item request domain models.

WHAT: Item requests and the vendor offers made against them
WHY: Consistent typing between the Request Store client, controller and views
HOW: Pydantic v2 models reading the store's camelCase JSON by alias
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OfferStatus(str, Enum):
    """Offer lifecycle. PENDING is the only non-terminal state."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self is not OfferStatus.PENDING


class StoreModel(BaseModel):
    """Base for records owned by the Request Store."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class NamedRef(StoreModel):
    """Embedded reference to a vendor, warehouse or employee."""

    id: str | None = None
    name: str | None = None


class Offer(StoreModel):
    """A vendor's proposal to fulfill an item request."""

    id: str
    vendor_id: str | None = None
    vendor: NamedRef | None = None
    quantity: int = Field(ge=1)
    status: OfferStatus = OfferStatus.PENDING

    @property
    def vendor_name(self) -> str:
        if self.vendor and self.vendor.name:
            return self.vendor.name
        return "Unknown"

    @property
    def is_pending(self) -> bool:
        return self.status is OfferStatus.PENDING


class ItemRequest(StoreModel):
    """An inventory request raised by a warehouse, with its offers in arrival order."""

    id: str
    item_name: str
    quantity: int
    warehouse_id: str
    warehouse: NamedRef | None = None
    employee: NamedRef | None = None
    offers: list[Offer] = Field(default_factory=list)

    def get_offer(self, offer_id: str) -> Offer | None:
        return next((offer for offer in self.offers if offer.id == offer_id), None)
