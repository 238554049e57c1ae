"""
Page-view state and view models.

WHAT: In-memory state of one request detail view and its serializable projection
WHY: The controller mutates state; callers only ever see the projection
HOW: Dataclasses for controller state, pydantic models for the view model
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field

from .request import ItemRequest, OfferStatus


# ========== Distance state ==========

@dataclass(frozen=True)
class DistanceNotFetched:
    """Distances for this view have not arrived yet."""


@dataclass(frozen=True)
class DistanceFetched:
    """Distance lookup finished. meters is None when no distance is known."""
    meters: float | None = None


DistanceState = Union[DistanceNotFetched, DistanceFetched]

NOT_FETCHED = DistanceNotFetched()


# ========== Decisions ==========

class OfferAction(str, Enum):
    """What the decision-maker wants to do with an offer."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"

    @property
    def target_status(self) -> OfferStatus:
        if self is OfferAction.ACCEPT:
            return OfferStatus.ACCEPTED
        return OfferStatus.REJECTED


DecisionKey = tuple[str, OfferAction]

DecisionOutcomeKind = Literal[
    "accepted",       # store updated, navigated to transit
    "rejected",       # store updated, local offer patched
    "failed",         # store or transport failure, nothing changed
    "suppressed",     # same offer+action already in flight
    "not_permitted",  # precondition or authorization check failed
    "discarded",      # view reloaded or left while in flight
]


class DecisionOutcome(BaseModel):
    """Result of one decide() call."""

    offer_id: str
    action: OfferAction
    outcome: DecisionOutcomeKind
    message: str | None = None
    redirect_to: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in ("accepted", "rejected")


# ========== Controller state ==========

ViewStatus = Literal["idle", "loading", "loaded", "not_found", "error", "left"]
DistanceFetchStatus = Literal["not_requested", "pending", "settled"]


@dataclass
class RequestViewState:
    """Mutable state owned by one OfferDecisionController."""

    request_id: str | None = None
    status: ViewStatus = "idle"
    request: ItemRequest | None = None
    error: str | None = None
    toast: str | None = None
    distance_status: DistanceFetchStatus = "not_requested"
    distances: dict[str, float | None] = field(default_factory=dict)
    in_progress: set[DecisionKey] = field(default_factory=set)
    redirect_to: str | None = None
    version: int = 0

    def touch(self) -> None:
        """Mark the state as changed."""
        self.version += 1

    def distance_for(self, offer_id: str) -> DistanceState:
        if self.distance_status != "settled":
            return NOT_FETCHED
        return DistanceFetched(meters=self.distances.get(offer_id))


# ========== View models ==========

class DistanceView(BaseModel):
    """How an offer's distance is shown."""

    state: Literal["loading", "unavailable", "available"]
    text: str
    distance_km: int | None = None
    category: str | None = None
    label: str | None = None


class OfferView(BaseModel):
    """One offer row."""

    id: str
    vendor_name: str
    quantity: int
    status: OfferStatus
    distance: DistanceView | None = None
    can_decide: bool = False
    accept_in_progress: bool = False
    reject_in_progress: bool = False
    accept_label: str = "Accept"
    reject_label: str = "Reject"


class RequestView(BaseModel):
    """Everything the request detail page needs to render."""

    view_id: str | None = None
    request_id: str | None = None
    status: ViewStatus
    message: str | None = None
    item_name: str | None = None
    quantity: int | None = None
    warehouse_name: str | None = None
    requested_by: str | None = None
    offers: list[OfferView] = Field(default_factory=list)
    no_offers_message: str | None = None
    error: str | None = None
    toast: str | None = None
    redirect_to: str | None = None
    version: int = 0
