"""
Offer decision controller.

WHAT: Load one item request and accept or reject its offers
WHY: The only stateful logic of the request detail page lives here
HOW: Async controller over the Request Store and Distance Service protocols;
     every expected failure becomes view state, never an exception

The authorization check below mirrors what the page shows. It is not a
security boundary: the Request Store re-validates every status change.
"""

import asyncio
from typing import Iterable

from ..clients.protocol import DistanceService, RequestStore
from ..clients.types import RequestStoreError, RequestStoreRejectedError
from ..core.config import settings
from ..core.identity import IdentityProvider
from ..models.identity import ActingUser, IdentityContext
from ..models.request import ItemRequest, Offer, OfferStatus
from ..models.view import DecisionOutcome, OfferAction, RequestViewState
from ..utils.exceptions import OfferTransitionError
from ..utils.logger import get_logger
from .navigation import Navigator

logger = get_logger(__name__)

GENERIC_LOAD_ERROR = "Failed to fetch item requests"
GENERIC_DECISION_ERROR = "Failed to update offer"
NOT_PERMITTED_MESSAGE = "You are not allowed to decide on this offer"
OFFER_NOT_FOUND_MESSAGE = "Offer not found in this request"
VIEW_CLOSED_MESSAGE = "This view has been closed"


def can_decide(user: ActingUser | None, request: ItemRequest, offer: Offer) -> bool:
    """
    Whether the acting user may accept or reject this offer.

    Requires an employee of the request's warehouse and a PENDING offer.
    """
    if user is None or not user.is_employee:
        return False
    if user.warehouse_id is None or user.warehouse_id != request.warehouse_id:
        return False
    return offer.is_pending


def find_request(requests: Iterable[ItemRequest], request_id: str) -> ItemRequest | None:
    """Linear search by id; the store offers no lookup by id."""
    return next((request for request in requests if request.id == request_id), None)


def apply_offer_status(offers: list[Offer], offer_id: str, status: OfferStatus) -> list[Offer]:
    """
    Return a copy of offers with one PENDING offer moved to status.

    Order and every other offer are kept as they are.

    Raises:
        OfferTransitionError: offer missing or already decided
    """
    patched = []
    found = False
    for offer in offers:
        if offer.id == offer_id:
            if not offer.is_pending:
                raise OfferTransitionError(offer_id, offer.status.value, status.value)
            offer = offer.model_copy(update={"status": status})
            found = True
        patched.append(offer)

    if not found:
        raise OfferTransitionError(offer_id, None, status.value)
    return patched


class OfferDecisionController:
    """
    State holder for one request detail view.

    Each load() starts a new generation. Results of requests started under
    an older generation, or after the view was left, are dropped so they
    never touch the state of a newer view.
    """

    def __init__(
        self,
        store: RequestStore,
        distances: DistanceService,
        navigator: Navigator,
        identity: IdentityProvider,
        *,
        transit_route: str | None = None,
        reload_after_decision: bool | None = None
    ):
        self._store = store
        self._distances = distances
        self._navigator = navigator
        self._identity = identity
        self._transit_route = transit_route or settings.TRANSIT_ROUTE
        self._reload_after_decision = (
            settings.RELOAD_AFTER_DECISION if reload_after_decision is None else reload_after_decision
        )

        self.state = RequestViewState()
        self._generation = 0
        self._closed = False
        self._distance_task: asyncio.Task | None = None

    @property
    def identity(self) -> IdentityContext:
        return self._identity.current()

    @property
    def closed(self) -> bool:
        return self._closed

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    # ========== Loading ==========

    async def load(self, request_id: str) -> RequestViewState:
        """
        Load the request and, for employees, its offer distances.

        The distance fetch runs in the background after the request itself
        has loaded; use wait_for_distances() to await it.
        """
        if self._closed:
            logger.info(f"Ignoring load of {request_id}: view closed")
            return self.state

        self._generation += 1
        generation = self._generation
        self._cancel_distance_task()
        self.state = RequestViewState(
            request_id=request_id,
            status="loading",
            # PATCHes still in flight keep suppressing duplicates after a reload
            in_progress=self.state.in_progress,
            version=self.state.version + 1
        )
        state = self.state
        identity = self.identity

        try:
            requests = await self._store.list_item_requests(token=identity.token)
        except RequestStoreError as e:
            if not self._is_current(generation):
                return self.state
            message = GENERIC_LOAD_ERROR
            if isinstance(e, RequestStoreRejectedError) and e.server_message:
                message = e.server_message
            logger.warning(f"Failed to load request {request_id}: {e.message}")
            state.status = "error"
            state.error = message
            state.touch()
            return state

        if not self._is_current(generation):
            logger.info(f"Discarding stale load result for request {request_id}")
            return self.state

        request = find_request(requests, request_id)
        if request is None:
            logger.info(f"Request {request_id} not found among {len(requests)} requests")
            state.status = "not_found"
            state.touch()
            return state

        state.request = request
        state.status = "loaded"
        if identity.user is not None and identity.user.is_employee:
            state.distance_status = "pending"
            self._distance_task = asyncio.create_task(
                self._load_distances(request_id, generation, identity.token)
            )
        state.touch()
        logger.debug(f"Loaded request {request_id} with {len(request.offers)} offers")
        return state

    async def _load_distances(self, request_id: str, generation: int, token: str | None) -> None:
        """Fetch distances; any failure leaves every offer 'unavailable'."""
        readings = []
        try:
            readings = await self._distances.get_offer_distances(request_id, token=token)
        except RequestStoreError as e:
            logger.warning(f"Failed to fetch offer distances for request {request_id}: {e.message}")
        except Exception as e:
            logger.error(f"Unexpected error fetching offer distances for request {request_id}: {e}", exc_info=True)

        if not self._is_current(generation):
            logger.debug(f"Discarding stale distances for request {request_id}")
            return

        self.state.distances = {reading.offer_id: reading.meters for reading in readings}
        self.state.distance_status = "settled"
        self.state.touch()

    async def wait_for_distances(self) -> None:
        """Wait until the background distance fetch, if any, has finished."""
        task = self._distance_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    def _cancel_distance_task(self) -> None:
        if self._distance_task is not None and not self._distance_task.done():
            self._distance_task.cancel()
        self._distance_task = None

    # ========== Decisions ==========

    def is_in_progress(self, offer_id: str, action: OfferAction) -> bool:
        return (offer_id, OfferAction(action)) in self.state.in_progress

    def can_decide_offer(self, offer_id: str) -> bool:
        request = self.state.request
        if self._closed or request is None:
            return False
        offer = request.get_offer(offer_id)
        return offer is not None and can_decide(self.identity.user, request, offer)

    async def decide(self, offer_id: str, action: OfferAction) -> DecisionOutcome:
        """
        Accept or reject one offer.

        ACCEPT navigates to the transit route on success and leaves the view
        without touching local state. REJECT patches the local offer to
        REJECTED. Failures set a toast and change nothing else.
        """
        action = OfferAction(action)
        key = (offer_id, action)

        if key in self.state.in_progress:
            logger.info(f"Suppressing duplicate {action.value} for offer {offer_id}")
            return DecisionOutcome(offer_id=offer_id, action=action, outcome="suppressed")

        if self._closed:
            return DecisionOutcome(
                offer_id=offer_id, action=action, outcome="not_permitted", message=VIEW_CLOSED_MESSAGE
            )

        identity = self.identity
        request = self.state.request
        offer = request.get_offer(offer_id) if request is not None else None
        if request is None or offer is None:
            return self._refuse(offer_id, action, OFFER_NOT_FOUND_MESSAGE)
        if not offer.is_pending:
            return self._refuse(offer_id, action, f"Offer is already {offer.status.value}")
        if not can_decide(identity.user, request, offer):
            return self._refuse(offer_id, action, NOT_PERMITTED_MESSAGE)

        generation = self._generation
        state = self.state
        state.in_progress.add(key)
        state.error = None
        state.toast = None
        state.touch()

        try:
            await self._store.update_offer_status(offer_id, action.target_status, token=identity.token)
        except RequestStoreRejectedError as e:
            return self._fail(generation, offer_id, action, e.server_message or GENERIC_DECISION_ERROR, e)
        except RequestStoreError as e:
            return self._fail(generation, offer_id, action, GENERIC_DECISION_ERROR, e)
        finally:
            state.in_progress.discard(key)
            if not self._closed:
                self.state.touch()

        if not self._is_current(generation):
            logger.info(f"Discarding {action.value} result for offer {offer_id}: view changed")
            return DecisionOutcome(offer_id=offer_id, action=action, outcome="discarded")

        if action is OfferAction.ACCEPT:
            self._navigator.navigate(self._transit_route)
            state.redirect_to = self._transit_route
            self._leave()
            return DecisionOutcome(
                offer_id=offer_id, action=action, outcome="accepted", redirect_to=self._transit_route
            )

        try:
            state.request = state.request.model_copy(
                update={"offers": apply_offer_status(state.request.offers, offer_id, OfferStatus.REJECTED)}
            )
        except OfferTransitionError as e:
            logger.warning(f"Local copy out of date after rejecting offer {offer_id}: {e.message}")
        state.touch()

        if self._reload_after_decision:
            await self.load(state.request_id)

        return DecisionOutcome(offer_id=offer_id, action=action, outcome="rejected")

    def _refuse(self, offer_id: str, action: OfferAction, message: str) -> DecisionOutcome:
        logger.info(f"Refusing {action.value} for offer {offer_id}: {message}")
        self.state.toast = message
        self.state.touch()
        return DecisionOutcome(offer_id=offer_id, action=action, outcome="not_permitted", message=message)

    def _fail(
        self,
        generation: int,
        offer_id: str,
        action: OfferAction,
        message: str,
        error: RequestStoreError
    ) -> DecisionOutcome:
        logger.warning(f"{action.value} for offer {offer_id} failed: {error.message}")
        if not self._is_current(generation):
            return DecisionOutcome(offer_id=offer_id, action=action, outcome="discarded", message=message)

        self.state.toast = message
        self.state.error = message
        self.state.touch()
        return DecisionOutcome(offer_id=offer_id, action=action, outcome="failed", message=message)

    # ========== Lifecycle ==========

    def _leave(self) -> None:
        self._closed = True
        self._generation += 1
        self._cancel_distance_task()
        self.state.status = "left"
        self.state.touch()

    def close(self) -> None:
        """Navigate away: pending results are dropped from now on."""
        if self._closed:
            return
        logger.info(f"Closing view of request {self.state.request_id}")
        self._leave()
