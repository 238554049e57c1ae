"""
View model presenter.

WHAT: Project controller state into the request detail view model
WHY: Keep display wording (loading, not found, distance text) in one place
HOW: Pure functions over RequestViewState and DistanceState
"""

from ..models.view import (
    DistanceFetched,
    DistanceState,
    DistanceView,
    OfferAction,
    OfferView,
    RequestView,
)
from .distance_classifier import classify
from .offer_decisions import OfferDecisionController
from ..utils.logger import get_logger

logger = get_logger(__name__)

LOADING_REQUEST_MESSAGE = "Loading request..."
REQUEST_NOT_FOUND_MESSAGE = "Request not found."
NO_OFFERS_MESSAGE = "No offers yet."
LOADING_DISTANCE_TEXT = "Loading distance..."
DISTANCE_UNAVAILABLE_TEXT = "Distance unavailable"


def describe_distance(state: DistanceState) -> DistanceView:
    """Loading, unavailable, or a classified distance."""
    if not isinstance(state, DistanceFetched):
        return DistanceView(state="loading", text=LOADING_DISTANCE_TEXT)
    if state.meters is None:
        return DistanceView(state="unavailable", text=DISTANCE_UNAVAILABLE_TEXT)

    try:
        proximity = classify(state.meters)
    except ValueError as e:
        logger.warning(f"Showing distance as unavailable: {e}")
        return DistanceView(state="unavailable", text=DISTANCE_UNAVAILABLE_TEXT)

    return DistanceView(
        state="available",
        text=proximity.display,
        distance_km=proximity.distance_km,
        category=proximity.category.value,
        label=proximity.label
    )


def build_request_view(controller: OfferDecisionController, view_id: str | None = None) -> RequestView:
    """Build the full view model for the controller's current state."""
    state = controller.state
    view = RequestView(
        view_id=view_id,
        request_id=state.request_id,
        status=state.status,
        error=state.error,
        toast=state.toast,
        redirect_to=state.redirect_to,
        version=state.version
    )

    if state.status in ("idle", "loading"):
        view.message = LOADING_REQUEST_MESSAGE
        return view
    if state.status == "not_found":
        view.message = REQUEST_NOT_FOUND_MESSAGE
        return view

    request = state.request
    if request is None:
        return view

    view.item_name = request.item_name
    view.quantity = request.quantity
    view.warehouse_name = request.warehouse.name if request.warehouse else None
    view.requested_by = request.employee.name if request.employee else None

    user = controller.identity.user
    show_distance = user is not None and user.is_employee

    for offer in request.offers:
        accepting = controller.is_in_progress(offer.id, OfferAction.ACCEPT)
        rejecting = controller.is_in_progress(offer.id, OfferAction.REJECT)
        view.offers.append(OfferView(
            id=offer.id,
            vendor_name=offer.vendor_name,
            quantity=offer.quantity,
            status=offer.status,
            distance=describe_distance(state.distance_for(offer.id)) if show_distance else None,
            can_decide=controller.can_decide_offer(offer.id),
            accept_in_progress=accepting,
            reject_in_progress=rejecting,
            accept_label="Accepting..." if accepting else "Accept",
            reject_label="Rejecting..." if rejecting else "Reject"
        ))

    if not view.offers:
        view.no_offers_message = NO_OFFERS_MESSAGE
    return view
