"""
Request detail view endpoints.

WHAT: Open, read, reload and close request views; accept/reject offers
WHY: The frontend drives the offer decision workflow through these calls
HOW: FastAPI router over the view manager and decision controllers
"""

from fastapi import APIRouter, Request

from ....core.identity import HeaderIdentityProvider
from ....core.view_manager import view_manager
from ....models.api_schemas import CloseViewResponse, DecisionResponse, OpenViewRequest
from ....models.view import OfferAction, RequestView
from ....services.view_presenter import build_request_view
from ....utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/views", response_model=RequestView)
async def open_view(body: OpenViewRequest, request: Request):
    """
    Open the detail page of an item request.

    WHAT: Create a view for the caller and load the request
    WHY: Entry point of the page
    HOW: Identity from headers, controller.load(), view model back

    Distances for employees arrive later; poll GET /views/{id} or
    subscribe to /views/{id}/stream.
    """
    identity = HeaderIdentityProvider(request.headers).current()
    view = view_manager.open_view(identity)
    await view.controller.load(body.request_id)
    return build_request_view(view.controller, view.view_id)


@router.get("/views/{view_id}", response_model=RequestView)
async def get_view(view_id: str):
    """Current state of an open view."""
    view = view_manager.get_view(view_id)
    return build_request_view(view.controller, view.view_id)


@router.post("/views/{view_id}/reload", response_model=RequestView)
async def reload_view(view_id: str):
    """Reload the request from the store, discarding the local copy."""
    view = view_manager.get_view(view_id)
    if view.controller.state.request_id is not None:
        await view.controller.load(view.controller.state.request_id)
    return build_request_view(view.controller, view.view_id)


async def _decide(view_id: str, offer_id: str, action: OfferAction) -> DecisionResponse:
    view = view_manager.get_view(view_id)
    outcome = await view.controller.decide(offer_id, action)
    logger.info(f"View {view_id}: {action.value} offer {offer_id} -> {outcome.outcome}")
    return DecisionResponse(
        offer_id=outcome.offer_id,
        action=outcome.action,
        outcome=outcome.outcome,
        message=outcome.message,
        redirect_to=outcome.redirect_to,
        view=build_request_view(view.controller, view.view_id)
    )


@router.post("/views/{view_id}/offers/{offer_id}/accept", response_model=DecisionResponse)
async def accept_offer(view_id: str, offer_id: str):
    """Accept an offer; on success the response carries the transit redirect."""
    return await _decide(view_id, offer_id, OfferAction.ACCEPT)


@router.post("/views/{view_id}/offers/{offer_id}/reject", response_model=DecisionResponse)
async def reject_offer(view_id: str, offer_id: str):
    """Reject an offer; on success the offer shows as REJECTED."""
    return await _decide(view_id, offer_id, OfferAction.REJECT)


@router.delete("/views/{view_id}", response_model=CloseViewResponse)
async def close_view(view_id: str):
    """Close a view; results still in flight are dropped."""
    view_manager.close_view(view_id)
    return CloseViewResponse(view_id=view_id)
