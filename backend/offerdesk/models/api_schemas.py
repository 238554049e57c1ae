"""
Pydantic API schemas for the view endpoints.

WHAT: Request and response models for FastAPI
WHY: Type-safe validation and serialization matching the frontend
HOW: Pydantic v2 models with constraints
"""

from pydantic import BaseModel, Field

from .view import DecisionOutcomeKind, OfferAction, RequestView


class OpenViewRequest(BaseModel):
    """Open the detail page of one item request."""
    request_id: str = Field(..., min_length=1, max_length=100, description="Item request ID")


class DecisionResponse(BaseModel):
    """Outcome of an accept/reject click plus the refreshed view."""
    offer_id: str
    action: OfferAction
    outcome: DecisionOutcomeKind
    message: str | None = None
    redirect_to: str | None = None
    view: RequestView


class CloseViewResponse(BaseModel):
    """Acknowledgement of a closed view."""
    view_id: str
    closed: bool = True
