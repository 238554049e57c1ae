"""
Custom business exceptions for the API endpoints.

WHAT: Domain-specific exceptions that map to HTTP status codes
WHY: Consistent error handling across all API endpoints
HOW: Custom exception classes with error codes and messages
"""

from typing import Optional, Any


class BusinessException(Exception):
    """Base class for business logic exceptions."""

    def __init__(self, message: str, code: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


class ViewNotFoundException(BusinessException):
    """Raised when a page view is not open (never opened, closed or evicted)."""

    def __init__(self, view_id: str):
        super().__init__(
            message=f"View not found: {view_id}",
            code="VIEW_NOT_FOUND",
            details={"view_id": view_id}
        )


class OfferTransitionError(BusinessException):
    """Raised when an offer status change is not a valid lifecycle transition."""

    def __init__(self, offer_id: str, current_status: str | None, target_status: str):
        if current_status is None:
            message = f"Offer {offer_id} is not part of this request"
        else:
            message = f"Cannot move offer {offer_id} from {current_status} to {target_status}"
        super().__init__(
            message=message,
            code="INVALID_OFFER_TRANSITION",
            details={
                "offer_id": offer_id,
                "current_status": current_status,
                "target_status": target_status
            }
        )
