"""
Status and health check endpoints.

WHAT: Health monitoring for the warehouse API
WHY: Quick diagnostics for frontend and ops
HOW: FastAPI endpoints calling the Request Store ping
"""

from fastapi import APIRouter

from ....clients.client_factory import get_request_store
from ....core.config import settings
from ....core.view_manager import view_manager
from ....utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/store/status")
async def store_status():
    """
    Check Request Store reachability.

    Returns:
        JSON with availability, base URL and error (if any)
    """
    status = await get_request_store().ping()
    return {
        "available": status.available,
        "base_url": status.base_url,
        "error": status.error
    }


@router.get("/health")
async def health_check():
    """
    Overall application health check.

    Returns:
        JSON with app metadata, store reachability and open view count
    """
    status = await get_request_store().ping()
    if not status.available:
        logger.warning(f"Health check: Request Store unavailable ({status.error})")

    return {
        "status": "healthy" if status.available else "degraded",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "request_store": status.available,
        "open_views": len(view_manager.active_views)
    }
