"""
SSE streaming endpoint for view updates.

WHAT: Server-Sent Events stream of a view's state
WHY: Distances and decision results arrive after the initial response
HOW: EventSourceResponse over a generator watching the view version
"""

import asyncio
import json
import time
from datetime import datetime
from typing import AsyncIterator

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from ....core.config import settings
from ....core.view_manager import view_manager
from ....services.view_presenter import build_request_view
from ....utils.exceptions import ViewNotFoundException
from ....utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _event(event_type: str, **data) -> dict:
    data["type"] = event_type
    data.setdefault("timestamp", datetime.now().isoformat())
    return {"event": event_type, "data": json.dumps(data)}


async def view_event_generator(view_id: str) -> AsyncIterator[dict]:
    """
    Generate SSE events for one view.

    Yields `connected`, then a `view` event whenever the view's version
    changes, `heartbeat` events while idle, and `closed` once the view is
    left or closed.
    """
    try:
        view = view_manager.get_view(view_id)
    except ViewNotFoundException as e:
        logger.warning(f"SSE stream for unknown view {view_id}")
        yield _event("error", error=e.code, message=e.message)
        return

    logger.info(f"Starting SSE stream for view {view_id}")
    yield _event("connected", view_id=view_id)

    last_version = None
    last_heartbeat = time.monotonic()
    try:
        while True:
            controller = view.controller
            if controller.state.version != last_version:
                last_version = controller.state.version
                yield {
                    "event": "view",
                    "data": build_request_view(controller, view_id).model_dump_json()
                }

            if controller.closed or view_id not in view_manager.active_views:
                yield _event("closed", view_id=view_id, redirect_to=controller.state.redirect_to)
                return

            now = time.monotonic()
            if now - last_heartbeat >= settings.SSE_HEARTBEAT_INTERVAL:
                last_heartbeat = now
                yield _event("heartbeat")

            view.touch()
            await asyncio.sleep(settings.SSE_POLL_INTERVAL)
    finally:
        logger.info(f"SSE stream ended for view {view_id}")


@router.get("/views/{view_id}/stream")
async def stream_view(view_id: str):
    """
    Stream view updates via SSE.

    Raises:
        ViewNotFoundException: If the view is not open
    """
    view_manager.get_view(view_id)
    return EventSourceResponse(
        view_event_generator(view_id),
        media_type="text/event-stream"
    )
