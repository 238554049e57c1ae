"""
View manager for open request detail pages.

WHAT: Lifecycle of page views, one decision controller each
WHY: In-progress markers and loaded offers must survive between HTTP calls
HOW: In-memory cache keyed by view id, idle-timeout cleanup loop
"""

import asyncio
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict
from uuid import uuid4

from .config import settings
from .identity import StaticIdentityProvider
from ..clients.client_factory import get_distance_service, get_request_store
from ..clients.protocol import DistanceService, RequestStore
from ..models.identity import IdentityContext
from ..services.navigation import RecordingNavigator
from ..services.offer_decisions import OfferDecisionController
from ..utils.exceptions import ViewNotFoundException
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OpenView:
    """A page view and the controller behind it."""
    view_id: str
    controller: OfferDecisionController
    navigator: RecordingNavigator
    opened_at: datetime = field(default_factory=datetime.utcnow)
    last_access: datetime = field(default_factory=datetime.utcnow)

    def touch(self) -> None:
        self.last_access = datetime.utcnow()


class ViewManager:
    """
    Manage open views.

    WHAT: Create, look up, close and expire page views
    WHY: Each browser tab gets its own controller state
    HOW: Dict cache guarded by a lock; a background loop evicts idle views
    """

    def __init__(
        self,
        store_factory: Callable[[], RequestStore] = get_request_store,
        distance_factory: Callable[[], DistanceService] = get_distance_service
    ):
        """Initialize view manager with an empty cache."""
        self.active_views: Dict[str, OpenView] = {}
        self._cache_lock = threading.Lock()
        self._store_factory = store_factory
        self._distance_factory = distance_factory
        self._cleanup_task: asyncio.Task | None = None

    def open_view(self, identity: IdentityContext) -> OpenView:
        """
        Create a view for the given identity.

        Args:
            identity: Acting user and token as known when the page opened

        Returns:
            OpenView with a fresh controller (nothing loaded yet)
        """
        navigator = RecordingNavigator()
        controller = OfferDecisionController(
            store=self._store_factory(),
            distances=self._distance_factory(),
            navigator=navigator,
            identity=StaticIdentityProvider(identity)
        )
        view = OpenView(view_id=str(uuid4()), controller=controller, navigator=navigator)

        with self._cache_lock:
            self.active_views[view.view_id] = view

        user = identity.user
        logger.info(f"Opened view {view.view_id} for user {user.id if user else 'anonymous'}")
        return view

    def get_view(self, view_id: str) -> OpenView:
        """
        Retrieve an open view.

        Raises:
            ViewNotFoundException: view never opened, closed or expired
        """
        with self._cache_lock:
            view = self.active_views.get(view_id)
        if view is None:
            raise ViewNotFoundException(view_id)
        view.touch()
        return view

    def close_view(self, view_id: str) -> OpenView:
        """
        Close a view (the user navigated away).

        Raises:
            ViewNotFoundException: view not open
        """
        with self._cache_lock:
            view = self.active_views.pop(view_id, None)
        if view is None:
            raise ViewNotFoundException(view_id)

        view.controller.close()
        logger.info(f"Closed view {view_id}")
        return view

    def cleanup_idle_views(self, now: datetime | None = None) -> int:
        """
        Close views idle for longer than VIEW_IDLE_TIMEOUT_MINUTES.

        Returns:
            Number of views closed
        """
        cutoff = (now or datetime.utcnow()) - timedelta(minutes=settings.VIEW_IDLE_TIMEOUT_MINUTES)

        with self._cache_lock:
            idle = [view_id for view_id, view in self.active_views.items() if view.last_access < cutoff]
            expired = [self.active_views.pop(view_id) for view_id in idle]

        for view in expired:
            view.controller.close()
            logger.info(f"Cleaned up idle view: {view.view_id}")

        if expired:
            logger.info(f"Removed {len(expired)} idle views")
        return len(expired)

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(settings.VIEW_CLEANUP_INTERVAL_SECONDS)
            self.cleanup_idle_views()

    def start_cleanup(self) -> None:
        """Start the periodic idle-view cleanup on the running event loop."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info(f"Started view cleanup loop (interval: {settings.VIEW_CLEANUP_INTERVAL_SECONDS}s)")

    def shutdown(self) -> None:
        """Stop the cleanup loop and close every open view."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            self._cleanup_task = None

        with self._cache_lock:
            views = list(self.active_views.values())
            self.active_views.clear()

        for view in views:
            view.controller.close()
        logger.info(f"View manager shut down ({len(views)} views closed)")


# Global view manager instance
view_manager = ViewManager()
