"""
Unit tests for the view manager.

WHAT: Test opening, looking up, closing and expiring views
WHY: Views hold decision state between HTTP calls
HOW: ViewManager with fake client factories
"""

from datetime import datetime, timedelta

import pytest

from offerdesk.core.view_manager import ViewManager
from offerdesk.utils.exceptions import ViewNotFoundException


@pytest.fixture
def manager(store, distances):
    return ViewManager(store_factory=lambda: store, distance_factory=lambda: distances)


@pytest.mark.unit
class TestViewManager:

    def test_open_and_get(self, manager, employee):
        view = manager.open_view(employee)

        assert manager.get_view(view.view_id) is view
        assert view.controller.identity == employee

    def test_unknown_view_raises(self, manager):
        with pytest.raises(ViewNotFoundException) as exc_info:
            manager.get_view("missing")
        assert exc_info.value.code == "VIEW_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_close_view_closes_controller(self, manager, employee):
        view = manager.open_view(employee)
        await view.controller.load("r2")

        manager.close_view(view.view_id)

        assert view.controller.closed
        assert view.controller.state.status == "left"
        with pytest.raises(ViewNotFoundException):
            manager.get_view(view.view_id)
        with pytest.raises(ViewNotFoundException):
            manager.close_view(view.view_id)

    def test_cleanup_idle_views(self, manager, employee):
        stale = manager.open_view(employee)
        fresh = manager.open_view(employee)
        stale.last_access = datetime.utcnow() - timedelta(days=1)

        removed = manager.cleanup_idle_views()

        assert removed == 1
        assert stale.controller.closed
        assert manager.get_view(fresh.view_id) is fresh

    def test_shutdown_closes_everything(self, manager, employee):
        views = [manager.open_view(employee) for _ in range(3)]

        manager.shutdown()

        assert manager.active_views == {}
        assert all(view.controller.closed for view in views)
