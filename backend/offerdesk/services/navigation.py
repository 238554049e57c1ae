"""
Navigation side effects.

WHAT: Redirect the page after a successful acceptance
WHY: An accepted offer continues in the transit workflow, outside this page
HOW: Navigator protocol; the recording implementation keeps the redirects
     so the view model can hand them to the frontend
"""

from typing import Protocol

from ..utils.logger import get_logger

logger = get_logger(__name__)


class Navigator(Protocol):
    """Anything that can move the user to another route."""

    def navigate(self, route: str) -> None:
        ...


class RecordingNavigator:
    """Navigator that records redirects instead of performing them."""

    def __init__(self):
        self.history: list[str] = []

    def navigate(self, route: str) -> None:
        logger.info(f"Redirecting to {route}")
        self.history.append(route)

    @property
    def last_route(self) -> str | None:
        return self.history[-1] if self.history else None
