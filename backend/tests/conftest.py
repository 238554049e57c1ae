"""
Pytest configuration and shared fixtures for backend tests.

WHAT: Markers, singleton resets, in-memory fakes and sample data
WHY: Keep tests isolated from each other and from a real warehouse API
HOW: Fakes implement the RequestStore / DistanceService protocols
"""

import asyncio
import copy

import pytest

from offerdesk.clients.client_factory import reset_clients
from offerdesk.clients.types import DistanceReading, RequestStoreRejectedError, StoreStatus
from offerdesk.core.identity import StaticIdentityProvider
from offerdesk.core.view_manager import view_manager
from offerdesk.models.identity import ActingUser, EmployeeProfile, IdentityContext, Role
from offerdesk.models.request import ItemRequest, OfferStatus
from offerdesk.services.navigation import RecordingNavigator
from offerdesk.services.offer_decisions import OfferDecisionController


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (isolated component tests)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (multiple components)"
    )


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset client singletons and open views around each test.

    WHAT: Clear cached clients and the global view cache
    WHY: Prevent test pollution across event loops
    HOW: reset_clients() and clear active_views before and after
    """
    reset_clients()
    view_manager.active_views.clear()
    yield
    reset_clients()
    view_manager.active_views.clear()


# ========== Sample data (Request Store wire format) ==========

SAMPLE_REQUESTS = [
    {
        "id": "r1",
        "itemName": "Pallet wrap",
        "quantity": 40,
        "warehouseId": "w1",
        "warehouse": {"id": "w1", "name": "North Hub"},
        "employee": {"id": "e1", "name": "Dana Reyes"},
        "offers": []
    },
    {
        "id": "r2",
        "itemName": "Forklift battery",
        "quantity": 4,
        "warehouseId": "w1",
        "warehouse": {"id": "w1", "name": "North Hub"},
        "employee": {"id": "e1", "name": "Dana Reyes"},
        "createdAt": "2026-10-01T09:00:00Z",
        "offers": [
            {"id": "o1", "vendorId": "v1", "vendor": {"id": "v1", "name": "Acme Supply"}, "quantity": 2, "status": "PENDING"},
            {"id": "o2", "vendorId": "v2", "vendor": {"id": "v2", "name": "Bolt & Co"}, "quantity": 4, "status": "PENDING"},
            {"id": "o3", "vendorId": "v3", "quantity": 1, "status": "REJECTED"},
        ]
    },
]

SAMPLE_DISTANCES = [
    DistanceReading(offer_id="o1", meters=45000.0),
    DistanceReading(offer_id="o2", meters=None),
]


@pytest.fixture
def sample_requests():
    """Fresh copy of the sample store contents."""
    return copy.deepcopy(SAMPLE_REQUESTS)


# ========== Identities ==========

def employee_identity(warehouse_id: str = "w1", token: str | None = "tok-123") -> IdentityContext:
    return IdentityContext(
        user=ActingUser(id="u1", role=Role.EMPLOYEE, employee=EmployeeProfile(warehouse_id=warehouse_id)),
        token=token
    )


@pytest.fixture
def employee():
    """Employee of warehouse w1 (owner of the sample requests)."""
    return employee_identity()


@pytest.fixture
def other_employee():
    """Employee of another warehouse."""
    return employee_identity("w2")


@pytest.fixture
def vendor():
    return IdentityContext(user=ActingUser(id="v1", role=Role.VENDOR), token="tok-vendor")


# ========== Fakes ==========

class FakeRequestStore:
    """
    In-memory Request Store.

    Holds wire-format dicts, enforces the terminal-status rule like the
    real store, and can hold calls open with asyncio events.
    """

    def __init__(self, requests: list[dict]):
        self.requests = requests
        self.list_calls = 0
        self.status_calls: list[tuple[str, OfferStatus, str | None]] = []
        self.tokens: list[str | None] = []
        self.list_error: Exception | None = None
        self.status_error: Exception | None = None
        self.list_gate: asyncio.Event | None = None
        self.status_gate: asyncio.Event | None = None

    async def ping(self) -> StoreStatus:
        return StoreStatus(available=True, base_url="memory://")

    async def list_item_requests(self, *, token):
        self.list_calls += 1
        self.tokens.append(token)
        if self.list_gate is not None:
            await self.list_gate.wait()
        if self.list_error is not None:
            raise self.list_error
        return [ItemRequest.model_validate(request) for request in self.requests]

    async def update_offer_status(self, offer_id, status, *, token):
        self.status_calls.append((offer_id, status, token))
        if self.status_gate is not None:
            await self.status_gate.wait()
        if self.status_error is not None:
            raise self.status_error

        for request in self.requests:
            for offer in request["offers"]:
                if offer["id"] == offer_id:
                    if offer["status"] != "PENDING":
                        raise RequestStoreRejectedError(409, "Offer already decided")
                    offer["status"] = status.value
                    return {"id": offer_id, "status": status.value}
        raise RequestStoreRejectedError(404, "Offer not found")


class FakeDistanceService:
    """In-memory Distance Service."""

    def __init__(self, readings: list[DistanceReading] | None = None):
        self.readings = list(readings or [])
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def get_offer_distances(self, request_id, *, token):
        self.calls.append(request_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.readings)


@pytest.fixture
def store(sample_requests):
    return FakeRequestStore(sample_requests)


@pytest.fixture
def distances():
    return FakeDistanceService(SAMPLE_DISTANCES)


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def make_controller(store, distances, navigator, employee):
    """
    Build a controller wired to the fakes.

    Keyword arguments override the identity or controller options.
    """
    def factory(identity: IdentityContext | None = None, **options) -> OfferDecisionController:
        return OfferDecisionController(
            store=store,
            distances=distances,
            navigator=navigator,
            identity=StaticIdentityProvider(identity if identity is not None else employee),
            transit_route=options.pop("transit_route", "/transit"),
            reload_after_decision=options.pop("reload_after_decision", False),
        )

    return factory
