"""
Unit tests for the exception handlers.

WHAT: Test status codes and bodies produced by the central handlers
WHY: The frontend branches on status code and `error` code
HOW: Call the handlers directly and decode the JSONResponse
"""

import json

import pytest

from offerdesk.clients.types import (
    RequestStoreRejectedError,
    RequestStoreTimeoutError,
    RequestStoreUnavailableError,
)
from offerdesk.middleware.error_handler import (
    business_exception_handler,
    request_store_error_handler,
)
from offerdesk.utils.exceptions import BusinessException, ViewNotFoundException


@pytest.mark.unit
class TestBusinessExceptionHandler:

    @pytest.mark.asyncio
    async def test_view_not_found_is_404(self):
        response = await business_exception_handler(None, ViewNotFoundException("v1"))

        body = json.loads(response.body)
        assert response.status_code == 404
        assert body["error"] == "VIEW_NOT_FOUND"
        assert body["details"] == {"view_id": "v1"}

    @pytest.mark.asyncio
    async def test_other_business_errors_are_400(self):
        response = await business_exception_handler(None, BusinessException("Nope", "SOMETHING_ELSE"))

        assert response.status_code == 400
        assert json.loads(response.body)["error"] == "SOMETHING_ELSE"


@pytest.mark.unit
class TestRequestStoreErrorHandler:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        RequestStoreTimeoutError("timed out"),
        RequestStoreUnavailableError("refused"),
    ])
    async def test_transport_failures_are_503(self, error):
        response = await request_store_error_handler(None, error)

        assert response.status_code == 503
        assert json.loads(response.body)["error"] == "REQUEST_STORE_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_rejections_are_502(self):
        response = await request_store_error_handler(None, RequestStoreRejectedError(500, "Database offline"))

        body = json.loads(response.body)
        assert response.status_code == 502
        assert body["message"] == "Database offline"
