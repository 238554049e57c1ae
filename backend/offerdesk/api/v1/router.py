"""
API v1 router aggregation.

WHAT: Mount the status, view and view-stream routers under /api/v1
WHY: Single place to register all API routes
HOW: Include each endpoint router with the shared prefix and its tag
"""

from fastapi import APIRouter

from .endpoints import status, streaming, views

API_V1_PREFIX = "/api/v1"

api_router = APIRouter()

for endpoint_router, tag in (
    (status.router, "status"),
    (views.router, "views"),
    (streaming.router, "views"),
):
    api_router.include_router(endpoint_router, prefix=API_V1_PREFIX, tags=[tag])
