"""
FastAPI application entry point.

WHAT: Offer Desk application wiring
WHY: One app object for uvicorn and the tests
HOW: Lifespan for the view cleanup loop and client pools, CORS,
     request logging, exception handlers, v1 router
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.view_manager import view_manager
from .clients.client_factory import close_clients
from .utils.logger import setup_logging, get_logger
from .middleware.error_handler import register_exception_handlers
from .api.v1.router import api_router, API_V1_PREFIX

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    WHAT: Start the idle-view cleanup loop; on shutdown close every view
    WHY: Views and HTTP connection pools must not outlive the process cleanly
    HOW: Async context manager for FastAPI lifespan
    """
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION} "
        f"(request store: {settings.REQUEST_STORE_BASE_URL}, "
        f"distance service: {settings.get_distance_service_url()})"
    )
    view_manager.start_cleanup()

    yield

    logger.info(f"Shutting down, {len(view_manager.active_views)} views open")
    view_manager.shutdown()
    await close_clients()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Accept or reject vendor offers on warehouse item requests",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and latency of every API call."""
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({latency_ms:.1f}ms)")
    return response


register_exception_handlers(app)
app.include_router(api_router)


@app.get("/")
async def root():
    """Service banner."""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api": API_V1_PREFIX,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "offerdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
