"""
FastAPI application entry point.

Configures the API with all routes, middleware, static files and error handling.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from nrv.config import load_config
from nrv.errors import StorageError

from . import deps
from .routes.router import router as api_router

logger = logging.getLogger(__name__)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

# Paths that don't count as site visits
UNTRACKED_PREFIXES = ("/api", "/health", "/docs", "/redoc", "/openapi.json")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    logger.info("Starting nrv site backend...")

    # Initialize services on startup
    deps.get_services()
    logger.info("Services initialized")

    yield

    # Cleanup on shutdown
    logger.info("Shutting down...")
    deps.close_services()


app = FastAPI(
    title="nrv site API",
    description="Personal site backend: content, contact form, chat proxy and invitation-gated accounts",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


@app.middleware("http")
async def visitor_middleware(request: Request, call_next):
    """Record the client address of every site (non-API) request."""
    if request.client and not request.url.path.startswith(UNTRACKED_PREFIXES):
        try:
            services = deps.get_services()
            await run_in_threadpool(services.content.record_visitor, request.client.host)
        except StorageError as e:
            logger.warning(f"Could not record visitor: {e}")
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request"}
    )


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


# Health check
@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "nrv-site"}


# Include API routes
app.include_router(api_router, prefix="/api")


# Static site, mounted last so it doesn't shadow the API
_static_dir = Path(load_config().server.static_dir)
if _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=str(_static_dir), html=True), name="static")
else:
    logger.warning(f"Static directory {_static_dir} not found; serving API only")
