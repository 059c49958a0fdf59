"""
Jowhara Admin - Main Application.

FastAPI application exposing the catalog, orders and inventory admin API
over a Supabase store, with live (SSE) lists fed by realtime changes.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from uuid import UUID, uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jowhara import __version__
from jowhara.config import get_settings
from jowhara.core.supabase_client import StoreClient
from jowhara.exceptions import JowharaException
from jowhara.observability import get_metrics_store
from jowhara.schemas import ErrorDetail, ErrorResponse, HealthResponse

# Import module routers
from jowhara.modules.catalog import brands_router, categories_router, gender_router
from jowhara.modules.inventory import router as inventory_router
from jowhara.modules.orders import router as orders_router
from jowhara.modules.products import router as products_router

# Configure standard logging
logging.basicConfig(
    level=getattr(logging, get_settings().app_log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("jowhara")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler: owns the store connection."""
    settings = get_settings()
    logger.info(
        f"Starting Jowhara Admin API v{__version__} "
        f"[env={settings.app_env}] "
        f"[features={settings.features.to_dict()}]"
    )
    store = StoreClient(settings.supabase)
    await store.connect()
    app.state.store = store
    try:
        yield
    finally:
        await store.close()
        app.state.store = None
        logger.info("Shutting down Jowhara Admin API")


# Create FastAPI application
app = FastAPI(
    title="Jowhara Admin API",
    description="Admin back office for the Jowhara catalog, orders and inventory.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Middleware
# =============================================================================


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(f"[{request_id}] {request.method} {request.url.path}")

    response = await call_next(request)

    logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code}")

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(JowharaException)
async def jowhara_exception_handler(request: Request, exc: JowharaException):
    """Handle Jowhara custom exceptions."""
    request_id_str = getattr(request.state, "request_id", None)
    request_id = exc.request_id
    if request_id is None and request_id_str:
        try:
            request_id = UUID(request_id_str)
        except (ValueError, TypeError):
            pass

    logger.warning(f"JowharaException: {exc.code} - {exc.message}")
    get_metrics_store().record_error(exc.code)

    body = ErrorResponse(
        error=ErrorDetail(
            code=exc.code,
            message=exc.message,
            details=exc.details,
            request_id=request_id,
        )
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    request_id_str = getattr(request.state, "request_id", None)

    logger.error(f"Unhandled exception on {request.url.path}: {type(exc).__name__}: {exc}")
    logger.error(f"Traceback:\n{traceback.format_exc()}")
    get_metrics_store().record_error("INTERNAL_ERROR")

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if get_settings().app_debug else "An unexpected error occurred",
                "request_id": request_id_str,
            }
        },
    )


# =============================================================================
# Health Check & Metrics
# =============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(request: Request):
    """Health check endpoint. Degraded while the store is not connected."""
    settings = get_settings()
    store = getattr(request.app.state, "store", None)
    connected = bool(store is not None and store.connected)
    return HealthResponse(
        status="healthy" if connected else "degraded",
        version=__version__,
        features=settings.features.to_dict(),
        app_env=settings.app_env,
        is_production=settings.is_production,
        store_connected=connected,
    )


@app.get("/metrics", tags=["health"])
async def metrics_summary():
    """Fetch latency percentiles, error counts and notification counters per table."""
    return get_metrics_store().get_summary()


# =============================================================================
# Register Module Routers
# =============================================================================

app.include_router(products_router)
app.include_router(categories_router)
app.include_router(brands_router)
app.include_router(gender_router)
app.include_router(orders_router)
app.include_router(inventory_router)


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint redirect to docs."""
    return {"message": "Welcome to Jowhara Admin API", "docs": "/docs"}
