# app/main.py
"""
FastAPI application entry point.
Includes security middleware, typed + global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import tickets, occupancy, alerts, health
from app.database import create_tables
from app.config import settings
from app.services.errors import (
    CapacityExhausted,
    ContentionTimeout,
    InvariantViolation,
    NotFoundError,
    ParkingValidationError,
)
from app.services.strategies import get_strategy
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Parking Allocation API",
    description="Spot allocation, occupancy tracking, and fees for a multi-floor parking facility.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow gate terminals / dashboard on the LAN) ──────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard IP in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Health check and docs stay open. Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Allocation Error Handlers ────────────────────────────────────────────────
@app.exception_handler(CapacityExhausted)
async def capacity_exhausted_handler(request: Request, exc: CapacityExhausted):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Lot full", "spot_type": exc.spot_type.value, "reason": exc.reason},
    )


@app.exception_handler(ContentionTimeout)
async def contention_timeout_handler(request: Request, exc: ContentionTimeout):
    logger.warning(f"Contention on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Allocation busy, retry shortly"},
        headers={"Retry-After": "1"},
    )


@app.exception_handler(ParkingValidationError)
async def validation_error_handler(request: Request, exc: ParkingValidationError):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(InvariantViolation)
async def invariant_violation_handler(request: Request, exc: InvariantViolation):
    # Already persisted as an alert by the workflow layer
    logger.critical(f"Invariant violation on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal consistency error", "kind": "invariant_violation"},
    )


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(tickets.router,   prefix="/api/v1", tags=["🚗 Entry/Exit"])
app.include_router(occupancy.router, prefix="/api/v1", tags=["🅿️  Occupancy"])
app.include_router(alerts.router,    prefix="/api/v1", tags=["🔔 Alerts"])
app.include_router(health.router,    prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Parking backend starting up...")
    get_strategy(settings.ALLOCATION_STRATEGY)   # fail fast on a bad strategy name
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"🅿️  Allocation strategy: {settings.ALLOCATION_STRATEGY}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Parking backend shutting down...")
