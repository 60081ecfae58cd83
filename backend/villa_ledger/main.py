"""StayinUbud booking ledger: FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from villa_ledger.api.v1.analytics import router as analytics_router
from villa_ledger.api.v1.auth import router as auth_router
from villa_ledger.api.v1.bookings import router as bookings_router
from villa_ledger.api.v1.calendar import router as calendar_router
from villa_ledger.api.v1.villas import router as villas_router
from villa_ledger.config import settings
from villa_ledger.errors import (
    AvailabilityConflictError,
    LedgerError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

# Configure root logger so all villa_ledger.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

# Most specific first; anything else deriving from LedgerError is a 400.
_ERROR_STATUS: list[tuple[type[LedgerError], int]] = [
    (ValidationError, 422),
    (AvailabilityConflictError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    yield
    # Shutdown: dispose engine connections
    from villa_ledger.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Availability, bookings and occupancy reporting for a villa-rental site and its back-office.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Translate ledger errors into HTTP responses with a ``detail`` message."""
    status_code = next(
        (code for kind, code in _ERROR_STATUS if isinstance(exc, kind)),
        status.HTTP_400_BAD_REQUEST,
    )
    body: dict = {"detail": exc.message}
    if isinstance(exc, AvailabilityConflictError):
        body["conflicting_dates"] = [d.isoformat() for d in exc.dates]
    if isinstance(exc, PersistenceError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=body)


# Routers
app.include_router(auth_router)
app.include_router(villas_router)
app.include_router(calendar_router)
app.include_router(bookings_router)
app.include_router(analytics_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run("villa_ledger.main:app", host=settings.host, port=settings.port, reload=settings.debug)
