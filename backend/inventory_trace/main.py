"""FastAPI application."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .config import settings
from .domain_errors import DomainError
from .problem_details import domain_error_handler
from .schemas import HealthResponse
from .routers import ledger, traceability

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
)

# Create app
app = FastAPI(
    title="EV Inventory Traceability",
    version="1.0.0",
    description="Normalized inventory movement ledger and VIN part traceability",
)

if settings.ENV.lower() == "production" and any(origin.strip() == "*" for origin in settings.cors_origins):
    raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard).")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"] if settings.ENV.lower() != "production" else ["Authorization", "Content-Type"],
)

app.add_exception_handler(DomainError, domain_error_handler)

# Include routers
app.include_router(ledger.router, prefix="/api/v1")
app.include_router(traceability.router, prefix="/api/v1")


@app.get("/api/v1/system/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    return HealthResponse(status="ok", version="1.0.0", upstream=settings.upstream_base_url)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "EV Inventory Traceability API",
        "version": "1.0.0",
        "docs": "/docs",
    }
