# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the MedApps Marketplace API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main          (host/port from API_HOST / API_PORT)
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.dependencies import get_payment_gateway, get_repository
from app.exceptions import (
    MarketplaceException,
    marketplace_exception_handler,
    validation_exception_handler,
)
from app.routers import admin, apps, developer, health, payments
from app.auth import routes as auth_routes
from lib.seed import seed_demo_data

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: Build the repository, seed demo data if asked to
    - Shutdown: Close the gateway's HTTP connection pool
    """
    logger.info(f"Starting MedApps Marketplace API in {settings.ENVIRONMENT} mode")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")

    if settings.SEED_DEMO_DATA:
        if settings.STORAGE_BACKEND == "memory":
            seed_demo_data(get_repository())
        else:
            logger.warning("SEED_DEMO_DATA is only honoured with STORAGE_BACKEND=memory")

    yield

    logger.info("Shutting down MedApps Marketplace API")
    if get_payment_gateway.cache_info().currsize:
        get_payment_gateway().close()


# Create FastAPI application
app = FastAPI(
    title="MedApps Marketplace API",
    description="""
## Marketplace for medical-education apps

Developers register, submit apps, pay a one-time listing fee through
Paystack, and an administrator publishes or rejects each submission.

### Submission lifecycle

1. **Register / log in** - `POST /api/auth/register`, `POST /api/auth/login`
2. **Submit** - `POST /api/apps` (four screenshots required)
3. **Pay** - `POST /api/payments/initialize`, then checkout on Paystack
4. **Verify** - `POST /api/payments/verify` with the Paystack reference
5. **Moderation** - an admin sets the status to `published` or `rejected`
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Developer registration and sessions"},
        {"name": "Apps", "description": "Public catalog and app submissions"},
        {"name": "Developer", "description": "The logged-in developer's apps"},
        {"name": "Payments", "description": "Listing fee via Paystack"},
        {"name": "Admin", "description": "Moderation and payment reconciliation"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - the web client sends the session cookie cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(MarketplaceException)
async def handle_marketplace_exception(request: Request, exc: MarketplaceException):
    """Handle custom marketplace exceptions."""
    return await marketplace_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Report invalid request bodies as 400."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints (router carries its own /auth prefix)
app.include_router(
    auth_routes.router,
    prefix=API_PREFIX,
)

# Health check endpoints
app.include_router(
    health.router,
    prefix=API_PREFIX,
    tags=["Health"]
)

# Catalog and submissions
app.include_router(
    apps.router,
    prefix=f"{API_PREFIX}/apps",
    tags=["Apps"]
)

# Developer dashboard
app.include_router(
    developer.router,
    prefix=f"{API_PREFIX}/developer",
    tags=["Developer"]
)

# Listing fee
app.include_router(
    payments.router,
    prefix=f"{API_PREFIX}/payments",
    tags=["Payments"]
)

# Moderation
app.include_router(
    admin.router,
    prefix=f"{API_PREFIX}/admin",
    tags=["Admin"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "MedApps Marketplace API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development and settings.DEBUG,
    )
