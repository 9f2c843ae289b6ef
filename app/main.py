# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the MusicMethod API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.config import settings
from app.exceptions import (
    MusicMethodException,
    musicmethod_exception_handler,
    supabase_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    emails,
    exchange_rates,
    health,
    imports,
    media,
    payments,
    podcasts,
    redirects,
    revenue,
    sitemap,
    tags,
    tasks,
    usernames,
    users,
)
from app.auth import routes as auth_routes
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup; nothing to tear down."""
    logger.info(f"Starting MusicMethod API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY not set - card payments disabled")
    if not settings.r2_configured:
        logger.warning("R2 credentials not set - user media won't be deleted from storage")
    if not settings.ses_configured:
        logger.warning("AWS SES credentials not set - direct email disabled")

    yield

    logger.info("Shutting down MusicMethod API")


app = FastAPI(
    title="MusicMethod API",
    description="""
## World Music Method platform API

Server-side operations for the courses, streaming and membership platform.
Everything else (catalogue reads, messaging, bookings) goes straight to
Supabase from the client under row-level security.

### Authentication

Send the Supabase access token as `Authorization: Bearer <token>`.
Admin routes check the `user_roles` table for the `admin` role.

### Long-running work

CSV imports and syncs return a `task_id`; poll `GET /api/v1/tasks/{task_id}`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Current user and token checks"},
        {"name": "Users", "description": "Admin user management"},
        {"name": "Revenue", "description": "Artist revenue pool and credits"},
        {"name": "Media", "description": "Playlists and plays"},
        {"name": "Podcasts", "description": "RSS sync and episode ordering"},
        {"name": "Payments", "description": "Card checkout"},
        {"name": "Coupons", "description": "Coupon validation"},
        {"name": "Imports", "description": "Member and tag CSV imports"},
        {"name": "Tags", "description": "CRM tags and sequence enrolment"},
        {"name": "Redirects", "description": "URL redirects"},
        {"name": "Usernames", "description": "Username availability"},
        {"name": "Email", "description": "Direct email"},
        {"name": "Exchange Rates", "description": "Monthly currency rates"},
        {"name": "Tasks", "description": "Track background task progress"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(MusicMethodException)
async def handle_musicmethod_exception(request: Request, exc: MusicMethodException):
    return await musicmethod_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_supabase_error(request: Request, exc: SupabaseClientError):
    logger.error(f"Supabase error on {request.url.path}: {exc}")
    return await supabase_exception_handler(request, exc)


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError):
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

app.include_router(auth_routes.router, prefix=API_PREFIX, tags=["Auth"])
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["Users"])
app.include_router(revenue.router, prefix=f"{API_PREFIX}/revenue", tags=["Revenue"])
app.include_router(media.router, prefix=f"{API_PREFIX}/media", tags=["Media"])
app.include_router(podcasts.router, prefix=f"{API_PREFIX}/podcasts", tags=["Podcasts"])
app.include_router(payments.router, prefix=f"{API_PREFIX}/payments", tags=["Payments"])
app.include_router(payments.coupons_router, prefix=f"{API_PREFIX}/coupons", tags=["Coupons"])
app.include_router(imports.router, prefix=f"{API_PREFIX}/imports", tags=["Imports"])
app.include_router(tags.router, prefix=f"{API_PREFIX}/tags", tags=["Tags"])
app.include_router(redirects.router, prefix=f"{API_PREFIX}/redirects", tags=["Redirects"])
app.include_router(usernames.router, prefix=f"{API_PREFIX}/usernames", tags=["Usernames"])
app.include_router(emails.router, prefix=f"{API_PREFIX}/email", tags=["Email"])
app.include_router(exchange_rates.router, prefix=f"{API_PREFIX}/exchange-rates", tags=["Exchange Rates"])
app.include_router(tasks.router, prefix=f"{API_PREFIX}/tasks", tags=["Tasks"])

# Served at the site root for crawlers
app.include_router(sitemap.router)


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": "MusicMethod API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }
