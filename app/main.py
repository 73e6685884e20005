# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Novique API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import routes as auth_routes
from app.auth.api_keys import verify_jarvis_api_key
from app.config import settings
from app.exceptions import NoviqueException, novique_exception_handler
from app.routers import (
    admin,
    ai,
    blog,
    communications,
    consultations,
    cron,
    customers,
    dashboard,
    health,
    jarvis,
    labs,
    roi,
    twilio,
)
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _log_missing_integrations() -> None:
    """Warn at startup about integrations that will answer 500."""
    optional = {
        "JARVIS_API_KEY": settings.JARVIS_API_KEY,
        "CRON_SECRET": settings.CRON_SECRET,
        "OPENAI_API_KEY": settings.OPENAI_API_KEY,
        "UNSPLASH_ACCESS_KEY": settings.UNSPLASH_ACCESS_KEY,
        "DISCORD_WEBHOOK_URL": settings.DISCORD_WEBHOOK_URL,
    }
    missing = [name for name, value in optional.items() if not value]
    if not settings.twilio_configured:
        missing.append("TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN")
    if missing:
        logger.warning(f"Integrations not configured: {', '.join(missing)}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown.
    """
    logger.info(f"Starting Novique API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    _log_missing_integrations()

    yield

    logger.info("Shutting down Novique API")


# Create FastAPI application
app = FastAPI(
    title="Novique API",
    description="""
## Novique AI Website and Admin API

Back end for the Novique AI marketing site and its admin console.

### Surfaces

| Prefix | Callers | Auth |
|--------|---------|------|
| `/api/v1` | Website and admin console | Supabase JWT + profile role |
| `/api/twilio` | Twilio webhooks | Optional X-Twilio-Signature |
| `/api/jarvis` | Jarvis desktop assistant | `Authorization: Bearer <JARVIS_API_KEY>` |
| `/api/cron` | Schedulers | `Authorization: Bearer <CRON_SECRET>` |

### Roles

- **admin**: everything
- **editor**: blog and labs (own content), read-only CRM and inbox
- **viewer**: published content and own profile
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Current user and token verification"},
        {"name": "Blog", "description": "Blog posts and header images"},
        {"name": "Labs", "description": "Automation case studies, optionally drafted from GitHub"},
        {"name": "Communications", "description": "Voicemail, SMS and email inbox"},
        {"name": "Customers", "description": "CRM customers and interactions"},
        {"name": "Consultations", "description": "Consultation bookings and conversion"},
        {"name": "ROI", "description": "ROI calculator and assessment leads"},
        {"name": "Dashboard", "description": "Admin dashboard statistics"},
        {"name": "AI", "description": "AI-assisted content generation"},
        {"name": "Admin", "description": "User management and SMS replies"},
        {"name": "Twilio", "description": "Twilio SMS and voice webhooks"},
        {"name": "Jarvis", "description": "Integration API for the Jarvis assistant"},
        {"name": "Cron", "description": "Scheduled job triggers"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
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

@app.exception_handler(NoviqueException)
async def handle_novique_exception(request: Request, exc: NoviqueException):
    """Handle domain exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    return await novique_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters, in the same envelope as domain errors."""
    errors = jsonable_encoder(exc.errors())
    logger.warning(f"{request.method} {request.url.path} rejected: {len(errors)} validation error(s)")
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "code": "REQUEST_VALIDATION_ERROR",
            "suggestion": "Check the request fields against the API documentation",
            "details": {"errors": errors},
        },
    )


@app.exception_handler(SupabaseClientError)
async def handle_supabase_error(request: Request, exc: SupabaseClientError):
    """Database helper failures."""
    logger.error(f"Supabase error on {request.url.path}: {exc}")
    content = {"detail": exc.message, "code": exc.code}
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    return JSONResponse(status_code=500, content=content)


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

# Authentication endpoints
app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])

# Health check endpoints
app.include_router(health.router, prefix="/api/v1", tags=["Health"])

# Content
app.include_router(blog.router, prefix="/api/v1/blog", tags=["Blog"])
app.include_router(labs.router, prefix="/api/v1/labs", tags=["Labs"])
app.include_router(ai.router, prefix="/api/v1/ai", tags=["AI"])

# Leads and CRM
app.include_router(consultations.public_router, prefix="/api/v1/consultation", tags=["Consultations"])
app.include_router(consultations.router, prefix="/api/v1/consultations", tags=["Consultations"])
app.include_router(roi.public_router, prefix="/api/v1/roi", tags=["ROI"])
app.include_router(roi.router, prefix="/api/v1/roi-assessments", tags=["ROI"])
app.include_router(customers.router, prefix="/api/v1/customers", tags=["Customers"])
app.include_router(communications.router, prefix="/api/v1/communications", tags=["Communications"])
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"])

# Admin
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])

# Machine-to-machine surfaces
app.include_router(twilio.router, prefix="/api/twilio", tags=["Twilio"])
app.include_router(
    jarvis.router,
    prefix="/api/jarvis",
    tags=["Jarvis"],
    dependencies=[Depends(verify_jarvis_api_key)],
)
app.include_router(cron.router, prefix="/api/cron", tags=["Cron"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Novique API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
