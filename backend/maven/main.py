"""Main FastAPI application."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from maven.config import settings
from maven.database import Base, AsyncSessionLocal, init_db
from maven.routers import (
    dashboard_routes,
    prospect_routes,
    sequence_routes,
    activity_routes,
    integration_routes,
    lead_scoring_routes,
    ai_routes,
)
from maven.services.seed import seed_demo_data
from maven.services.connectors_service import ConnectorFactory

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Marketing Maven API",
    description="Prospect tracking, AI lead scoring, outreach sequences and data-source integrations",
    version="1.0.0",
    redirect_slashes=False
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# ERROR HANDLERS
# ============================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Invalid request data for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"message": "Invalid request data"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# ============================================
# ROUTER REGISTRATION
# ============================================

app.include_router(dashboard_routes.router)
app.include_router(prospect_routes.router)
app.include_router(sequence_routes.router)
app.include_router(activity_routes.router)
app.include_router(integration_routes.router)
app.include_router(lead_scoring_routes.router)
app.include_router(ai_routes.router)


# ============================================
# HEALTH & ROOT ENDPOINTS
# ============================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "registered_tables": len(Base.metadata.tables),
        "tables": sorted(Base.metadata.tables.keys()),
        "features": [
            "prospects",
            "csv_import",
            "ai_lead_scoring",
            "rule_scoring",
            "sequences",
            "activity_log",
            "integrations",
        ],
        "connectors": ConnectorFactory.get_available_types(),
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Marketing Maven API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


# ============================================
# STARTUP
# ============================================

@app.on_event("startup")
async def startup_event():
    """Create tables and seed demo data on first run."""
    logger.info("Starting Marketing Maven API...")
    await init_db()
    logger.info(f"Registered {len(Base.metadata.tables)} SQLAlchemy tables")

    if settings.SEED_DEMO_DATA:
        async with AsyncSessionLocal() as db:
            await seed_demo_data(db)

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set - AI scoring will return fallback results")
