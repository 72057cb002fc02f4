"""
Civic Maintenance Triage - FastAPI Application Entry Point

Citizens report maintenance issues with a photo and description. Reports
are classified (Gemini, or keyword rules as fallback), stored, tracked
from open to resolved, and upvoted from the feed.

DESIGN PRINCIPLES:
- Classification always succeeds from the caller's point of view
- In-memory, single-process store; no durability across restarts
- Store and classifier are created at startup and injected into routes
"""

import logging
import traceback
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.settings import settings
from app.routes import admin, health, issues, technicians, users
from app.services.classifier.registry import IssueClassifier
from app.services.issue_store import IssueStore


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Application lifecycle
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create the store (seeded with demo data when SEED_DEMO_DATA) and the classifier.
    Shutdown: drop in-memory state.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    store = IssueStore()
    if settings.SEED_DEMO_DATA:
        store.reset()
    app.state.store = store
    app.state.classifier = IssueClassifier.from_settings()
    logger.info(f"Classifier mode: {app.state.classifier.active_provider().get_model_info()['name']}")

    yield

    store.clear()
    logger.info(f"Shutting down {settings.APP_NAME}")


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Triage and lifecycle tracking for citizen-reported civic maintenance issues",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# Global exception handler to catch ALL exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(
        f"🔥 Unhandled exception on {request.method} {request.url.path}\n"
        f"{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Catch Pydantic validation errors and log them."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router)
app.include_router(issues.router)
app.include_router(technicians.router)
app.include_router(users.router)
app.include_router(admin.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "issues": "/api/issues",
    }
