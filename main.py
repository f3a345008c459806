"""
Main application entry point for the Calendar Events API.

This module initializes the FastAPI application, configures logging,
CORS and request logging, registers the uniform error handlers, and
includes routers for authentication and events.

Modules:
- FastAPI: Web framework
- CORSMiddleware: Middleware for handling CORS
- structlog: Structured logging
- calendar_api.database: Database engine
- calendar_api.models: SQLAlchemy models
- calendar_api.auth: Authentication router
- calendar_api.events: Events router
- calendar_api.exceptions: Error handlers
- calendar_api.middleware: Request logging
- calendar_api.core: Application settings
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from calendar_api.database import engine
from calendar_api import models, events
from calendar_api.auth import router as auth_router
from calendar_api.core import configure_logging, get_settings
from calendar_api.exceptions import register_exception_handlers
from calendar_api.middleware import RequestLoggingMiddleware

settings = get_settings()
configure_logging(settings)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create missing tables on startup and log the application lifecycle.
    """
    models.Base.metadata.create_all(bind=engine)
    logger.info("application_startup", app_name=settings.APP_NAME)
    yield
    logger.info("application_shutdown")


# Initialize FastAPI application
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Log every request
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Include routers for application areas
app.include_router(auth_router)
app.include_router(events.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.APP_NAME}


@app.get("/")
def root():
    """
    Root endpoint for the API.

    Returns a simple JSON message directing users to the Swagger UI.

    Returns:
        dict: JSON message with information about the API
    """
    return {"msg": "Calendar Events API. Visit /docs for Swagger UI"}
