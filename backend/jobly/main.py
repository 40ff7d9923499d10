"""
FastAPI application entry point for the Jobly API.

This is the main app that:
- Initializes FastAPI with CORS
- Registers the API routers and error handlers
- Provides health check endpoint
- Creates tables on startup and closes the engine on shutdown
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from jobly import database
from jobly.config import settings
from jobly.errors import JoblyError, jobly_error_handler, validation_error_handler
# Registers the tables on Base.metadata
from jobly import models  # noqa: F401
# Import API routers
from jobly.api import auth, companies, jobs, users

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    On startup: create missing tables when AUTO_CREATE_TABLES is set
    On shutdown: close database connections gracefully
    """
    # Startup
    logger.info("Starting Jobly API...")
    logger.info(f"Database: {database.mask_database_url(settings.database_url)}")
    logger.info(f"Debug mode: {settings.debug}")

    if settings.auto_create_tables:
        async with database.engine.begin() as conn:
            await conn.run_sync(database.Base.metadata.create_all)

    yield

    # Shutdown
    logger.info("Shutting down Jobly API...")
    await database.engine.dispose()


# Initialize FastAPI app
app = FastAPI(
    title="Jobly API",
    description="Companies, jobs, users and job applications",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Set ALLOWED_ORIGINS environment variable with comma-separated domains
allowed_origins = [
    "http://localhost:3000",  # Local development
]
if settings.allowed_origins:
    allowed_origins.extend(
        origin.strip() for origin in settings.allowed_origins.split(',') if origin.strip()
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(JoblyError, jobly_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "Jobly API",
        "version": "1.0.0",
    }


# Root endpoint
@app.get("/")
async def root():
    """API root with basic info."""
    return {
        "message": "Jobly API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Register API routers
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(companies.router, prefix="/companies", tags=["companies"])
app.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
app.include_router(users.router, prefix="/users", tags=["users"])
