"""
FastAPI application entry point.
Main application instance with middleware and route configuration.
"""
from fastapi import FastAPI, Request, status, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
import logging
import asyncio

from studio_cms.config import settings
from studio_cms.database import get_db, init_db, close_db
from studio_cms.errors import RowNotFoundError, RowStoreError
from studio_cms.services.cloudinary_service import MediaHost
from studio_cms.utils.rate_limit import limiter
from studio_cms.routes import (
    about_us,
    auth,
    categories,
    dashboard,
    hero_images,
    messages,
    portfolio_images,
    services,
    uploads,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
)

# One Cloudinary handle for the whole process (see get_media_host)
app.state.media_host = MediaHost.from_settings(settings)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# The dashboard sends the cms_token cookie, so origins must be listed explicitly
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its response status."""
    method = request.method
    path = request.url.path

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Error processing {method} {path}: {type(e).__name__}: {str(e)}", exc_info=True)
        raise

    logger.info(f"Response status: {response.status_code} for {method} {path}")
    return response


app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(hero_images.router, prefix="/api", tags=["hero images"])
app.include_router(about_us.router, prefix="/api", tags=["about us"])
app.include_router(services.router, prefix="/api", tags=["services"])
app.include_router(portfolio_images.router, prefix="/api", tags=["portfolio images"])
app.include_router(categories.router, prefix="/api", tags=["categories"])
app.include_router(messages.router, prefix="/api", tags=["messages"])
app.include_router(dashboard.router, prefix="/api", tags=["dashboard"])
app.include_router(uploads.router, prefix="/api", tags=["uploads"])


# Exception Handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions (401, 403, 404, etc.)."""
    logger.warning(f"HTTPException on {request.method} {request.url.path}: {exc.status_code} {exc.detail}")

    # Handle both string and dict detail formats
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail, "detail": str(exc.detail)}

    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation error",
            "detail": jsonable_encoder(exc.errors())
        }
    )


@app.exception_handler(RowNotFoundError)
async def row_not_found_handler(request: Request, exc: RowNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Not found", "detail": exc.message}
    )


@app.exception_handler(RowStoreError)
async def row_store_error_handler(request: Request, exc: RowStoreError):
    """Row store failures are fatal to the request and shown to the user."""
    logger.error(f"Row store error on {request.method} {request.url.path}: [{exc.code}] {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Database operation failed", "code": exc.code, "detail": exc.message}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: "
        f"{type(exc).__name__}: {str(exc)}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred"
        }
    )


# Root Endpoints
@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": settings.API_TITLE,
        "status": "healthy",
        "version": settings.API_VERSION
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.get("/health/db")
async def health_check_db(db: AsyncSession = Depends(get_db)):
    """
    Database health check endpoint.
    Tests database connection and returns status.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        return {
            "database": "connected",
            "status": "healthy",
            "result": result.scalar()
        }
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}", exc_info=True)
        return {
            "database": "error",
            "status": "unhealthy",
            "error": "Database connection failed"
        }


@app.get("/health/cloudinary")
async def health_check_cloudinary(request: Request):
    """
    Cloudinary health check endpoint.
    Validates Cloudinary configuration.
    """
    media: MediaHost = request.app.state.media_host
    if media.validate_config():
        return {
            "cloudinary": "configured",
            "status": "healthy",
            "cloud_name": media.cloud_name
        }
    return {
        "cloudinary": "not_configured",
        "status": "warning",
        "message": "Cloudinary credentials not set in environment variables"
    }


@app.on_event("startup")
async def startup_event():
    """
    Verify the database connection on startup.
    Non-blocking: the app starts even if the database is unreachable.
    """
    if not settings.DATABASE_URL:
        logger.info("DATABASE_URL not configured - database features will be unavailable")
        return

    try:
        await init_db()
    except Exception as e:
        logger.error(
            f"Failed to initialize database on startup: {str(e)}\n"
            f"The application will continue to run, but database-dependent endpoints will fail."
        )


@app.on_event("shutdown")
async def shutdown_event():
    """Close the Cloudinary client and database connections."""
    await app.state.media_host.aclose()
    if settings.DATABASE_URL:
        try:
            await close_db()
        except Exception as e:
            # Cancellation during shutdown is expected
            if not isinstance(e, (KeyboardInterrupt, asyncio.CancelledError)):
                logger.warning(f"Error during database shutdown: {str(e)}")
