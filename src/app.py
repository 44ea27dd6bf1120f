"""Main FastAPI application module.

This module initializes the FastAPI application and registers all route handlers.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from core.logging_config import setup_logging
from config import (
    API_HOST,
    API_PORT,
    API_PREFIX,
    CORS_ALLOWED_ORIGINS,
)
from api.routes import (
    announcements,
    attendance,
    auth,
    class_route,
    enrollments,
    exams,
    grades,
    subjects,
    users,
)
from core.database import init_db
from core.exceptions import SchoolAPIError
from core.rate_limit import handle_rate_limit_exceeded, limiter

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)

API_TITLE = "School Management API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "REST API for school operations: users, classes, attendance, exams and announcements."

# Initialize FastAPI application
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting: a default limit on every route, a stricter one on /auth
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, handle_rate_limit_exceeded)
app.add_middleware(SlowAPIMiddleware)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    if response.status_code >= 500:
        log = logger.error
    elif response.status_code >= 400:
        log = logger.warning
    else:
        log = logger.info
    log(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.exception_handler(SchoolAPIError)
def handle_school_api_error(request: Request, exc: SchoolAPIError) -> JSONResponse:
    """Render service errors as {"detail": message} with their HTTP status."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    else:
        logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Register route handlers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(class_route.router)
app.include_router(subjects.router)
app.include_router(enrollments.router)
app.include_router(attendance.router)
app.include_router(exams.router)
app.include_router(grades.router)
app.include_router(announcements.router)


@app.on_event("startup")
def startup_tasks() -> None:
    """Create database tables that do not exist yet."""
    init_db()


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """API root, returns API information and documentation links.

    Returns:
        Dictionary with API information and documentation links.
    """
    return {
        "name": API_TITLE,
        "version": API_VERSION,
        "description": API_DESCRIPTION,
        "api_prefix": API_PREFIX,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/health",
    }


@app.get("/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"Starting {API_TITLE} at {server_url}")
    print(f"API docs: {server_url}/docs")
    print()

    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
