"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventdesk.api.router import router as api_router
from eventdesk.config import get_settings
from eventdesk.database import close_db
from eventdesk.errors import AppError, InsufficientDataError
from eventdesk.redis_client import close_redis, get_redis
from eventdesk.schemas.common import ErrorResponse, MessageResponse
from eventdesk.tasks import background_tasks

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting EventDesk Reporting API...")

    # Initialize Redis connection
    if await get_redis() is None:
        logger.info("Redis disabled; utilization cache writes run unlocked")
    else:
        logger.info("Redis connection established")

    # Start background tasks
    await background_tasks.start()

    yield

    # Shutdown
    logger.info("Shutting down EventDesk Reporting API...")

    # Stop background tasks
    await background_tasks.stop()

    await close_db()

    # Close Redis connection
    await close_redis()
    logger.info("Redis connection closed")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first["msg"]


def register_exception_handlers(app: FastAPI) -> None:
    """Map application errors to the ``{success, error}`` envelope."""

    @app.exception_handler(InsufficientDataError)
    async def insufficient_data_handler(request: Request, exc: InsufficientDataError):
        """Empty result sets are answered with a plain message, not an error."""
        return JSONResponse(
            status_code=200,
            content=MessageResponse(message=exc.message).model_dump(),
        )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=_validation_message(exc)).model_dump(),
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(exc) if settings.DEBUG else "Internal Server Error",
            },
        )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
## EventDesk Reporting API

Sales and auditorium reporting for event organizers and administrators.

### Sales reports
- Daily, weekly, monthly and all-time ticket sales and revenue
- PDF downloads of every report

### Auditorium
- Booking schedule and events held
- Daily utilization, cached per day on first read
- PDF overview report

### Authentication
Routes read the `X-User-ID` and `X-User-Role` headers set by the identity
gateway. Organizers only see data of events they created.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # Include API routers
    app.include_router(api_router, prefix="/api")

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
        }

    register_exception_handlers(app)

    return app


# Create application instance
app = create_app()


def run():
    """Run the application with uvicorn."""
    uvicorn.run(
        "eventdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
