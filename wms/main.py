"""
FastAPI application for the warehouse management service.

To run: uvicorn wms.main:app --reload
"""
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from wms.core.config import settings
from wms.core.database import init_db, close_db, check_db_connection, get_db_context
from wms.core.permissions import Role
from wms.core.security import get_password_hash
from wms.api.v1 import api_router
from wms.error_handlers import register_exception_handlers
from wms.gateway import PersistenceGateway
from wms.logging_config import setup_logging, get_logger
from wms.middleware import RequestLoggingMiddleware, limiter, rate_limit_exceeded_handler
from wms.schemas.dashboard import HealthCheck

logger = get_logger("main")


def bootstrap_admin() -> None:
    """Create the first administrator when the users table is empty."""
    if not (settings.bootstrap_admin_email and settings.bootstrap_admin_password):
        return

    with get_db_context() as db:
        gateway = PersistenceGateway(db)
        if gateway.count_users():
            return
        gateway.insert_user(
            email=settings.bootstrap_admin_email,
            password_hash=get_password_hash(settings.bootstrap_admin_password),
            name="Administrator",
            role=Role.ADMIN.value,
            status="ACTIVE",
        )
    logger.info(f"Created initial administrator {settings.bootstrap_admin_email}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    setup_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")

    # Alembic owns the schema in production; create_all is a no-op on existing tables
    init_db()
    bootstrap_admin()

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    close_db()
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Warehouse management - stock, inbound/outbound, stock take and purchasing",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(RequestLoggingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routers
app.include_router(api_router)

# Item images
Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)
app.mount(settings.storage_public_url, StaticFiles(directory=settings.storage_dir), name="storage")


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs" if settings.debug else "disabled",
        "api_v1": "/api/v1"
    }


# Health check endpoint (public)
@app.get("/health", response_model=HealthCheck)
def health_check():
    """Health check including database connectivity."""
    database_ok = check_db_connection()
    return HealthCheck(
        status="healthy" if database_ok else "degraded",
        version=settings.app_version,
        database="connected" if database_ok else "unavailable",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wms.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
