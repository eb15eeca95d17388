"""Ready Set delivery operations API."""

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.redis_client import RequestTimingStore, close_redis
from app.core.storage import async_session, init_models
from app.routers import (
    application_sessions,
    carriers,
    cleanup,
    job_applications,
    monitoring,
    orders,
    performance,
    upload_errors,
    users,
)
from app.services.cleanup_scheduler import cleanup_scheduler
from app.utils.validators import describe_validation_error

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Initializing application...")
    await init_models()

    if settings.scheduler_enabled:
        logger.info("Starting scheduler...")
        await cleanup_scheduler.start()

    logger.info("Application initialized")

    yield

    logger.info("Shutting down...")
    await cleanup_scheduler.stop()
    await close_redis()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Ready Set API",
    description="Catering and on-demand orders, job applications and admin monitoring",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def record_request_timing(request: Request, call_next):
    """Time every request, expose it as X-Response-Time and record it per route."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    response.headers.setdefault("X-Response-Time", f"{duration_ms:.2f}ms")

    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    try:
        await RequestTimingStore.record(request.method, path, duration_ms)
    except RedisError as e:
        logger.debug(f"Skipped timing record for {path}: {e}")
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests as 400 with a single message."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": describe_validation_error(exc.errors())},
    )


app.include_router(application_sessions.router)
app.include_router(job_applications.router)
app.include_router(job_applications.admin_router)
app.include_router(orders.router)
app.include_router(users.router)
app.include_router(cleanup.router)
app.include_router(monitoring.router)
app.include_router(upload_errors.router)
app.include_router(performance.router)
app.include_router(carriers.router)


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "message": "Ready Set API",
        "version": settings.app_version,
        "docs": "/docs",
        "status": "active",
        "environment": settings.app_env,
        "schedulerEnabled": settings.scheduler_enabled,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    database = "healthy"
    try:
        async with async_session() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {e}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "service": "readyset-api",
        "database": database,
        "scheduler": cleanup_scheduler.get_status(),
    }
