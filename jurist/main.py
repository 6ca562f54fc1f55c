"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from jurist.api.v1.admin import router as admin_router
from jurist.api.v1.lawyers import router as lawyers_router
from jurist.api.v1.requests import router as requests_router
from jurist.config import settings
from jurist.exceptions import Conflict, MarketplaceError
from jurist.notifications.worker import NotificationWorker
from jurist.redis_client import close_redis_client, get_redis_client

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer() if settings.environment == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("app_starting", environment=settings.environment)
    worker = NotificationWorker.from_settings(get_redis_client())
    worker.start()
    app.state.notification_worker = worker
    yield
    await worker.stop()
    await close_redis_client()
    logger.info("app_shutting_down")


app = FastAPI(
    title="Jurist Marketplace API",
    description="Marketplace connecting clients with verified lawyers",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(p) for p in err["loc"] if p not in ("body", "query", "path")),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    first = errors[0] if errors else {"field": None, "message": "Invalid input"}
    return JSONResponse(
        status_code=422,
        content={
            "error": first["message"],
            "code": "VALIDATION_ERROR",
            "details": {"field": first["field"], "errors": errors},
        },
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("integrity_error", path=request.url.path, error=str(exc.orig))
    conflict = Conflict("Resource already exists or violates a constraint")
    return JSONResponse(status_code=conflict.status_code, content=conflict.to_dict())


app.include_router(requests_router)
app.include_router(lawyers_router)
app.include_router(admin_router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "version": "0.1.0"}
