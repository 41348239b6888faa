import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from app.core.config import Settings, get_settings
from app.core.exceptions import (
    unexpected_exception_handler,
    validation_exception_handler,
)
from app.core.logging import setup_logging
from app.database import TaskStore
from app.metrics.middleware import RequestMetricsMiddleware
from app.metrics.registry import MetricsRegistry
from app.routers import metrics, tasks

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None, task_store: TaskStore | None = None
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    metrics_registry = MetricsRegistry(
        refresh_interval=settings.metrics_interval_seconds
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = task_store or TaskStore.from_settings(settings)
        # an unreachable database is logged, not fatal
        await store.connect()
        app.state.task_store = store
        metrics_registry.start()
        yield
        await metrics_registry.stop()
        await store.close()

    app = FastAPI(
        title="Task Management API",
        description="Minimal task management API with MongoDB and Prometheus metrics",
        swagger_ui_parameters={"displayRequestDuration": True},
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.metrics = metrics_registry

    app.add_middleware(RequestMetricsMiddleware, metrics=metrics_registry)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(unexpected_exception_handler)

    # Include routers
    app.include_router(tasks.router)
    app.include_router(metrics.router)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Task Manager API is running"

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    return app


app = create_app()


def run():
    settings = get_settings()
    logger.info(f"Task Manager API listening at http://{settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
