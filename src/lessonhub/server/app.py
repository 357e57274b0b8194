"""FastAPI application for the lessonhub server."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

try:
    from fastapi import FastAPI, Request
    from fastapi.responses import Response
except ImportError:
    raise ImportError(
        "FastAPI dependencies are required for the lessonhub server. "
        "Install them with: pip install lessonhub"
    )

from lessonhub import __version__
from lessonhub.exceptions import StoreError
from lessonhub.server.config import Settings, settings
from lessonhub.server.logging_config import setup_logging
from lessonhub.server.middleware import install_middleware
from lessonhub.server.models import HealthResponse
from lessonhub.server.responses import PrettyJSONResponse
from lessonhub.server.routes.images import router as images_router
from lessonhub.server.routes.lessons import router as lessons_router
from lessonhub.server.routes.orders import router as orders_router
from lessonhub.store.base import Store

setup_logging()
logger = logging.getLogger(__name__)


def build_store(cfg: Settings) -> Optional[Store]:
    """Create the MongoDB store from settings, or None if unconfigured."""
    if not cfg.database_url:
        return None
    from lessonhub.store.mongo import MongoStore

    return MongoStore(cfg.database_url, cfg.db_name)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the store on startup (unless one was injected) and close it on shutdown."""
    owned = False
    if app.state.store is None:
        store = build_store(settings)
        if store is None:
            logger.warning("No database configured; lesson endpoints will fail")
            yield
            return
        app.state.store = store
        owned = True
        logger.info("MongoDB client created for database %r", settings.db_name)

    try:
        await app.state.store.ensure_indexes()
    except StoreError:
        logger.exception("Error creating index")

    try:
        yield
    finally:
        if owned:
            await app.state.store.close()
            app.state.store = None


def create_app(store: Optional[Store] = None, images_dir: Optional[str] = None) -> FastAPI:
    """Build the application. ``store`` overrides the configured MongoDB store."""
    app = FastAPI(
        title="lessonhub",
        version=__version__,
        lifespan=lifespan,
        default_response_class=PrettyJSONResponse,
    )
    app.state.store = store
    app.state.images_dir = images_dir or settings.images_dir

    app.include_router(images_router)
    app.include_router(lessons_router)
    app.include_router(orders_router)

    install_middleware(app)

    # ── Health ─────────────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="success",
            message="Server is healthy and running!",
            timestamp=datetime.now(timezone.utc),
        )

    @app.get("/ready")
    async def ready(request: Request) -> PrettyJSONResponse:
        """Readiness check: that the store answers a ping."""
        checks = {"store": False}
        current = request.app.state.store
        if current is not None:
            checks["store"] = await current.ping()

        all_ok = all(checks.values())
        return PrettyJSONResponse(
            status_code=200 if all_ok else 503,
            content={"status": "ok" if all_ok else "not_ready", "checks": checks},
        )

    # ── Metrics ────────────────────────────────────────────────────

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        if not settings.metrics_enabled:
            return PrettyJSONResponse(status_code=404, content={"error": "metrics_disabled"})
        from lessonhub.server.metrics import collect_all

        return Response(content=collect_all(), media_type="text/plain; version=0.0.4; charset=utf-8")

    return app


app = create_app()
