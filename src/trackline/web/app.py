"""FastAPI application for the web UI."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from trackline.core.config import Config
from trackline.core.logger import log_info
from trackline.services.history import HistoryStream
from trackline.services.identity import OperatorIdentity
from trackline.services.positioning import ReportedPositionProvider
from trackline.services.sample_source import SampleSource
from trackline.services.store import JsonLocationStore
from trackline.services.tracking import TrackingController
from trackline.services.window_filter import WindowFilter
from trackline.web.state import app_state
from trackline.web.routes import router


def create_app(config: Config) -> FastAPI:
    """Create and configure FastAPI app."""

    config.ensure_dirs()

    store = JsonLocationStore(config.store_file)
    provider = ReportedPositionProvider() if config.positioning_enabled else None
    identity = OperatorIdentity(config.operator_id, config.operator_token)
    source = SampleSource(provider, config.position_options())

    # Store config and components in app state
    app_state.config = config
    app_state.store = store
    app_state.provider = provider
    app_state.identity = identity
    app_state.controller = TrackingController(
        source=source,
        store=store,
        identity=identity,
        period=config.sample_period,
    )
    app_state.stream = HistoryStream(store)
    app_state.window_filter = WindowFilter(config.tzinfo())
    app_state.background_tasks = set()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_state.stream.subscribe()
        log_info(f"serving history from {config.store_file}")
        try:
            yield
        finally:
            await app_state.controller.shutdown()
            if app_state.provider is not None:
                app_state.provider.report_error("Server shutting down")
            if app_state.background_tasks:
                await asyncio.gather(*app_state.background_tasks, return_exceptions=True)
            app_state.stream.unsubscribe()

    app = FastAPI(
        title="Trackline",
        description="Live location tracking with a filterable history map",
        lifespan=lifespan,
    )

    # Include API routes
    app.include_router(router)

    @app.get("/")
    async def index():
        """Service overview."""
        return {
            "name": "trackline",
            "points": len(app_state.stream.snapshot),
            "tracking": app_state.controller.status.label,
        }

    return app
