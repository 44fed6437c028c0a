"""FastAPI application serving scrape jobs."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI  # type: ignore[import-not-found]

from staxpress.allow_list import load_allow_list
from staxpress.config import Settings
from staxpress.scraper import ConcurrencyGovernor, EngineManager
from staxpress.web.routes import scrape

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the web application.

    The allow-list is loaded and the shared browser manager created when the
    application starts; the browser is released on shutdown.

    Args:
        settings: Runtime configuration; read from the environment when
            omitted.

    Returns:
        Configured FastAPI application.
    """

    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # A broken stylesheet is fatal to startup.
        app.state.allow_list = load_allow_list(settings.stylesheet)
        app.state.governor = ConcurrencyGovernor(
            settings.job_capacity,
            settings.task_capacity,
            settings.retry_after,
        )

        async with EngineManager() as engine:
            app.state.engine = engine
            yield
        logger.info("Shutdown complete")

    app = FastAPI(title="staxpress", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(scrape.router)
    return app


app = create_app()
