"""FastAPI app factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from layerforge import __version__
from layerforge.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.layerforge_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Layerforge %s starting (%s)", __version__, settings.layerforge_env)
    yield
    from layerforge.dependencies import shutdown_exporter

    shutdown_exporter()
    logger.info("Render pool shut down")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Layerforge",
        description="Layered image compositing with snapping guides",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from layerforge.api.error_handlers import register_error_handlers
    from layerforge.api.router import api_router

    register_error_handlers(app)
    app.include_router(api_router)

    return app


app = create_app()
