"""FireCheck API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Error handlers map FireCheckError -> structured JSON responses (api/error_handlers.py)
    - CORS configured from settings (not hardcoded)
    - One store session per process: opened by the lifespan, closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: the store session is an async context manager
      (services/composition.py) and the lifespan simply enters it
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from firecheck.api.error_handlers import register_error_handlers
from firecheck.api.routes import health, history, inspections, selection, sites
from firecheck.config import get_settings
from firecheck.infrastructure.observability import setup_logging
from firecheck.services.composition import open_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    async with open_store(settings) as store:
        app.state.store = store
        logger.info("FireCheck API started")
        yield
        app.state.store = None
    logger.info("FireCheck API shut down")


app = FastAPI(title="FireCheck API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(sites.router)
app.include_router(inspections.router)
app.include_router(history.router)
app.include_router(selection.router)

register_error_handlers(app)
