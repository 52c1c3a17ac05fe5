"""AIXchange API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map AIXchangeError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import aixchange.infrastructure.database as db_module
from aixchange.api.error_handlers import register_error_handlers
from aixchange.api.routes import (
    admin_events, admin_solutions, admin_users, auth, events, health, media, solutions,
    stats,
)
from aixchange.config import get_settings
from aixchange.infrastructure.observability import RequestLoggingMiddleware, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db_module.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("AIXchange API started")
    yield
    if db_module.db_manager is not None:
        await db_module.db_manager.dispose()
    logger.info("AIXchange API shutting down")


app = FastAPI(title="AIXchange API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(solutions.router)
app.include_router(events.router)
app.include_router(admin_solutions.router)
app.include_router(admin_events.router)
app.include_router(admin_users.router)
app.include_router(stats.router)
app.include_router(media.router)
