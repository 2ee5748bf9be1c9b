"""
FastAPI application entrypoint for the call expert system.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from expert_system.api.routes import router as api_router
from expert_system.core.config import get_settings
from expert_system.core.logging import configure_logging
from expert_system.dependencies import get_session_manager


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Only a manager that was actually built can have poll loops in flight.
    if get_session_manager.cache_info().currsize:
        await get_session_manager().shutdown()


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Call Expert System",
        version="0.1.0",
        description=(
            "Submit call transcripts to the hosted analysis workflow and follow "
            "them to a finished report."
        ),
        lifespan=_lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
