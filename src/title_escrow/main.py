"""FastAPI application entry point for Title Escrow.

Lifecycle:
    1. Startup: Initialize logging; the escrow system is built by the factory.
    2. Running: Serve the REST API on a single Uvicorn process. Handlers are
       async and call the engine synchronously, so state-changing operations
       execute one at a time on the event loop.
    3. Shutdown: Log the final custodied balance.

Run with:
    uvicorn title_escrow.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from title_escrow import __version__
from title_escrow.bootstrap import EscrowSystem, build_system
from title_escrow.config import get_settings
from title_escrow.logging_config import get_logger, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    settings = get_settings()

    setup_logging(
        log_level=settings.app_log_level,
        json_logs=not settings.is_development,
        env=settings.app_env,
    )
    logger = get_logger(__name__)
    system: EscrowSystem = app.state.system
    logger.info(
        "app.started",
        env=settings.app_env,
        host=settings.app_host,
        port=settings.app_port,
        engine=system.engine.address,
    )

    yield

    logger.info("app.stopped", escrow_balance=system.engine.get_balance())


def create_app(system: EscrowSystem | None = None) -> FastAPI:
    """Application factory — creates and configures the FastAPI app.

    Args:
        system: Pre-built ledger/registry/engine. Built from settings when omitted.
    """
    settings = get_settings()

    app = FastAPI(
        title="Title Escrow",
        description=(
            "Custodial escrow for real-estate title sales between a seller, "
            "buyer, inspector and lender."
        ),
        version=__version__,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.system = system or build_system(settings=settings)

    # --- Middleware ---
    from title_escrow.api.middleware import setup_middleware

    setup_middleware(app)

    # --- REST API Routes ---
    from title_escrow.api.routes.escrow import router as escrow_router
    from title_escrow.api.routes.health import router as health_router
    from title_escrow.api.routes.ledger import router as ledger_router
    from title_escrow.api.routes.titles import router as titles_router

    app.include_router(health_router)
    app.include_router(titles_router)
    app.include_router(escrow_router)
    app.include_router(ledger_router)

    return app


# The app instance used by Uvicorn
app = create_app()
