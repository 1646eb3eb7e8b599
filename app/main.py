"""
==============================================================================
CaféGestor POS - Application Entry Point
==============================================================================

FastAPI application for a café point of sale with:
- Product catalog management (search, add, edit, delete)
- Current order (cart) with totals
- Inventory import / export as JSON or CSV
- Startup reconciliation against the authoritative catalog

Usage:
------
    # Development
    uvicorn app.main:app --reload

    # Production
    uvicorn app.main:app --host 0.0.0.0 --port 8000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from app.config import get_settings
from app.core.exceptions import register_exception_handlers
from app.db import SqlKeyValueStore, get_database_manager, init_db
from app.api.router import api_router
from app.catalog.reconciler import init_reconciler
from app.catalog.snapshot import SnapshotSource
from app.catalog.store import init_catalog_store
from app.services.cart_service import init_cart_service


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    FastAPI application factory and manager.

    Handles application lifecycle including:
    - Startup (database, persisted state, reconciliation)
    - Middleware configuration
    - Router registration
    - Exception handler setup
    """

    def __init__(self):
        """Initialize the application."""
        self._settings = get_settings()
        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Point-of-sale catalog manager for a café",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Configure middleware
        self._configure_middleware(app)

        # Register exception handlers
        register_exception_handlers(app)

        # Register routers
        self._register_routers(app)

        # Register root endpoint
        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Application lifespan manager."""
        # Startup
        await self._startup()
        yield
        # Shutdown
        self._shutdown()

    async def _startup(self) -> None:
        """Application startup tasks."""
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name}")
        logger.info("=" * 60)

        # Initialize database
        init_db()

        # Restore persisted state, then reconcile
        await self._load_catalog()

        if not self._settings.suggestions_enabled:
            logger.info("Product suggestions disabled (no OPENAI_API_KEY)")

        logger.info("=" * 60)
        logger.info(f"✅ {self._settings.app_name} ready")
        logger.info(f"📍 Running on http://{self._settings.host}:{self._settings.port}")
        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")
        logger.info("=" * 60)

    def _shutdown(self) -> None:
        """Application shutdown tasks."""
        logger.info("🛑 Shutting down...")
        get_database_manager().dispose()
        logger.info("✅ Shutdown complete")

    async def _load_catalog(self) -> None:
        """Load persisted catalog and cart, then refresh from the snapshot."""
        persistence = SqlKeyValueStore()

        store = init_catalog_store(persistence, self._settings.catalog_storage_key)
        cart = init_cart_service(persistence, self._settings.cart_storage_key)
        logger.info(f"Restored {len(store)} products and {len(cart.lines())} cart lines")

        source = SnapshotSource(
            self._settings.authoritative_catalog,
            timeout=self._settings.snapshot_timeout_seconds,
        )
        reconciler = init_reconciler(store, source)
        logger.info(
            f"Authoritative catalog: {source.location} "
            f"({'remote' if self._settings.snapshot_is_remote else 'file'})"
        )

        if self._settings.refresh_on_startup:
            if await reconciler.refresh():
                logger.info(f"✅ Catalog ready with {len(store)} products")
            else:
                logger.warning(f"⚠️ Using saved catalog ({len(store)} products)")

    def _configure_middleware(self, app: FastAPI) -> None:
        """Configure application middleware."""
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _register_routers(self, app: FastAPI) -> None:
        """Register API routers."""
        app.include_router(api_router)

    def _register_root(self, app: FastAPI) -> None:
        """Register root endpoint."""

        @app.get("/", include_in_schema=False)
        async def root():
            """Redirect to the interactive API docs."""
            return RedirectResponse(url="/docs")

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

# Create application instance
application = Application()
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
