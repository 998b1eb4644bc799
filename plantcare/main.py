"""
PlantCare API - Main application entry point.

Care scheduling for house and garden plants.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plantcare.core.config import get_settings
from plantcare.core.database import Database
from plantcare.notifications.reminder_service import ReminderService
from plantcare.store.data_store import DataStore
from plantcare.store.persistence import create_snapshot_store
from plantcare.plants.views import router as plants_router, care_router
from plantcare.spaces.views import router as spaces_router
from plantcare.routine.views import router as routine_router
from plantcare.settings.views import router as settings_router
from plantcare.ai.views import router as ai_router
from plantcare.store.views import router as backup_router

settings = get_settings()
API_PREFIX = "/api/v1"

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(store: Optional[DataStore] = None, ai_service=None) -> FastAPI:
    """
    Build the application.

    When ``store`` is given it is used as-is (already loaded); otherwise the
    store is built from settings and loaded on startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - startup and shutdown events."""
        # Startup
        uses_mongo = store is None and settings.STORAGE_BACKEND.strip().lower() == "mongo"
        if uses_mongo:
            await Database.connect()
        if store is None:
            app.state.store = DataStore(create_snapshot_store(), ReminderService())
            await app.state.store.load()
        else:
            app.state.store = store
        app.state.routine = None
        app.state.ai_service = ai_service
        logger.info(f"{settings.APP_NAME} started")
        yield
        # Shutdown
        if uses_mongo:
            await Database.disconnect()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        description="""
## PlantCare API

Keeps track of when each of your plants needs watering, misting, dusting
or rotating, and walks you through your spaces in a daily care routine.

### Features

- 🌱 **Plants & Care Steps**: Recurring care with per-step frequencies
- 🏠 **Spaces**: Indoor rooms with windows and outdoor zones
- 📅 **Due Care**: Overdue and due-today steps across all plants
- ✅ **Care Routine**: Room-by-room guided care with a summary
- 🤖 **AI Assistant**: Care recommendations and plant questions
- 💾 **Backup**: Export and restore everything as one snapshot

        """,
        lifespan=lifespan,
        docs_url=f"{API_PREFIX}/docs",
        redoc_url=f"{API_PREFIX}/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    routers = [
        plants_router,
        care_router,
        spaces_router,
        routine_router,
        settings_router,
        ai_router,
        backup_router,
    ]

    for router in routers:
        app.include_router(router, prefix=API_PREFIX)

    @app.get("/", tags=["Health"])
    async def root():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check."""
        return {
            "status": "healthy",
            "storage": settings.STORAGE_BACKEND,
            "database": "connected" if Database.client else "disconnected",
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()
