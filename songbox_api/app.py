import logging
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .routes.core import router as core_router
from .routes.ui import router as ui_router
from .service import SongQueryService
from .storage import SongStore

logger = logging.getLogger(__name__)

def create_app(store: Optional[SongStore] = None) -> FastAPI:
    """Build the API. Without a store, one is opened from SONGBOX_DATABASE_URL."""
    if store is None:
        store = SongStore.from_url(config.DATABASE_URL)
    store.create_schema()

    app = FastAPI(title="Songbox API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.state.store = store
    app.state.service = SongQueryService(store)
    app.include_router(core_router)
    app.include_router(ui_router)
    logger.info("Songbox API ready")
    return app
