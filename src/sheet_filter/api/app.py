"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings, settings
from .routes import router


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app_settings = app_settings or settings
    app = FastAPI(
        title="sheet-filter",
        description="Upload a spreadsheet and download only the columns you pick",
        version=__version__,
        debug=app_settings.debug,
    )
    app.state.settings = app_settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # API routes
    app.include_router(router, prefix="/api")

    return app
