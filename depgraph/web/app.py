"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from depgraph import __version__
from depgraph.web.api_analysis import router as analysis_router


def create_app() -> FastAPI:
    app = FastAPI(title="depgraph", version=__version__)
    app.include_router(analysis_router)
    return app
