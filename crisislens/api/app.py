"""FastAPI application wiring for CrisisLens."""
from typing import Optional

from fastapi import FastAPI

from crisislens import __version__
from crisislens.core.config import Settings
from crisislens.core.logging import get_logger
from crisislens.api.v1.crisis import routes as crisis_routes
from crisislens.services.pipeline import CrisisPipeline, build_pipeline

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    pipeline: Optional[CrisisPipeline] = None,
) -> FastAPI:
    """
    Create a configured FastAPI instance.

    Args:
        settings: Settings used to build the pipeline when none is given
        pipeline: Pre-built pipeline (tests inject one wired to static data)
    """
    app = FastAPI(title="CrisisLens", version=__version__)

    if pipeline is not None or settings is not None:
        configured = pipeline or build_pipeline(settings)
        app.dependency_overrides[crisis_routes.get_pipeline] = lambda: configured

    app.include_router(crisis_routes.router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    logger.info("CrisisLens API initialized")
    return app
