"""FastAPI application setup."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from survey_service.api.controller import response_router, survey_router
from survey_service.api.dependencies import close_services, get_survey_repository
from survey_service.config import get_config
from survey_service.ingestion import SurveySeedError, seed_surveys_from_directory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed surveys from markdown before serving, when enabled."""
    config = get_config()
    if config.ingestion.seed_on_startup:
        try:
            report = seed_surveys_from_directory(
                Path(config.ingestion.markdown_dir),
                get_survey_repository(),
            )
            logger.info(f"Surveys seeded: {report.summary()}")
        except SurveySeedError as e:
            # Serve whatever is already stored
            logger.error(f"Error seeding surveys: {e}")
    yield
    close_services()


def create_app(allowed_origins: Optional[List[str]] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Survey API",
        description="REST API for markdown-seeded surveys and their responses",
        version="1.0.0",
        lifespan=lifespan,
    )

    if allowed_origins is None:
        allowed_origins = get_config().api.allowed_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(survey_router)
    app.include_router(response_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
