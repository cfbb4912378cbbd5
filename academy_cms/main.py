import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from academy_cms import __version__
from academy_cms.api import create_api_router
from academy_cms.core.config import get_settings
from academy_cms.core.container import ApplicationContainer, get_container
from academy_cms.core.logging_config import configure_logging
from academy_cms.infrastructure.database import dispose_engine, init_db

logger = logging.getLogger(__name__)


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    settings = container.settings if container is not None else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.logging)
        if container is None:
            # Fails fast when the signing key is missing.
            get_container()
        await init_db()
        logger.info("%s %s started (%s)", settings.project_name, __version__, settings.environment)
        yield
        await dispose_engine()
        logger.info("%s stopped", settings.project_name)

    app = FastAPI(
        title=settings.project_name,
        description="Content management backend: accounts and role-based access",
        version=__version__,
        lifespan=lifespan,
    )

    if container is not None:
        app.dependency_overrides[get_container] = lambda: container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
