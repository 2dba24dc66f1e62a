"""Trestle API: main application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trestle.api import dispatch
from trestle.api.errors import register_exception_handlers
from trestle.api.middleware import TraceMiddleware
from trestle.api.routes import health, versions
from trestle.container import build_container
from trestle.core.config import Settings, settings as default_settings
from trestle.core.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build one host process serving the domains named in settings.HOST_DOMAINS."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    container = build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("app.started", domains=settings.HOST_DOMAINS)
        yield
        await container.engine.dispose()
        logger.info("app.stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=(
            "Construction operations API. Projects, materials and logistics, "
            "each resource served in several side-by-side versions."
        ),
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.container = container

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "api-version",
            "api-supported-versions",
            "api-deprecated-versions",
            "Deprecation",
            "Location",
        ],
    )
    app.add_middleware(TraceMiddleware)

    register_exception_handlers(app)

    # Routes
    app.include_router(health.router, tags=["health"])
    app.include_router(versions.router, prefix="/api", tags=["versions"])
    app.include_router(dispatch.router, tags=["resources"])
    return app


app = create_app()
