"""Health check for load balancers."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from trestle.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
async def health(request: Request):
    """Report the host's domains and whether the database answers."""
    container = request.app.state.container
    database = "ok"
    try:
        async with container.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("health.database_unavailable", error=str(exc))
        database = "unavailable"

    healthy = database == "ok"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "degraded",
            "app": container.settings.APP_NAME,
            "version": container.settings.APP_VERSION,
            "domains": container.settings.HOST_DOMAINS,
            "database": database,
        },
    )
