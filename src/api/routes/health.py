from __future__ import annotations

import time
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from src.api.deps import get_database
from src.core.config import get_settings
from src.infrastructure.db.gateway import Database

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database(db: Database) -> dict:
    """Ping the connection pool."""
    if not db.is_connected:
        return {"status": "error", "message": "connection pool is closed"}

    started = time.perf_counter()
    if not await db.ping():
        return {"status": "error", "message": "database did not answer"}
    return {
        "status": "ok",
        "dialect": db.engine.dialect.name,
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
    }


@router.get("/health", summary="Service health probe")
async def health_check(db: Database = Depends(get_database)) -> dict:  # noqa: B008
    """Return basic service and datastore status information."""
    settings = get_settings()
    database_status = await check_database(db)

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if database_status["status"] == "ok" else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {"database": database_status},
    }
    logger.info("health_probe", **payload)
    return payload
