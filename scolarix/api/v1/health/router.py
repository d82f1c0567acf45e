import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.core.config import settings
from scolarix.core.logging import get_logger
from scolarix.db.session import get_db

router = APIRouter(tags=["health"])
logger = get_logger("health")


@router.get("/health")
async def health(request: Request, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """Liveness plus a database ping. Always 200; status is DEGRADED when the database is down."""
    database = "UP"
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        database = "DOWN"
        logger.error("health check: database ping failed: %s", exc)

    started_at = getattr(request.app.state, "started_at", None)
    return {
        "status": "UP" if database == "UP" else "DEGRADED",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "uptime": round(time.monotonic() - started_at, 3) if started_at is not None else 0.0,
        "database": database,
    }


@router.get("/version")
async def version(request: Request) -> Dict[str, Any]:
    return {
        "name": "SCOLARIX API",
        "version": request.app.version,
        "status": "stable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
