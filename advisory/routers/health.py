"""Liveness endpoint used by load balancers and the API client."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from advisory import __version__
from advisory.core.logger import get_logger
from advisory.dependencies import get_db_session

LOGGER = get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health", summary="Service health")
async def health(session: Session = Depends(get_db_session)) -> dict[str, object]:
    try:
        session.execute(text("SELECT 1"))
        database = "up"
    except SQLAlchemyError:
        LOGGER.exception("Database health check failed")
        database = "down"
    return {
        "status": "UP" if database == "up" else "DEGRADED",
        "database": database,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"),
    }


__all__ = ["router"]
