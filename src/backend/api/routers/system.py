"""
System API routes: table initialization, statistics and health.

These routes issue fixed statements and never involve the language model.
"""

import logging
from datetime import datetime, timezone

from api.dependencies import get_db
from entities.shared.protocols import SqlExecutor
from entities.user_store import ensure_users_table, fetch_user_stats, probe
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from models import FailureEnvelope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _failure(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=FailureEnvelope(
            error=str(exc) or "Unknown error", error_type="ExecutionFailure"
        ).model_dump(mode="json"),
    )


@router.post("/api/init")
async def init_database(db: SqlExecutor = Depends(get_db)) -> JSONResponse:
    """Re-run the idempotent ``users`` table setup."""
    try:
        await ensure_users_table(db)
    except Exception as exc:
        logger.exception("DB init failed")
        return _failure(exc)
    return JSONResponse(content={"success": True})


@router.get("/api/stats")
async def get_stats(db: SqlExecutor = Depends(get_db)) -> JSONResponse:
    """Return total, recent (7 days) and today's user counts."""
    try:
        stats = await fetch_user_stats(db)
    except Exception as exc:
        logger.exception("Stats query failed")
        return _failure(exc)
    return JSONResponse(content={"success": True, "stats": stats.model_dump()})


@router.get("/health")
async def health_check(db: SqlExecutor = Depends(get_db)) -> JSONResponse:
    """Health check endpoint with a database connectivity probe."""
    try:
        await probe(db)
    except Exception as exc:
        logger.warning("Health probe failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "unhealthy", "error": str(exc), "timestamp": _now()},
        )
    return JSONResponse(
        content={"status": "healthy", "timestamp": _now(), "database": "connected"}
    )
