"""
FastAPI dependencies for shared, process-scoped resources.
"""

import logging

from entities.command_orchestrator import CommandOrchestrator
from entities.shared.protocols import SqlExecutor
from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)


def get_db(request: Request) -> SqlExecutor:
    """
    Get the database client from app state.

    Raises HTTPException 503 if not initialized.
    """
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise HTTPException(status_code=503, detail="Database client not initialized")
    return db


def get_orchestrator(request: Request) -> CommandOrchestrator:
    """
    Get the command orchestrator from app state.

    Raises HTTPException 503 if not initialized.
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Command orchestrator not initialized")
    return orchestrator
