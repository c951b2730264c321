"""
FastAPI server for the natural-language user console.

This module handles application setup, lifespan management, and middleware configuration.
Route handlers are organized in the routers/ package.

Process-scoped resources:
- PostgresClient: one asyncpg pool, opened at startup and closed at shutdown
- CommandOrchestrator: stateless, built once over the pool and the LLM agents
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from api.routers import command_router, system_router
from config.settings import get_settings
from dotenv import load_dotenv
from entities.command_orchestrator import CommandOrchestrator
from entities.shared.sql_client import PostgresClient
from entities.user_store import ensure_users_table
from entities.workflow import create_pipeline_clients
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from models import FailureEnvelope
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

settings = get_settings()

# Configure logging - use force=True to prevent duplicate handlers
logger = logging.getLogger(__name__)
logging.basicConfig(level=settings.log_level.upper(), force=True)

# Reduce noise from Azure SDK and other libraries
logging.getLogger("azure").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncpg").setLevel(logging.WARNING)
# Reduce agent_framework verbosity (it logs all message content at INFO level)
logging.getLogger("agent_framework").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Opens the database pool, makes sure the ``users`` table exists and
    builds the orchestrator on startup; closes the pool on shutdown.
    A database that is unreachable at startup is logged and retried on
    the first statement, so ``/health`` can report it.
    """
    logger.info("User management API starting")

    db = PostgresClient(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=settings.db_command_timeout,
    )

    try:
        await db.open()
        await ensure_users_table(db)
    except Exception:
        logger.exception("Failed to initialize database. Server may not work properly.")

    clients = create_pipeline_clients(settings, db)
    application.state.db = db
    application.state.orchestrator = CommandOrchestrator(clients)

    logger.info("Command endpoint ready: POST /api/command")
    try:
        yield
    finally:
        application.state.orchestrator = None
        application.state.db = None
        await db.close()

    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(title="User Management Console", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers
app.include_router(command_router)
app.include_router(system_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return a failure envelope for a missing or malformed request body."""
    details = "; ".join(
        f"{'.'.join(str(p) for p in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    logger.warning("Rejected request body: %s", details)
    envelope = FailureEnvelope(
        error=f"Invalid request: {details}", error_type="RequestValidationError"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope.model_dump(mode="json"),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return a failure envelope instead of FastAPI's ``{"detail": ...}`` body."""
    envelope = FailureEnvelope(error=str(exc.detail), error_type="HTTPException")
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope.model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


if __name__ == "__main__":
    uvicorn.run("api.main:app", host=settings.api_host, port=settings.api_port)
