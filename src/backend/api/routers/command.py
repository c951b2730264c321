"""
Command API route.

Accepts one free-text utterance and returns one JSON envelope. Every
response carries ``success``; failures are never returned as raw text.
"""

import logging

from api.dependencies import get_orchestrator
from entities.command_orchestrator import CommandOrchestrator
from entities.shared.errors import (
    GenerationFailure,
    MalformedOutputFailure,
    ResponseParseFailure,
)
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from models import FailureEnvelope
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["command"])

# Envelopes produced by a failing or unparseable language model
_COLLABORATOR_FAILURES = frozenset(
    cls.__name__ for cls in (GenerationFailure, MalformedOutputFailure, ResponseParseFailure)
)


class CommandRequest(BaseModel):
    """Body of ``POST /api/command``."""

    input: str = Field(description="The user's natural-language command")


@router.post("/command")
async def run_command(
    body: CommandRequest,
    orchestrator: CommandOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """
    Run a natural-language command through the pipeline.

    Returns 200 with the envelope, or 500 when the language model failed
    or replied with something that could not be parsed.
    """
    try:
        envelope = await orchestrator.handle(body.input)
    except Exception as exc:
        logger.exception("Command error")
        envelope = FailureEnvelope(error=str(exc) or "Failed to process command")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=envelope.model_dump(mode="json"),
        )

    status_code = status.HTTP_200_OK
    if isinstance(envelope, FailureEnvelope) and envelope.error_type in _COLLABORATOR_FAILURES:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json"))
