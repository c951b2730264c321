"""CommandOrchestrator: entry point for free-text user commands.

Classifies each utterance as conversation or a database request, runs
database requests through interpret → validate → execute, and shapes
the outcome into a single response envelope.

The orchestrator holds only its injected collaborators; no state is
carried between requests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from entities.query_executor.executor import execute_query
from entities.query_interpreter.interpreter import interpret
from entities.query_validator.validator import validate_query
from entities.shared.errors import (
    GenerationFailure,
    MalformedOutputFailure,
    PipelineError,
    ValidationFailure,
)
from entities.shared.llm_reply import parse_json_reply
from entities.workflow.clients import PipelineClients
from models import (
    CommandEnvelope,
    Conversational,
    ConversationReply,
    DatabaseIntent,
    FailureEnvelope,
    IntentClassification,
)
from pydantic import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONVERSATION_REPLY = (
    "Hello! I'm your user management assistant. I can help you create, read, "
    "update, delete users, or get statistics. What would you like to do?"
)


def load_orchestrator_prompt() -> str:
    """Load the CommandOrchestrator instructions prompt."""
    prompt_path = Path(__file__).parent / "prompt.md"
    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt not found: {prompt_path}")
    return prompt_path.read_text(encoding="utf-8")


def _build_classification_prompt(utterance: str) -> str:
    schema = IntentClassification.model_json_schema()
    return (
        "Classify this user message and respond with JSON only.\n"
        "\n"
        f"User message: {utterance}\n"
        "\n"
        "## Output Schema\n"
        f"{json.dumps(schema, indent=2)}\n"
        "\n"
        "JSON response:"
    )


class CommandOrchestrator:
    """Drives one utterance through classification and the SQL pipeline.

    Responsibilities:
    1. Classify the utterance (conversation vs. database request)
    2. For database requests: interpret, validate, then execute
    3. Convert every pipeline failure into a ``FailureEnvelope``
    """

    def __init__(self, clients: PipelineClients) -> None:
        """Initialize the orchestrator.

        Args:
            clients: Generators and database handle shared by all requests.
        """
        self.clients = clients

    async def classify(self, utterance: str) -> Conversational | DatabaseIntent:
        """Decide what the utterance asks for.

        One classification call is made. For database requests the
        interpreter is then invoked with the original utterance.

        Returns:
            ``Conversational`` with a reply, or ``DatabaseIntent`` with the
            interpreted ``StructuredQuery``.

        Raises:
            GenerationFailure: A generator call failed.
            ResponseParseFailure: A generator reply was not a JSON object.
            MalformedOutputFailure: A generator reply had the wrong shape.
        """
        prompt = _build_classification_prompt(utterance)
        try:
            response_text = await self.clients.orchestrator_generator.generate(
                prompt, IntentClassification
            )
        except Exception as exc:
            logger.exception("Intent classification call failed")
            raise GenerationFailure(f"Language model request failed: {exc}") from exc

        payload = parse_json_reply(response_text)
        try:
            classification = IntentClassification.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Classification reply has the wrong shape: %s", exc)
            raise MalformedOutputFailure(
                f"Intent classification does not match the expected shape: {payload}"
            ) from exc

        logger.info("Classified intent: %s", classification.intent)

        if classification.intent == "conversation":
            message = (classification.message or "").strip() or DEFAULT_CONVERSATION_REPLY
            return Conversational(message=message)

        query = await interpret(utterance, self.clients.interpreter_generator)
        return DatabaseIntent(query=query)

    async def handle(self, utterance: str) -> CommandEnvelope:
        """Handle one raw utterance.

        Returns:
            ``ConversationReply``, ``ExecutionResult`` or ``FailureEnvelope``.
            Pipeline failures never propagate as exceptions.
        """
        text = (utterance or "").strip()
        logger.info("Received command: %s", text[:200])

        if not text:
            return FailureEnvelope.from_error(ValidationFailure("Command input is empty"))

        try:
            decision = await self.classify(text)
            if isinstance(decision, Conversational):
                return ConversationReply(message=decision.message)
            query = validate_query(decision.query)
        except PipelineError as exc:
            logger.warning("Command rejected (%s): %s", type(exc).__name__, exc)
            return FailureEnvelope.from_error(exc)

        result = await execute_query(query, self.clients.db)
        logger.info("Command finished: success=%s", result.success)
        return result
