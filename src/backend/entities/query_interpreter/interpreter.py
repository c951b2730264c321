"""Query interpreter logic.

Turns a natural-language request into a ``StructuredQuery`` by asking
the text generator for a parameterised statement and validating the
reply's shape.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from entities.shared.errors import GenerationFailure, MalformedOutputFailure
from entities.shared.llm_reply import parse_json_reply
from entities.shared.protocols import TextGenerator
from models import StructuredQuery
from pydantic import ValidationError

logger = logging.getLogger(__name__)


def load_prompt() -> str:
    """Load the interpreter instructions from prompt.md in this folder."""
    prompt_path = Path(__file__).parent / "prompt.md"
    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt not found: {prompt_path}")
    return prompt_path.read_text(encoding="utf-8")


def _build_generation_prompt(request: str) -> str:
    """Build the per-call prompt for SQL generation.

    Args:
        request: The user's database request.

    Returns:
        A formatted prompt string for the generator.
    """
    schema = StructuredQuery.model_json_schema(by_alias=False)
    return (
        "Generate a SQL statement for the following request.\n"
        "\n"
        "## Request\n"
        f"{request}\n"
        "\n"
        "## Output Schema\n"
        f"{json.dumps(schema, indent=2)}\n"
        "\n"
        "Respond with a JSON object matching the schema above.\n"
    )


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())) or "(root)"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


async def interpret(request: str, generator: TextGenerator) -> StructuredQuery:
    """Interpret a natural-language request as a ``StructuredQuery``.

    Args:
        request: Free text such as ``"delete user 3"``.
        generator: Text generator configured with the interpreter prompt.

    Returns:
        The parsed query. Its shape is guaranteed; its safety is checked
        by the validator.

    Raises:
        GenerationFailure: If the generator call fails.
        ResponseParseFailure: If the reply is not a JSON object.
        MalformedOutputFailure: If the object does not match
            ``StructuredQuery`` (missing field, wrong type, unknown operation).
    """
    logger.info("Interpreting request: %s", request[:100])

    prompt = _build_generation_prompt(request)
    try:
        response_text = await generator.generate(prompt, StructuredQuery)
    except Exception as exc:
        logger.exception("SQL generation call failed")
        raise GenerationFailure(f"Language model request failed: {exc}") from exc

    payload = parse_json_reply(response_text)

    try:
        query = StructuredQuery.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Generated query has the wrong shape: %s", exc)
        raise MalformedOutputFailure(
            f"Generated query does not match the expected shape: {_describe_errors(exc)}"
        ) from exc

    logger.info(
        "Generated SQL: operation=%s statement=%s params=%d explanation=%s",
        query.operation.value,
        query.statement[:200],
        len(query.parameters),
        query.explanation[:100],
    )
    return query
