"""Parsing of raw text-generator replies into JSON objects."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from entities.shared.errors import ResponseParseFailure

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def _strip_wrappers(text: str) -> str:
    """Remove markdown code fences around a reply, if any."""
    fenced = _FENCE_PATTERN.search(text)
    if fenced:
        return fenced.group(1).strip()
    return text.strip()


def parse_json_reply(response_text: str) -> dict[str, Any]:
    """Parse the generator's reply as a JSON object.

    Attempts direct parsing after stripping code fences, then falls back
    to the outermost ``{...}`` span when the object is wrapped in prose.

    Args:
        response_text: The raw text returned by the generator.

    Returns:
        The decoded JSON object.

    Raises:
        ResponseParseFailure: If no JSON object can be decoded.
    """
    text = _strip_wrappers(response_text or "")
    if not text:
        raise ResponseParseFailure("Empty response from language model")

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            logger.warning("Reply is not JSON: %s", text[:200])
            raise ResponseParseFailure(f"Failed to parse model response: {exc}") from exc
        try:
            parsed = json.loads(text[start:end])
        except json.JSONDecodeError as inner:
            logger.warning("Reply is not JSON: %s", text[:200])
            raise ResponseParseFailure(f"Failed to parse model response: {inner}") from inner

    if not isinstance(parsed, dict):
        raise ResponseParseFailure(
            f"Expected a JSON object from model, got {type(parsed).__name__}"
        )
    return parsed
