"""Protocol interfaces for I/O boundaries.

These protocols enable dependency injection for testability.
Production implementations wrap the agent framework and the asyncpg
pool; test fakes return canned data with zero network access.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class TextGenerator(Protocol):
    """Produces text from a prompt, steered toward a JSON output schema.

    The reply is untrusted: callers must parse and validate it.
    """

    async def generate(self, prompt: str, schema: type[BaseModel]) -> str:
        """Generate a reply for *prompt*.

        Args:
            prompt: Per-call prompt text.
            schema: Pydantic model describing the expected JSON reply.

        Returns:
            Raw reply text.
        """
        ...


@runtime_checkable
class SqlExecutor(Protocol):
    """Executes a parameterised statement against the database.

    Raises on failure with a human-readable message.
    """

    async def query(
        self,
        statement: str,
        parameters: Sequence[Any] = (),
    ) -> list[dict[str, Any]]:
        """Execute *statement* with positional ``$n`` bindings.

        Args:
            statement: SQL text with ``$1``, ``$2``, ... placeholders.
            parameters: Values bound to the placeholders, in order.

        Returns:
            Result rows as column-name → value mappings.
        """
        ...
