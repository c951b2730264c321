"""
Shared PostgreSQL client for executing statements.

This module provides a reusable async client backed by an ``asyncpg``
connection pool. One client is created at process start, injected into
the pipeline, and closed at shutdown.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

import asyncpg

logger = logging.getLogger(__name__)


def _json_safe(value: Any) -> Any:  # noqa: ANN401
    """Convert a column value into something JSON can carry."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def record_to_dict(record: asyncpg.Record | dict[str, Any]) -> dict[str, Any]:
    """Convert one result row into a column-name → JSON-safe value mapping."""
    return {key: _json_safe(value) for key, value in dict(record).items()}


_INTEGER_TYPES = frozenset({"int2", "int4", "int8", "oid"})
_FLOAT_TYPES = frozenset({"float4", "float8"})
_TEXT_TYPES = frozenset({"text", "varchar", "bpchar", "name", "citext"})
_TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1", "on"})


def coerce_parameter(value: Any, type_name: str) -> Any:  # noqa: ANN401, PLR0911
    """
    Convert a JSON-shaped value to the Python type asyncpg expects.

    Parameters generated by the language model are strings, numbers or
    booleans, while asyncpg encodes binary values and needs, for example,
    a ``datetime`` for a ``timestamp`` placeholder. Values that cannot be
    converted are returned unchanged so the database reports the error.

    Args:
        value: The bound value as produced by the interpreter.
        type_name: PostgreSQL type name inferred for the placeholder.

    Returns:
        The converted value.
    """
    if value is None:
        return None

    try:
        if type_name in _TEXT_TYPES:
            return value if isinstance(value, str) else str(value)
        if not isinstance(value, str):
            if type_name in _FLOAT_TYPES and isinstance(value, int):
                return float(value)
            if type_name == "numeric" and isinstance(value, float):
                return Decimal(str(value))
            return value

        text = value.strip()
        if type_name in _INTEGER_TYPES:
            return int(text)
        if type_name in _FLOAT_TYPES:
            return float(text)
        if type_name == "numeric":
            return Decimal(text)
        if type_name == "bool":
            return text.lower() in _TRUE_STRINGS
        if type_name == "date":
            return date.fromisoformat(text[:10])
        if type_name in ("timestamp", "timestamptz"):
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        if type_name in ("time", "timetz"):
            return time.fromisoformat(text)
        if type_name == "uuid":
            return UUID(text)
    except (ValueError, ArithmeticError):
        logger.warning("Could not convert parameter %r to %s", value, type_name)
    return value


class PostgresClient:
    """
    Async context manager owning an ``asyncpg`` pool.

    Satisfies the ``SqlExecutor`` protocol. Every statement acquires a
    pooled connection for its own duration only. If the pool could not be
    created at startup, the next ``query()`` tries again.

    Usage:
        async with PostgresClient(dsn) as client:
            rows = await client.query("SELECT * FROM users WHERE id = $1", [3])
    """

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float | None = 30.0,
    ):
        """
        Initialize the client. No connection is opened until ``open()``.

        Args:
            dsn: PostgreSQL connection string.
            min_size: Connections opened eagerly by the pool.
            max_size: Upper bound on pooled connections.
            command_timeout: Per-statement timeout in seconds.
        """
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None
        self._open_lock = asyncio.Lock()

    async def open(self) -> "PostgresClient":
        """Create the connection pool if it does not exist yet."""
        if not self.dsn:
            raise ValueError("DATABASE_URL environment variable is required")
        async with self._open_lock:
            if self._pool is None:
                self._pool = await asyncpg.create_pool(
                    dsn=self.dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=self.command_timeout,
                )
                logger.info(
                    "Database pool opened (min=%d, max=%d)", self.min_size, self.max_size
                )
        return self

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    async def __aenter__(self):
        """Open the pool."""
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close the pool."""
        await self.close()

    async def query(
        self,
        statement: str,
        parameters: Sequence[Any] = (),
    ) -> list[dict[str, Any]]:
        """
        Execute a statement with positional bindings and return its rows.

        The statement is prepared first so each parameter can be converted
        to the type PostgreSQL inferred for its placeholder.

        Args:
            statement: SQL text with ``$1``, ``$2``, ... placeholders.
            parameters: Values bound to the placeholders, in order.

        Returns:
            One dictionary per row with JSON-safe values. Statements that
            return no rows yield an empty list.

        Raises:
            ValueError: If no DSN is configured.
            OSError: If the database is unreachable.
            asyncpg.PostgresError: If the database rejects the statement.
        """
        if self._pool is None:
            logger.info("Database pool not established, connecting")
            await self.open()

        logger.info("Executing SQL: %s (%d params)", statement[:200], len(parameters))

        async with self._pool.acquire() as connection:
            prepared = await connection.prepare(statement)
            types = prepared.get_parameters()
            bound = [
                coerce_parameter(value, types[index].name) if index < len(types) else value
                for index, value in enumerate(parameters)
            ]
            records = await prepared.fetch(*bound)

        rows = [record_to_dict(record) for record in records]
        logger.info("Statement executed successfully. Returned %d rows.", len(rows))
        return rows
