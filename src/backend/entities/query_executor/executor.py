"""Query executor logic.

Binds a validated ``StructuredQuery`` to the database and normalizes
the outcome into an ``ExecutionResult`` or a ``FailureEnvelope``.
"""

from __future__ import annotations

import logging

from entities.shared.errors import ExecutionFailure
from entities.shared.protocols import SqlExecutor
from models import ExecutionResult, FailureEnvelope, QueryOperation, StructuredQuery

logger = logging.getLogger(__name__)

_VERBS: dict[QueryOperation, str] = {
    QueryOperation.SELECT: "Retrieved",
    QueryOperation.INSERT: "Inserted",
    QueryOperation.UPDATE: "Updated",
    QueryOperation.DELETE: "Deleted",
}


def _summarize(operation: QueryOperation, count: int) -> str:
    noun = "user" if count == 1 else "users"
    return f"{_VERBS[operation]} {count} {noun}"


async def execute_query(
    query: StructuredQuery,
    db: SqlExecutor,
) -> ExecutionResult | FailureEnvelope:
    """Execute a validated query.

    Parameters are bound positionally by the database driver; the
    statement text is never concatenated with values.

    Args:
        query: A query that passed ``validate_query``.
        db: Database collaborator.

    Returns:
        ``ExecutionResult`` with the returned rows, or a
        ``FailureEnvelope`` carrying the database's error message.
    """
    try:
        rows = await db.query(query.statement, list(query.parameters))
    except Exception as exc:
        logger.exception("SQL execution error for statement: %s", query.statement[:200])
        return FailureEnvelope.from_error(ExecutionFailure(str(exc)))

    count = len(rows)
    return ExecutionResult(
        rows=rows,
        count=count,
        operation=query.operation,
        message=_summarize(query.operation, count),
    )
