"""Pure query validation logic.

Checks a ``StructuredQuery`` against the pipeline's invariants before
any execution is attempted. No I/O and no framework dependencies,
suitable for direct unit testing.
"""

from __future__ import annotations

import logging
import re

from entities.shared.errors import (
    EmptyStatementFailure,
    ParameterMismatchFailure,
    UnsupportedOperationFailure,
)
from models import QueryOperation, StructuredQuery

logger = logging.getLogger(__name__)

_PLACEHOLDER_PATTERN = re.compile(r"\$(\d+)")

# Single-quoted SQL string literal, with '' escapes
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^']|'')*'")

_LEADING_WORD_PATTERN = re.compile(r"^\s*\(?\s*([A-Za-z]+)")

_TOKEN_PATTERN = re.compile(r"\(|\)|[A-Za-z_]+")

_WRITE_VERB_PATTERN = re.compile(r"\b(?:DO\s+)?(INSERT|UPDATE|DELETE)\b", re.IGNORECASE)

_ALLOWED_OPERATIONS = frozenset(op.value for op in QueryOperation)


def placeholder_indices(statement: str) -> set[int]:
    """Return the set of ``$n`` indices referenced in *statement*."""
    return {int(match) for match in _PLACEHOLDER_PATTERN.findall(statement)}


def find_inlined_literals(statement: str) -> list[str]:
    """Return quoted string literals found in *statement*.

    A literal suggests a value was written into the SQL text instead of
    being bound as a parameter.
    """
    return _STRING_LITERAL_PATTERN.findall(statement)


def _strip_literals(statement: str) -> str:
    return _STRING_LITERAL_PATTERN.sub("''", statement)


def _check_operation(query: StructuredQuery) -> None:
    if not isinstance(query.operation, QueryOperation):
        raise UnsupportedOperationFailure(
            f"Unsupported operation: {query.operation!r}. "
            f"Allowed operations: {', '.join(sorted(_ALLOWED_OPERATIONS))}"
        )


def _check_not_empty(query: StructuredQuery) -> None:
    if not query.statement or not query.statement.strip():
        raise EmptyStatementFailure("SQL statement is empty")


def _main_verb_after_ctes(sql: str) -> str:
    """Return the first statement verb at parenthesis depth zero."""
    depth = 0
    for token in _TOKEN_PATTERN.findall(sql):
        if token == "(":
            depth += 1
        elif token == ")":
            depth -= 1
        elif depth == 0 and token.upper() in _ALLOWED_OPERATIONS:
            return token.upper()
    return ""


def _write_verbs(sql: str) -> set[str]:
    """Return INSERT/UPDATE/DELETE keywords in *sql*, ignoring ``DO UPDATE``."""
    return {
        match.group(1).upper()
        for match in _WRITE_VERB_PATTERN.finditer(sql)
        if not match.group(0).upper().startswith("DO")
    }


def _check_statement_kind(query: StructuredQuery) -> None:
    """Require a single statement whose verb matches ``operation``."""
    sql = _strip_literals(query.statement).strip().rstrip(";").strip()

    if ";" in sql:
        raise UnsupportedOperationFailure(
            "Multiple statements detected (semicolon found within statement)"
        )

    expected = query.operation.value
    match = _LEADING_WORD_PATTERN.match(sql)
    verb = match.group(1).upper() if match else ""

    if verb == "WITH":
        main_verb = _main_verb_after_ctes(sql)
        if main_verb != expected:
            raise UnsupportedOperationFailure(
                f"Statement after WITH is {main_verb or 'UNKNOWN'}, but operation is {expected}"
            )
        # Data-modifying CTEs must do what the operation says
        stray = _write_verbs(sql) - {expected}
        if stray:
            raise UnsupportedOperationFailure(
                f"WITH clause contains {', '.join(sorted(stray))}, but operation is {expected}"
            )
        return

    if verb != expected:
        raise UnsupportedOperationFailure(
            f"Statement type is {verb or 'UNKNOWN'}, but operation is {expected}"
        )


def _check_parameters(query: StructuredQuery) -> None:
    referenced = placeholder_indices(_strip_literals(query.statement))
    expected = set(range(1, len(query.parameters) + 1))

    if referenced == expected:
        return

    missing = sorted(expected - referenced)
    unknown = sorted(referenced - expected)
    details: list[str] = []
    if unknown:
        details.append(
            "placeholders without a parameter: " + ", ".join(f"${i}" for i in unknown)
        )
    if missing:
        details.append("unused parameters at positions: " + ", ".join(str(i) for i in missing))
    raise ParameterMismatchFailure(
        f"Statement references {len(referenced)} placeholder(s) but "
        f"{len(query.parameters)} parameter(s) were supplied ({'; '.join(details)})"
    )


def _check_inlined_literals(query: StructuredQuery) -> None:
    """Advisory only: log quoted literals, never reject."""
    literals = find_inlined_literals(query.statement)
    if literals:
        logger.warning(
            "Statement contains %d quoted literal(s) that may be inlined values: %s",
            len(literals),
            ", ".join(lit[:40] for lit in literals[:5]),
        )


def validate_query(query: StructuredQuery) -> StructuredQuery:
    """Validate a structured query before execution.

    Checks run in order and stop at the first failure:

    1. operation is one of SELECT, INSERT, UPDATE, DELETE
    2. statement is non-empty
    3. statement is a single statement whose verb matches the operation
    4. placeholders are exactly ``$1..$N`` for ``N`` parameters
    5. quoted literals in the statement are logged (advisory)

    Args:
        query: The interpreter's output.

    Returns:
        The same ``query`` object, unchanged.

    Raises:
        UnsupportedOperationFailure: Operation outside the closed set, or
            statement kind inconsistent with it.
        EmptyStatementFailure: Blank statement.
        ParameterMismatchFailure: Placeholder/parameter disagreement.
    """
    _check_operation(query)
    logger.info(
        "Validating %s statement: %s",
        query.operation.value,
        query.statement[:200] if query.statement else "(empty)",
    )

    _check_not_empty(query)
    _check_statement_kind(query)
    _check_parameters(query)
    _check_inlined_literals(query)

    logger.info("Validation passed (%d parameters)", len(query.parameters))
    return query
