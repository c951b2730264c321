"""Unit tests for the pure validate_query() function.

Tests cover the operation whitelist, empty statements, statement kind,
placeholder/parameter agreement, and the advisory literal check.
"""

from __future__ import annotations

import logging

import pytest
from entities.query_validator.validator import (
    find_inlined_literals,
    placeholder_indices,
    validate_query,
)
from entities.shared.errors import (
    EmptyStatementFailure,
    ParameterMismatchFailure,
    UnsupportedOperationFailure,
)
from models import QueryOperation, StructuredQuery
from pydantic import ValidationError


def _make_query(
    statement: str,
    parameters: list | None = None,
    operation: str = "SELECT",
) -> StructuredQuery:
    """Build a StructuredQuery without running pydantic validation.

    ``model_construct`` lets tests feed values the interpreter would
    never produce, such as an operation outside the enum.
    """
    op = QueryOperation(operation) if operation in QueryOperation.__members__ else operation
    return StructuredQuery.model_construct(
        statement=statement,
        parameters=parameters or [],
        operation=op,
        explanation="",
    )


# ── Valid queries ─────────────────────────────────────────────────────


class TestValidQueries:
    """Queries that should pass all validation checks."""

    def test_select_without_parameters(self) -> None:
        query = _make_query("SELECT * FROM users ORDER BY created_at DESC LIMIT 100")
        assert validate_query(query) is query

    def test_insert_with_two_parameters(self) -> None:
        query = _make_query(
            "INSERT INTO users (name, email) VALUES ($1, $2) RETURNING *",
            ["John Doe", "john@example.com"],
            "INSERT",
        )
        assert validate_query(query) is query

    def test_update_with_out_of_order_placeholders(self) -> None:
        """Placeholder order in the text does not matter, only the set."""
        query = _make_query(
            "UPDATE users SET name = $2, updated_at = CURRENT_TIMESTAMP WHERE id = $1 RETURNING *",
            [3, "Jane Smith"],
            "UPDATE",
        )
        assert validate_query(query) is query

    def test_delete_with_trailing_semicolon(self) -> None:
        query = _make_query("DELETE FROM users WHERE id = $1 RETURNING *;", [5], "DELETE")
        assert validate_query(query) is query

    def test_repeated_placeholder(self) -> None:
        query = _make_query(
            "SELECT * FROM users WHERE name ILIKE $1 OR email ILIKE $1 LIMIT 100",
            ["%john%"],
        )
        assert validate_query(query) is query

    def test_cte_with_matching_verb(self) -> None:
        query = _make_query(
            "WITH recent AS (SELECT * FROM users LIMIT 10) SELECT * FROM recent",
        )
        assert validate_query(query) is query

    def test_query_is_not_mutated(self) -> None:
        query = StructuredQuery(
            statement="SELECT * FROM users WHERE id = $1 LIMIT 1",
            parameters=[1],
            operation=QueryOperation.SELECT,
        )
        before = query.model_dump()
        validate_query(query)
        assert query.model_dump() == before


# ── Operation whitelist ──────────────────────────────────────────────


class TestOperationCheck:
    """Operations outside the closed set are rejected first."""

    @pytest.mark.parametrize("operation", ["DROP", "ALTER", "TRUNCATE", "select", ""])
    def test_unsupported_operation(self, operation: str) -> None:
        query = _make_query("DROP TABLE users", operation=operation)
        with pytest.raises(UnsupportedOperationFailure):
            validate_query(query)

    def test_operation_checked_before_empty_statement(self) -> None:
        query = _make_query("", operation="GRANT")
        with pytest.raises(UnsupportedOperationFailure):
            validate_query(query)

    def test_model_rejects_unknown_operation(self) -> None:
        """Interpreter output never carries an unknown operation: the model refuses it."""
        with pytest.raises(ValidationError):
            StructuredQuery(statement="DROP TABLE users", parameters=[], operation="DROP")


# ── Empty statement ──────────────────────────────────────────────────


class TestEmptyStatement:
    """Blank statements never reach the database."""

    @pytest.mark.parametrize("statement", ["", "   ", "\n\t"])
    def test_empty(self, statement: str) -> None:
        with pytest.raises(EmptyStatementFailure):
            validate_query(_make_query(statement))


# ── Statement kind ───────────────────────────────────────────────────


class TestStatementKind:
    """The statement must be a single statement matching its operation."""

    def test_verb_mismatch(self) -> None:
        query = _make_query("DELETE FROM users WHERE id = $1", [1], "SELECT")
        with pytest.raises(UnsupportedOperationFailure, match="DELETE"):
            validate_query(query)

    def test_stacked_statements(self) -> None:
        query = _make_query("SELECT * FROM users; DROP TABLE users", [], "SELECT")
        with pytest.raises(UnsupportedOperationFailure, match="Multiple statements"):
            validate_query(query)

    def test_semicolon_inside_literal_is_not_a_second_statement(self) -> None:
        query = _make_query("SELECT * FROM users WHERE name = 'a;b' LIMIT 1")
        assert validate_query(query) is query

    def test_cte_without_matching_verb(self) -> None:
        query = _make_query(
            "WITH gone AS (DELETE FROM users RETURNING *) SELECT * FROM gone",
            operation="UPDATE",
        )
        with pytest.raises(UnsupportedOperationFailure):
            validate_query(query)

    def test_data_modifying_cte_under_select(self) -> None:
        query = _make_query("WITH d AS (DELETE FROM users RETURNING *) SELECT * FROM d")
        with pytest.raises(UnsupportedOperationFailure, match="DELETE"):
            validate_query(query)

    def test_cte_main_statement_must_match(self) -> None:
        query = _make_query(
            "WITH ids AS (SELECT id FROM users WHERE name ILIKE $1) "
            "DELETE FROM users WHERE id IN (SELECT id FROM ids) RETURNING *",
            ["%bot%"],
            "SELECT",
        )
        with pytest.raises(UnsupportedOperationFailure, match="after WITH is DELETE"):
            validate_query(query)

    def test_cte_feeding_matching_write(self) -> None:
        query = _make_query(
            "WITH ids AS (SELECT id FROM users WHERE name ILIKE $1) "
            "DELETE FROM users WHERE id IN (SELECT id FROM ids) RETURNING *",
            ["%bot%"],
            "DELETE",
        )
        assert validate_query(query) is query

    def test_upsert_inside_cte(self) -> None:
        query = _make_query(
            "WITH up AS (INSERT INTO users (name, email) VALUES ($1, $2) "
            "ON CONFLICT (email) DO UPDATE SET name = $1 RETURNING *) SELECT * FROM up",
            ["John", "john@example.com"],
            "SELECT",
        )
        with pytest.raises(UnsupportedOperationFailure, match="INSERT"):
            validate_query(query)

    def test_keyword_inside_column_name_is_ignored(self) -> None:
        query = _make_query(
            "WITH recent AS (SELECT id, updated_at FROM users LIMIT 10) SELECT * FROM recent",
        )
        assert validate_query(query) is query


# ── Placeholder / parameter agreement ────────────────────────────────


class TestParameterAgreement:
    """Placeholders must be exactly $1..$N for N parameters."""

    def test_missing_parameter(self) -> None:
        query = _make_query("SELECT * FROM users WHERE id = $1 AND name = $2", [1])
        with pytest.raises(ParameterMismatchFailure, match=r"\$2"):
            validate_query(query)

    def test_unused_trailing_parameter(self) -> None:
        query = _make_query("SELECT * FROM users WHERE id = $1", [1, "extra"])
        with pytest.raises(ParameterMismatchFailure, match="unused"):
            validate_query(query)

    def test_gap_in_placeholders(self) -> None:
        query = _make_query("SELECT * FROM users WHERE id = $1 OR id = $3", [1, 2, 3])
        with pytest.raises(ParameterMismatchFailure):
            validate_query(query)

    def test_parameters_without_placeholders(self) -> None:
        query = _make_query("SELECT * FROM users LIMIT 100", ["%john%"])
        with pytest.raises(ParameterMismatchFailure):
            validate_query(query)

    def test_zero_index_placeholder(self) -> None:
        query = _make_query("SELECT * FROM users WHERE id = $0", [])
        with pytest.raises(ParameterMismatchFailure):
            validate_query(query)

    def test_checked_after_statement_kind(self) -> None:
        query = _make_query("DROP TABLE users", [1], "SELECT")
        with pytest.raises(UnsupportedOperationFailure):
            validate_query(query)


# ── Advisory literal check ───────────────────────────────────────────


class TestInlinedLiterals:
    """Quoted literals are logged but never rejected."""

    def test_literal_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        query = _make_query("SELECT * FROM users WHERE name = 'John' LIMIT 10")

        with caplog.at_level(logging.WARNING):
            result = validate_query(query)

        assert result is query
        assert any("quoted literal" in r.getMessage() for r in caplog.records)

    def test_no_literal_no_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        query = _make_query("SELECT * FROM users WHERE name ILIKE $1 LIMIT 10", ["%j%"])

        with caplog.at_level(logging.WARNING):
            validate_query(query)

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_find_inlined_literals(self) -> None:
        sql = "SELECT * FROM users WHERE name = 'O''Brien' AND email = 'x@y.z'"
        assert find_inlined_literals(sql) == ["'O''Brien'", "'x@y.z'"]


# ── Helpers ──────────────────────────────────────────────────────────


class TestPlaceholderIndices:
    def test_extracts_indices(self) -> None:
        assert placeholder_indices("VALUES ($1, $2, $10)") == {1, 2, 10}

    def test_no_placeholders(self) -> None:
        assert placeholder_indices("SELECT 1") == set()
