"""Shared utilities for pipeline components."""

from .errors import (
    EmptyStatementFailure,
    ExecutionFailure,
    GenerationFailure,
    MalformedOutputFailure,
    ParameterMismatchFailure,
    PipelineError,
    ResponseParseFailure,
    UnsupportedOperationFailure,
    ValidationFailure,
)
from .llm_reply import parse_json_reply
from .protocols import SqlExecutor, TextGenerator
from .sql_client import PostgresClient

__all__ = [
    "EmptyStatementFailure",
    "ExecutionFailure",
    "GenerationFailure",
    "MalformedOutputFailure",
    "ParameterMismatchFailure",
    "PipelineError",
    "PostgresClient",
    "ResponseParseFailure",
    "SqlExecutor",
    "TextGenerator",
    "UnsupportedOperationFailure",
    "ValidationFailure",
    "parse_json_reply",
]
