"""
Structured query models.

These models represent the SQL statement produced by the interpreter
and consumed by the validator and executor.
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class QueryOperation(str, Enum):
    """Closed set of statement kinds the pipeline can run."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


ParameterValue = bool | int | float | str | None
"""A single bound value. Never an identifier or a clause."""


class StructuredQuery(BaseModel):
    """
    A parameterized SQL statement with its bound values.

    Produced fresh for each request and discarded after execution.
    User-supplied values travel only through ``parameters``; the
    statement references them with positional ``$1``, ``$2``, ...
    placeholders.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    statement: str = Field(
        validation_alias=AliasChoices("statement", "query"),
        description="A single SQL statement using $1, $2, ... placeholders for every user value",
    )

    parameters: list[ParameterValue] = Field(
        default_factory=list,
        description="Ordered values bound to $1..$N (1-indexed, contiguous)",
    )

    operation: QueryOperation = Field(
        description="Type of SQL operation: SELECT, INSERT, UPDATE or DELETE"
    )

    explanation: str = Field(
        default="",
        description="Brief explanation of what the statement does (informational only)",
    )
