"""
Response envelope and intent models.

Every call into the command pipeline ends in exactly one envelope:
an ``ExecutionResult``, a ``ConversationReply`` or a ``FailureEnvelope``.
All three carry a ``success`` flag.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from .query import QueryOperation, StructuredQuery


class ExecutionResult(BaseModel):
    """Normalized outcome of a successfully executed statement."""

    success: Literal[True] = True

    rows: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Returned rows in order, one mapping of column name to value per row",
    )

    count: int = Field(default=0, ge=0, description="Number of rows in ``rows``")

    operation: QueryOperation = Field(description="The operation that was executed")

    message: str = Field(default="", description="Human-readable summary of the outcome")


class ConversationReply(BaseModel):
    """Reply to a greeting or capability question. No database access."""

    success: Literal[True] = True
    message: str
    type: Literal["conversation"] = "conversation"


class FailureEnvelope(BaseModel):
    """Failure outcome surfaced to the caller instead of an exception."""

    success: Literal[False] = False

    error: str = Field(description="Descriptive error message")

    error_type: str = Field(
        default="PipelineError",
        description="Name of the failure class that produced this envelope",
    )

    @classmethod
    def from_error(cls, error: Exception) -> "FailureEnvelope":
        """Build an envelope from a raised pipeline failure."""
        return cls(error=str(error) or type(error).__name__, error_type=type(error).__name__)


CommandEnvelope = ExecutionResult | ConversationReply | FailureEnvelope


# -- Intent classification ----------------------------------------------------


class IntentClassification(BaseModel):
    """Raw classification payload expected from the text generator."""

    intent: Literal["conversation", "database"] = Field(
        description="'database' for any request to read or change users, otherwise 'conversation'"
    )

    message: str | None = Field(
        default=None,
        description="Reply text for conversation intents",
    )


class Conversational(BaseModel):
    """The utterance is small talk or a capability question."""

    kind: Literal["conversation"] = "conversation"
    message: str


class DatabaseIntent(BaseModel):
    """The utterance asks for a database operation."""

    kind: Literal["database"] = "database"
    query: StructuredQuery


IntentDecision = Annotated[Conversational | DatabaseIntent, Field(discriminator="kind")]


# -- Statistics ---------------------------------------------------------------


class UserStats(BaseModel):
    """Aggregate counts over the ``users`` table."""

    total_users: int = Field(default=0, ge=0)
    recent_users: int = Field(default=0, ge=0, description="Created in the last 7 days")
    today_users: int = Field(default=0, ge=0, description="Created on the current date")
