"""
Shared models for entities.

These models are used across the pipeline components and the API.
"""

from .query import ParameterValue, QueryOperation, StructuredQuery
from .responses import (
    CommandEnvelope,
    Conversational,
    ConversationReply,
    DatabaseIntent,
    ExecutionResult,
    FailureEnvelope,
    IntentClassification,
    IntentDecision,
    UserStats,
)

__all__ = [
    # Query (interpreter output)
    "ParameterValue",
    "QueryOperation",
    "StructuredQuery",
    # Envelopes (pipeline output)
    "CommandEnvelope",
    "ConversationReply",
    "ExecutionResult",
    "FailureEnvelope",
    # Intent classification
    "Conversational",
    "DatabaseIntent",
    "IntentClassification",
    "IntentDecision",
    # Statistics
    "UserStats",
]
