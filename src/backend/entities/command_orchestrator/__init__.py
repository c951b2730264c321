"""Command Orchestrator package for handling free-text user commands."""

from .orchestrator import (
    DEFAULT_CONVERSATION_REPLY,
    CommandOrchestrator,
    load_orchestrator_prompt,
)

__all__ = ["DEFAULT_CONVERSATION_REPLY", "CommandOrchestrator", "load_orchestrator_prompt"]
