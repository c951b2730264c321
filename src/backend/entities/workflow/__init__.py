"""
Command pipeline wiring.

``PipelineClients`` / ``create_pipeline_clients`` provide dependency
injection for the ``CommandOrchestrator``.
"""

from .clients import ChatAgentGenerator, PipelineClients, create_chat_agent, create_pipeline_clients

__all__ = [
    "ChatAgentGenerator",
    "PipelineClients",
    "create_chat_agent",
    "create_pipeline_clients",
]
