"""Pipeline client container and Protocol adapters for dependency injection.

``PipelineClients`` bundles every I/O dependency the command pipeline
needs. Production code constructs it via ``create_pipeline_clients()``
from real Azure clients and the shared database pool; tests construct it
from in-memory fakes.

``ChatAgentGenerator`` wraps an Agent Framework ``ChatAgent`` so it
satisfies the ``TextGenerator`` protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from agent_framework import ChatAgent
from agent_framework_azure_ai import AzureAIClient
from azure.identity.aio import DefaultAzureCredential
from config.settings import Settings
from entities.shared.protocols import SqlExecutor, TextGenerator
from pydantic import BaseModel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol adapters
# ---------------------------------------------------------------------------


class ChatAgentGenerator:
    """``TextGenerator`` backed by an Agent Framework ``ChatAgent``.

    Each ``generate()`` call is a fresh, thread-less agent run, so no
    conversation history is shared between requests.

    Args:
        agent: Agent configured with the component's instructions.
    """

    def __init__(self, agent: ChatAgent) -> None:
        self._agent = agent

    async def generate(self, prompt: str, schema: type[BaseModel]) -> str:
        """Run the agent and return its reply text.

        Args:
            prompt: Per-call prompt text.
            schema: Pydantic model requested as the structured output format.

        Returns:
            The agent's reply text (possibly empty).
        """
        result = await self._agent.run(prompt, response_format=schema)
        return result.text or ""


def create_chat_agent(client: AzureAIClient, name: str, instructions: str) -> ChatAgent:
    """Create a ChatAgent with no tools (pure LLM reasoning).

    Args:
        client: Azure AI client for LLM access.
        name: Agent name shown in traces.
        instructions: Agent system prompt text.

    Returns:
        Configured ChatAgent.
    """
    return ChatAgent(
        name=name,
        instructions=instructions,
        chat_client=client,
    )


# ---------------------------------------------------------------------------
# PipelineClients dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineClients:
    """Immutable bundle of all I/O dependencies for the command pipeline.

    All fields use Protocol types, enabling full dependency injection.

    Args:
        orchestrator_generator: Generator for intent classification.
        interpreter_generator: Generator for SQL interpretation.
        db: Database collaborator (process-scoped pool).
    """

    orchestrator_generator: TextGenerator
    interpreter_generator: TextGenerator
    db: SqlExecutor


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_pipeline_clients(settings: Settings, db: SqlExecutor) -> PipelineClients:
    """Build a ``PipelineClients`` from application ``Settings``.

    Loads prompts from disk, creates one ``ChatAgent`` per component and
    wraps each in a ``ChatAgentGenerator``. The database handle is passed
    in so that its lifetime stays with the caller.

    Args:
        settings: Centralised application configuration.
        db: An opened database collaborator.

    Returns:
        Fully-initialised ``PipelineClients`` ready for the orchestrator.
    """
    # -- Credential --------------------------------------------------------
    credential = (
        DefaultAzureCredential(managed_identity_client_id=settings.azure_client_id)
        if settings.azure_client_id
        else DefaultAzureCredential()
    )

    # -- LLM clients -------------------------------------------------------
    orchestrator_model = (
        settings.azure_ai_orchestrator_model or settings.azure_ai_model_deployment_name
    )
    interpreter_model = (
        settings.azure_ai_interpreter_model or settings.azure_ai_model_deployment_name
    )

    orchestrator_llm = AzureAIClient(
        project_endpoint=settings.azure_ai_project_endpoint,
        credential=credential,
        model_deployment_name=orchestrator_model,
        use_latest_version=True,
    )
    interpreter_llm = AzureAIClient(
        project_endpoint=settings.azure_ai_project_endpoint,
        credential=credential,
        model_deployment_name=interpreter_model,
        use_latest_version=True,
    )

    # -- Prompts (loaded once from disk) -----------------------------------
    from entities.command_orchestrator.orchestrator import (  # noqa: PLC0415
        load_orchestrator_prompt,
    )
    from entities.query_interpreter.interpreter import (  # noqa: PLC0415
        load_prompt as load_interpreter_prompt,
    )

    orchestrator_agent = create_chat_agent(
        orchestrator_llm, "user-management-agent", load_orchestrator_prompt()
    )
    interpreter_agent = create_chat_agent(
        interpreter_llm, "sql-generator", load_interpreter_prompt()
    )

    logger.info(
        "Pipeline clients created (orchestrator=%s, interpreter=%s)",
        orchestrator_model,
        interpreter_model,
    )

    return PipelineClients(
        orchestrator_generator=ChatAgentGenerator(orchestrator_agent),
        interpreter_generator=ChatAgentGenerator(interpreter_agent),
        db=db,
    )
