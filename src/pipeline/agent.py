# src/pipeline/agent.py — v1
"""Agent invocation: the boundary between the run loop and the models.

The orchestrator only knows ``BaseStepAgent.invoke``. ``LLMStepAgent`` is
the default implementation: it builds a role prompt from the step, the
sermon settings and the accumulated research, routes the call to the
provider:model resolved for the step, and returns the generated markdown.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable

from pydantic import BaseModel

from sermonflow.config.settings import Settings
from sermonflow.core.models import PipelineInput, StepDefinition
from sermonflow.llm.base_client import BaseLLMClient
from sermonflow.llm.client_factory import LLMClientCache
from sermonflow.llm.models import Message
from sermonflow.tracking.call_logger import CallLogger

logger = logging.getLogger(__name__)

EMPTY_RESULT_TEXT = "No result was generated."

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a specialist AI agent in a sermon-building pipeline."
)

# Role instruction per agent name; agents not listed get the default.
SYSTEM_INSTRUCTIONS: dict[str, str] = {
    "Original Text Analyst": (
        "You are an expert in Greek and Hebrew source texts. Analyze the etymology, "
        "tense and grammatical structure of the passage's key words in depth."
    ),
    "Manuscript Comparator": (
        "You are a biblical manuscript scholar. Compare the major translations "
        "(NIV, NASB, ESV, KJV and others) and draw out their theological nuances."
    ),
    "Biblical Geography Expert": (
        "You are a biblical geographer. Explain what the locations, terrain and city "
        "layouts behind the events contribute to the message."
    ),
    "Historical-Cultural Expert": (
        "You are an expert in biblical history and culture. Describe the social customs, "
        "political situation and religious background of the time."
    ),
    "Structure Analyst": (
        "You are an expert in sentence structure and logical analysis. Trace the logical "
        "flow of the passage and divide it into paragraphs."
    ),
    "Theological Analyst": (
        "You are a systematic theologian. Analyze the character of God the passage reveals "
        "and its meaning in redemptive history."
    ),
    "Rhetorical Analyst": (
        "You are a rhetoric specialist. Analyze the passage's persuasive strategy, points of "
        "emphasis and rhetorical impact on its hearers."
    ),
    "Core Message Architect": (
        "You are a preaching strategist. Synthesize the research into a single core message "
        "(the Big Idea) and practical applications."
    ),
    "Outline Designer": (
        "You are a sermon structure specialist. Design an outline with a well balanced "
        "introduction, body and conclusion."
    ),
    "Sermon Script Writer": (
        "You are an outstanding sermon writer. Write a moving, logically sound full sermon "
        "suited to the chosen style and audience."
    ),
    "Sermon Reviewer": (
        "You are a sermon critic. Evaluate the manuscript's theological soundness, literary "
        "quality and fitness of application, and give it a score out of 5."
    ),
}


class AgentInvocationError(Exception):
    """Raised when an agent cannot produce a result.

    ``reason`` is the human-readable description shown in the event log.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class AgentRequest(BaseModel):
    """Everything an agent receives for one step invocation."""

    step: StepDefinition
    pipeline_input: PipelineInput
    accumulated_context: str = ""
    feedback: str | None = None


class BaseStepAgent(ABC):
    """Produces the text artifact of one step."""

    @abstractmethod
    async def invoke(self, request: AgentRequest) -> str:
        """Return the generated text, or raise AgentInvocationError."""


def system_instruction_for(agent_name: str) -> str:
    return SYSTEM_INSTRUCTIONS.get(agent_name, DEFAULT_SYSTEM_INSTRUCTION)


def build_prompt(request: AgentRequest) -> str:
    """Render the user prompt for one invocation."""
    step = request.step
    inp = request.pipeline_input
    lines = [
        f"Task: {step.agent_name} - {step.description}",
        "",
        "Sermon settings:",
        f"- Passage: {inp.passage}",
        f"- Theme: {inp.theme}",
        f"- Audience: {inp.audience}",
        f"- Type: {inp.sermon_type}",
        f"- Length: {inp.length}",
        f"- Level: {inp.analysis_level}",
        "",
        "Research data from previous steps:",
        request.accumulated_context,
        "",
    ]
    if request.feedback:
        lines += [f"Additional user request: {request.feedback}", ""]
    lines.append(
        "Write the result in detailed markdown. Keep a professional, scholarly tone."
    )
    return "\n".join(lines)


class LLMStepAgent(BaseStepAgent):
    """Step agent backed by an LLM provider.

    Args:
        settings: Routing, temperature and token limits.
        client_provider: Callable returning the client for a step; defaults
            to an LLMClientCache over ``settings``.
        call_logger: Receives one record per call.
    """

    def __init__(
        self,
        settings: Settings,
        client_provider: Callable[[StepDefinition], BaseLLMClient] | None = None,
        call_logger: CallLogger | None = None,
    ) -> None:
        self._settings = settings
        self._client_provider = client_provider or LLMClientCache(settings)
        self._call_logger = call_logger or CallLogger()

    @property
    def call_logger(self) -> CallLogger:
        return self._call_logger

    async def invoke(self, request: AgentRequest) -> str:
        step = request.step
        try:
            client = self._client_provider(step)
        except Exception as exc:
            raise AgentInvocationError(
                f"Agent {step.agent_name} execution failed: {exc}"
            ) from exc

        messages = [Message(role="user", content=build_prompt(request))]
        start = time.monotonic()
        try:
            response = await client.complete(
                messages,
                system=system_instruction_for(step.agent_name),
                max_tokens=self._settings.llm_max_tokens,
                temperature=self._settings.llm_default_temperature,
            )
        except Exception as exc:
            self._call_logger.record_failure(
                agent=step.agent_name,
                step=step.id,
                provider=client.provider_name,
                model=client.model,
                error=str(exc) or type(exc).__name__,
                latency_ms=int((time.monotonic() - start) * 1000),
            )
            logger.error("LLM call failed for step %s: %s", step.id, exc)
            raise AgentInvocationError(
                f"Agent {step.agent_name} execution failed: {str(exc) or type(exc).__name__}"
            ) from exc

        self._call_logger.record(agent=step.agent_name, step=step.id, response=response)
        logger.debug(
            "Step %s answered by %s:%s (%d tokens, %d ms)",
            step.id,
            response.provider,
            response.model,
            response.total_tokens,
            response.latency_ms,
        )
        return response.content or EMPTY_RESULT_TEXT
