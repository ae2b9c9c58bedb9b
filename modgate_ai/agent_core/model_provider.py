"""
Model provider seam for the conversation engine.

The engine only depends on the ``ModelClient`` protocol: given a prompt, a
system instruction and (optionally) the rendered history of prior tool
outputs, return the model's reply as text.

``PydanticAIModelClient`` implements the protocol with a pydantic-ai
``Agent``. The model may be given as a provider-qualified string such as
``"openai:gpt-4o-mini"`` or as a pydantic-ai ``Model`` instance (for example
``FunctionModel`` in tests).

With ``structured=True`` the agent is allowed to answer either with plain text
or with an ``InvocationIntent``; a structured intent is rendered back into the
directive syntax so ``CommandParser`` stays the only place intents are read.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Tuple, Union, runtime_checkable

from pydantic_ai import Agent
from pydantic_ai.models import Model

from .errors import ProviderError
from .parsing import render_directive
from .schemas.domain import InvocationIntent

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelClient(Protocol):
    async def generate(self, prompt: str, system_prompt: str, prior_tool_output: Optional[str] = None) -> str: ...


def compose_prompt(prompt: str, prior_tool_output: Optional[str] = None) -> str:
    """Append the tool output history to the user prompt."""
    if not prior_tool_output:
        return prompt
    return f"{prompt}\n\nPrevious tool outputs (oldest first):\n{prior_tool_output}"


class PydanticAIModelClient:
    """``ModelClient`` backed by a pydantic-ai ``Agent``.

    The agent is built lazily, so constructing the client never requires
    provider credentials. Only the agent for the latest system prompt is kept;
    a changed module catalogue replaces it.
    """

    def __init__(self, model: Union[str, Model], *, structured: bool = False) -> None:
        self._model = model
        self._structured = structured
        self._agent: Optional[Tuple[str, Agent[None, Any]]] = None

    @property
    def model_name(self) -> str:
        if isinstance(self._model, str):
            return self._model
        return getattr(self._model, "model_name", type(self._model).__name__)

    def _agent_for(self, system_prompt: str) -> Agent[None, Any]:
        current = self._agent
        if current is not None and current[0] == system_prompt:
            return current[1]
        output_type: Any = [InvocationIntent, str] if self._structured else str
        agent = Agent(self._model, output_type=output_type, system_prompt=system_prompt)
        self._agent = (system_prompt, agent)
        return agent

    async def generate(self, prompt: str, system_prompt: str, prior_tool_output: Optional[str] = None) -> str:
        """
        Ask the model for its next reply.

        Raises:
            ProviderError: The provider call failed (network, auth, rate limit,
                unusable output).
        """
        try:
            agent = self._agent_for(system_prompt)
            res = await agent.run(compose_prompt(prompt, prior_tool_output))
        except Exception as e:
            logger.error(f"Model call to {self.model_name} failed: {e}")
            raise ProviderError(f"Model provider error: {e}") from e

        output = res.output
        if isinstance(output, InvocationIntent):
            logger.debug(f"Structured intent from model: {output.module}.{output.command}")
            return render_directive(output)
        return str(output)
