from __future__ import annotations

"""High-level gateway service.

``GatewayService`` is the application-facing API of the agent core:

- ``converse``: run the tool-invocation loop for a new user prompt.
- ``decide``: apply an external approval decision. A denial ends the
  conversation; an approval executes the pending invocation and resumes the
  loop with its output appended to the history.

Both return a ``ConversationOutcome``. Neither raises for request-level
failures (unknown or expired request ids, provider errors); those are
reported as ``failed`` outcomes.
"""

import logging

from .approvals import ApprovalWorkflow
from .errors import RequestExpiredError, RequestNotFoundError
from .registry import ModuleRegistry
from .runtime import ConversationEngine
from .schemas.domain import ApprovalState, ConversationOutcome, ConversationStatus, ToolOutput

logger = logging.getLogger(__name__)


class GatewayService:
    """Orchestrate conversations and approval decisions."""

    def __init__(self, *, engine: ConversationEngine, workflow: ApprovalWorkflow, registry: ModuleRegistry) -> None:
        self._engine = engine
        self._workflow = workflow
        self._registry = registry

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    @property
    def workflow(self) -> ApprovalWorkflow:
        return self._workflow

    async def converse(self, prompt: str) -> ConversationOutcome:
        logger.info(f"Starting conversation ({len(prompt)} chars)")
        outcome = await self._engine.converse(prompt)
        logger.info(f"Conversation ended with status={outcome.status.value}")
        return outcome

    async def decide(self, request_id: str, approved: bool) -> ConversationOutcome:
        """
        Apply an approval decision for ``request_id``.

        Args:
            request_id: Identifier returned with the approval-required outcome.
            approved: True to execute the pending invocation, False to deny it.

        Returns:
            ConversationOutcome: ``denied``, the resumed conversation's outcome,
            or ``failed`` with ``RequestNotFound``/``RequestExpired``.
        """
        try:
            decision = await self._workflow.decide(request_id, approved)
        except (RequestNotFoundError, RequestExpiredError) as e:
            logger.warning(f"Approval decision rejected: {e}")
            return ConversationOutcome(status=ConversationStatus.failed, message=str(e), error_kind=e.kind)

        pending = decision.pending
        if decision.state == ApprovalState.denied:
            return ConversationOutcome(
                status=ConversationStatus.denied,
                message=f"Request to run module '{pending.module}' command '{pending.command}' was denied.",
                request_id=pending.request_id,
                module=pending.module,
                command=pending.command,
                tool_outputs=list(pending.prior_results),
            )

        assert decision.result is not None
        output = ToolOutput(module=pending.module, command=pending.command, args=pending.args, result=decision.result)
        return await self._engine.resume(pending, output)
