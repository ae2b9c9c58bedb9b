from __future__ import annotations

"""Approval workflow.

Per invocation the workflow walks the state machine::

    proposed -> auto_approved -> executed
    proposed -> awaiting_approval -> executed | denied

``propose`` is called by the conversation engine for every parsed intent.
Trusted modules run right away; any other module is stored in the
``PendingInvocationStore`` and the caller receives a request id. ``decide``
consumes that id exactly once: the entry is removed before the dispatcher
runs, so a retried decision can never execute the handler a second time.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ...core.monitoring import log_approval_decision
from ..dispatch import CommandDispatcher
from ..policy import GlobalPolicy
from ..schemas.domain import (
    ApprovalState,
    InvocationIntent,
    InvocationResult,
    PendingInvocation,
    ToolOutput,
)
from .store import PendingInvocationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Proposal:
    """Outcome of ``ApprovalWorkflow.propose``.

    ``result`` is set for ``auto_approved``; ``pending`` for ``awaiting_approval``.
    """

    state: ApprovalState
    result: Optional[InvocationResult] = None
    pending: Optional[PendingInvocation] = None


@dataclass(frozen=True)
class Decision:
    """Outcome of ``ApprovalWorkflow.decide``.

    ``result`` is set only when the state is ``executed``.
    """

    state: ApprovalState
    pending: PendingInvocation
    result: Optional[InvocationResult] = None


class ApprovalWorkflow:
    def __init__(self, policy: GlobalPolicy, store: PendingInvocationStore, dispatcher: CommandDispatcher) -> None:
        self._policy = policy
        self._store = store
        self._dispatcher = dispatcher

    @property
    def store(self) -> PendingInvocationStore:
        return self._store

    @property
    def policy(self) -> GlobalPolicy:
        return self._policy

    async def propose(
        self,
        intent: InvocationIntent,
        *,
        original_prompt: str,
        last_model_reply: str,
        prior_results: Sequence[ToolOutput] = (),
        depth: int = 0,
    ) -> Proposal:
        """
        Gate a parsed intent.

        Args:
            intent: The module/command (and args) extracted from the model reply.
            original_prompt: The user's prompt that started the conversation.
            last_model_reply: The reply containing the directive.
            prior_results: Tool outputs already produced in this conversation.
            depth: Number of tool calls already made in this conversation.

        Returns:
            Proposal: executed immediately for trusted modules, otherwise
            carrying the stored ``PendingInvocation``.
        """
        decision = self._policy.decide(intent.module, intent.command)
        logger.debug(f"Proposed {intent.module}.{intent.command}: {decision.reason}")

        if not decision.require_approval:
            result = await self._dispatcher.run(intent.module, intent.command, intent.args)
            logger.info(f"Auto-approved {intent.module}.{intent.command} executed (ok={result.ok})")
            return Proposal(state=ApprovalState.auto_approved, result=result)

        pending = PendingInvocation(
            module=intent.module,
            command=intent.command,
            args=dict(intent.args),
            original_prompt=original_prompt,
            last_model_reply=last_model_reply,
            prior_results=list(prior_results),
            depth=depth,
        )
        pending = await self._store.put(pending)
        logger.info(f"Invocation {intent.module}.{intent.command} awaiting approval as {pending.request_id}")
        return Proposal(state=ApprovalState.awaiting_approval, pending=pending)

    async def decide(self, request_id: str, approved: bool) -> Decision:
        """
        Apply an external approval decision.

        Raises:
            RequestNotFoundError: Unknown or already consumed request id.
            RequestExpiredError: The pending invocation outlived its TTL.
        """
        pending = await self._store.pop(request_id)
        log_approval_decision(request_id, pending.module, pending.command, approved)

        if not approved:
            logger.info(f"Request {request_id} denied; {pending.module}.{pending.command} not executed")
            return Decision(state=ApprovalState.denied, pending=pending)

        result = await self._dispatcher.run(pending.module, pending.command, pending.args)
        logger.info(f"Request {request_id} approved; {pending.module}.{pending.command} executed (ok={result.ok})")
        return Decision(state=ApprovalState.executed, pending=pending, result=result)

